from decimal import Decimal, ROUND_HALF_UP


def calculate_deposit_split(total_amount: int, deposit_percentage: int | None):
    """
    Split a booking total into (deposit, balance).

    The deposit is total * percentage / 100 rounded half-up to a whole unit;
    the balance is whatever remains, so the two always add back to the total.
    """
    if total_amount < 0:
        raise ValueError("Total amount cannot be negative")

    pct = 100 if deposit_percentage is None else deposit_percentage
    if not 0 <= pct <= 100:
        raise ValueError("Deposit percentage must be between 0 and 100")

    deposit = int(
        (Decimal(total_amount) * Decimal(pct) / Decimal(100)).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )
    )
    balance = total_amount - deposit

    return deposit, balance
