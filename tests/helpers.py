from datetime import datetime

from app.core.jwt import create_access_token


def token_for(user):
    return create_access_token(user)


def at(value: str) -> datetime:
    """Naive UTC datetime from an ISO string, e.g. at("2025-05-01T10:00")."""
    return datetime.fromisoformat(value)
