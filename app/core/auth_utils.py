from jose import jwt, JWTError
from fastapi import HTTPException

from app.core.config import JWT_SECRET, JWT_ALGORITHM
from app.models.enums import UserRole


def decode_token(token: str):
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])

        if "sub" not in payload or "role" not in payload:
            raise HTTPException(status_code=401, detail="Invalid token payload")

        try:
            UserRole(payload["role"])
        except ValueError:
            raise HTTPException(status_code=401, detail="Invalid role")

        return payload

    except JWTError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
