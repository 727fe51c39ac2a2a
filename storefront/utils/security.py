# storefront/utils/security.py
from datetime import datetime, timedelta, timezone
from uuid import UUID

import jwt

from storefront.utils.settings import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRES_SECONDS


def create_access_token(user_id: UUID, expires_in: int = JWT_EXPIRES_SECONDS) -> str:
    payload = {
        "userId": str(user_id),
        "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> UUID:
    """Raises jwt.PyJWTError (or ValueError for a malformed userId)."""
    payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    if "userId" not in payload:
        raise jwt.InvalidTokenError("userId claim missing")
    return UUID(str(payload["userId"]))
