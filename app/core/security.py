from datetime import datetime, timedelta, timezone
from uuid import uuid4

import bcrypt
import jwt

from app.core.config import ACCESS_TOKEN_EXPIRE_MINUTES, JWT_ALGORITHM, SECRET_KEY
from app.core.exceptions import InvalidTokenError


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))


def new_jti() -> str:
    return uuid4().hex


def create_access_token(data: dict, jti: str, expires_delta: timedelta | None = None) -> str:
    """Sign `data` into a bearer token bound to the session id `jti`."""
    now = datetime.now(timezone.utc)
    payload = dict(data)
    payload.update(
        {
            "jti": jti,
            "iat": int(now.timestamp()),
            "exp": int((now + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))).timestamp()),
        }
    )
    return jwt.encode(payload, SECRET_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        return jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.PyJWTError as exc:
        raise InvalidTokenError() from exc
