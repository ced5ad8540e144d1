"""Authentication utilities: password hashing and JWT tokens."""

from datetime import datetime, timedelta, timezone

import bcrypt
from jose import JWTError, jwt

from flowgenie.config import Settings
from flowgenie.errors import ConfigError

BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    pw = password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    pw = plain.encode("utf-8")[:72]
    return bcrypt.checkpw(pw, hashed.encode("utf-8"))


def _require_secret(settings: Settings) -> str:
    if not settings.jwt_secret:
        raise ConfigError("FG_JWT_SECRET not configured")
    return settings.jwt_secret


def create_access_token(
    settings: Settings,
    user_id: str,
    email: str,
    flow_address: str | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {"id": user_id, "email": email, "flowAddress": flow_address, "exp": expire}
    return jwt.encode(payload, _require_secret(settings), algorithm=settings.jwt_algorithm)


def decode_access_token(settings: Settings, token: str) -> dict | None:
    """Decode JWT and return its claims. Returns None on failure."""
    secret = _require_secret(settings)
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if not payload.get("id"):
        return None
    return payload
