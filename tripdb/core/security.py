"""Password hashing (bcrypt) and bearer token signing (PyJWT)."""
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import re
import jwt
import bcrypt

_EXPIRY_PATTERN = re.compile(r"^\s*(\d+)\s*([smhd]?)\s*$")
_EXPIRY_UNITS = {"": 1, "s": 1, "m": 60, "h": 3600, "d": 86400}


def hash_password(password: str, rounds: int = 10) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    """Check a candidate against a stored bcrypt hash.

    bcrypt compares in constant time. An empty or malformed stored hash never
    verifies.
    """
    if not password or not hashed:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        return False


def parse_expiry(expires_in: str) -> timedelta:
    """Turn ``"3600"``, ``"30m"``, ``"24h"`` or ``"7d"`` into a timedelta."""
    match = _EXPIRY_PATTERN.match(str(expires_in))
    if not match:
        raise ValueError(f"Invalid token expiry: {expires_in!r}")
    amount, unit = match.groups()
    return timedelta(seconds=int(amount) * _EXPIRY_UNITS[unit])


def issue_token(
    claims: Dict[str, Any],
    secret: str,
    expires_in: str = "24h",
    algorithm: str = "HS256",
) -> str:
    now = datetime.now(timezone.utc)
    payload: Dict[str, Any] = {
        **claims,
        "iat": now,
        "exp": now + parse_expiry(expires_in),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(token, secret, algorithms=[algorithm])
    except jwt.PyJWTError:
        return None
