"""
Social API: credentials and tokens.
Handles: bcrypt password hashing, gravatar avatars, JWT minting/verification.
"""

import hashlib
import time
from urllib.parse import urlencode

import bcrypt
import jwt
from pydantic import BaseModel, ConfigDict, ValidationError

ALGORITHM = "HS256"


class Identity(BaseModel):
    """The claim carried inside every token: who is making the request."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str


class InvalidTokenError(Exception):
    """Raised for any token that cannot be trusted (tampered, malformed, expired)."""


# --------------- Passwords ---------------

def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def check_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hashed.encode())
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def gravatar_url(email: str, size: int = 300, rating: str = "pg", default: str = "mm") -> str:
    digest = hashlib.md5(email.strip().lower().encode()).hexdigest()
    query = urlencode({"s": size, "r": rating, "d": default})
    return f"https://www.gravatar.com/avatar/{digest}?{query}"


# --------------- Tokens ---------------

class TokenService:
    def __init__(self, secret_key: str, expiry_seconds: int = 0):
        if not secret_key:
            raise ValueError("secret_key is required")
        self._secret_key = secret_key
        self._expiry_seconds = expiry_seconds

    def mint(self, identity: Identity) -> str:
        now = int(time.time())
        payload = {
            "user": {"id": identity.id, "name": identity.name},
            "iat": now,
        }
        if self._expiry_seconds > 0:
            payload["exp"] = now + self._expiry_seconds
        return jwt.encode(payload, self._secret_key, algorithm=ALGORITHM)

    def verify(self, token: str) -> Identity:
        """Return the identity embedded in ``token``.

        Every failure raises InvalidTokenError so callers cannot tell an
        expired token from a forged one.
        """
        if not token:
            raise InvalidTokenError("Token is empty")
        try:
            decoded = jwt.decode(token, self._secret_key, algorithms=[ALGORITHM])
        except jwt.PyJWTError as e:
            raise InvalidTokenError(str(e)) from e

        claim = decoded.get("user")
        if not isinstance(claim, dict):
            raise InvalidTokenError("Token carries no user claim")
        try:
            return Identity(id=str(claim["id"]), name=str(claim["name"]))
        except (KeyError, ValidationError) as e:
            raise InvalidTokenError("Token user claim is incomplete") from e
