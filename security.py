import re
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
from pydantic import EmailStr, TypeAdapter, ValidationError

from errors import Forbidden

PASSWORD_REGEX = re.compile(r"^(?=.*\d)(?=.*[a-z])(?=.*[A-Z]).{6,20}$")

ALGORITHM = "HS256"

_email_adapter = TypeAdapter(EmailStr)


def is_valid_email(email: str) -> bool:
    if not email:
        return False
    try:
        _email_adapter.validate_python(email)
    except ValidationError:
        return False
    return True


def is_valid_password(password: str) -> bool:
    return bool(PASSWORD_REGEX.match(password or ""))


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    return bcrypt.checkpw(password.encode("utf-8"), hashed_password.encode("utf-8"))


def create_access_token(
    account_id: str, admin: bool, secret: str, ttl_minutes: Optional[int] = None
) -> str:
    """Sign a stateless session token.

    Tokens cannot be revoked server side. Without ``ttl_minutes`` no ``exp``
    claim is written and the token stays valid until the secret rotates.
    """
    claims: Dict[str, Any] = {"id": account_id, "admin": bool(admin)}
    if ttl_minutes:
        claims["exp"] = datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes)
    return jwt.encode(claims, secret, algorithm=ALGORITHM)


def decode_access_token(token: str, secret: str) -> Dict[str, Any]:
    try:
        claims = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except jwt.PyJWTError:
        raise Forbidden("Access token is invalid")
    if not claims.get("id"):
        raise Forbidden("Access token is invalid")
    return claims
