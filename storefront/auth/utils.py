
from datetime import datetime, timedelta, timezone
import secrets
from typing import Optional
from passlib.context import CryptContext
from jose import jwt, JWTError
from storefront.config.settings import config_settings

PASS_HASH_SCHEME=config_settings.PASS_HASH_SCHEME
JWT_SECRET = config_settings.JWT_SECRET
JWT_ALGO = config_settings.JWT_ALGO
DEFAULT_ROLE=config_settings.DEFAULT_ROLE

AUTH_TOKEN_EXPIRE_DAYS = int(config_settings.AUTH_TOKEN_EXPIRE_DAYS)

pwd_context = CryptContext(schemes=[PASS_HASH_SCHEME], deprecated="auto")

def hash_password(plain_password: str) -> str:
    return pwd_context.hash(plain_password)

def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def create_access_token(user_id,email,role=DEFAULT_ROLE,expires_days=AUTH_TOKEN_EXPIRE_DAYS):
    now=datetime.now(timezone.utc)
    expiry= now + (timedelta(days=expires_days))

    payload = {
        "sub": str(user_id),
        "email": email,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int(expiry.timestamp()),
    }
    token=jwt.encode(claims=payload,key=JWT_SECRET,algorithm=JWT_ALGO)
    return token

def generate_plain_token(nbytes: int = 48) -> str:
    return secrets.token_urlsafe(nbytes)

def make_guest_token() -> str:
    return generate_plain_token(24)

def decode_token(token:str) -> Optional[dict]:
    """To verify the signature , expiration and user claims of token"""
    try:
        token_data=jwt.decode(
        token,
        JWT_SECRET,
        algorithms=[JWT_ALGO]
        )
    except JWTError:
        return None
    if not token_data.get("sub"):
        return None
    return token_data
