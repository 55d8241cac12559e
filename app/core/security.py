import logging
import bcrypt
from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt
from app.core import config
from app.core.config import ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)

# passlib is kept only to verify hashes bcrypt itself rejects
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

BCRYPT_MAX_BYTES = 72


def hash_password(password: str) -> str:
    """
    Hash a password using bcrypt directly.
    
    Args:
        password: Plain text password (max 72 bytes in UTF-8, validated by the schema)
        
    Returns:
        Hashed password string (bcrypt format compatible with passlib)
        
    Raises:
        ValueError: If the password is over the bcrypt limit or cannot be hashed
    """
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > BCRYPT_MAX_BYTES:
        raise ValueError("Password too long (bcrypt limit 72 bytes)")
    try:
        return bcrypt.hashpw(password_bytes, bcrypt.gensalt()).decode("utf-8")
    except Exception as e:
        logger.error(f"Password hashing failed: {e}", exc_info=True)
        raise ValueError("Invalid password") from e


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """
    Verify a password against its hash.
    
    Accounts created through OAuth have no hash and never verify.
    """
    if not hashed:
        return False
    password_bytes = password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(password_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        try:
            return pwd_context.verify(password, hashed)
        except Exception as e:
            logger.warning(f"Password verification failed: {e}")
            return False


def _signing_key() -> str:
    if not config.SECRET_KEY:
        raise RuntimeError("SECRET_KEY is not set")
    return config.SECRET_KEY


def create_access_token(data: dict, expires_delta: timedelta = None) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, _signing_key(), algorithm=ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Decode a JWT. Raises jose.JWTError when invalid or expired."""
    return jwt.decode(token, _signing_key(), algorithms=[ALGORITHM])
