"""
Password hashing and bearer token utilities.
"""
from datetime import datetime, timedelta, timezone
import bcrypt
import jwt

from app.core import config
from app.core.exceptions import NotAuthenticated


def _secret(password: str) -> bytes:
    # bcrypt only reads the first 72 bytes
    return password.encode("utf-8")[:72]


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_secret(password), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(_secret(plain_password), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(user_id: str, expires_delta: timedelta | None = None) -> str:
    """Issue a signed JWT whose subject is the user id."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=config.ACCESS_TOKEN_EXPIRE_MINUTES))
    payload = {"sub": user_id, "iat": now, "exp": expire}
    return jwt.encode(payload, config.SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def verify_jwt_token(token: str) -> dict:
    """
    Verify a JWT issued by create_access_token and return its payload.
    
    Raises:
        NotAuthenticated: If the token is invalid or expired
    """
    try:
        return jwt.decode(token, config.SECRET_KEY, algorithms=[config.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise NotAuthenticated("Token has expired")
    except jwt.InvalidTokenError as e:
        raise NotAuthenticated(f"Invalid token: {str(e)}")
