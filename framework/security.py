from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import jwt, JWTError
from passlib.context import CryptContext
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from pydantic import BaseModel
from framework.config import settings
from framework.exceptions.handler import AuthenticationError

# 1. Password hashing (BCrypt)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

# 2. Bearer scheme; auto_error disabled so both required and optional modes share it
bearer_scheme = HTTPBearer(auto_error=False)

ROLE_SUPER_ADMIN = "super_admin"
ROLE_TENANT_ADMIN = "tenant_admin"
ROLE_USER = "user"

# --- Core models ---

class Identity(BaseModel):
    """Authenticated caller extracted from a bearer token."""
    user_id: str
    tenant_id: Optional[str] = None
    role: str

# --- Helpers ---

def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def token_lifetime() -> timedelta:
    return timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

def create_access_token(identity: Identity, expires_delta: Optional[timedelta] = None) -> str:
    """Sign a token carrying the identity claims."""
    expire = datetime.now(timezone.utc) + (expires_delta or token_lifetime())
    to_encode = {
        "sub": identity.user_id,
        "tenant_id": identity.tenant_id,
        "role": identity.role,
        "exp": expire,
    }
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)

def decode_access_token(token: str) -> Identity:
    """Verify signature and expiry; raise AuthenticationError when the token is unusable."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        raise AuthenticationError("Token invalid or expired")

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise AuthenticationError("Token invalid or expired")

    return Identity(user_id=user_id, tenant_id=payload.get("tenant_id"), role=role)

# --- FastAPI dependencies ---

def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Identity:
    """
    Dependency: required mode. Use in router as identity: Identity = Depends(get_current_identity).
    """
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Token missing")
    return decode_access_token(credentials.credentials)

def get_optional_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)
) -> Optional[Identity]:
    """Dependency: optional mode. Missing or invalid tokens yield an anonymous request."""
    if credentials is None or not credentials.credentials:
        return None
    try:
        return decode_access_token(credentials.credentials)
    except AuthenticationError:
        return None
