"""Authentication utilities for AgriConnect backend."""

from datetime import datetime, timedelta, timezone
from typing import Annotated

import bcrypt
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from .config import Settings, get_settings

# Cookie name for httpOnly auth
AUTH_COOKIE_NAME = "agriconnect_auth"

# Make bearer optional to allow cookie fallback
security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    """Hash a demo-mode password using bcrypt."""
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode(), hashed.encode())
    except ValueError:
        return False


def create_access_token(
    settings: Settings,
    user_id: str,
    role: str,
    email: str | None = None,
    full_name: str | None = None,
    provider_token: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a JWT session token for a signed-in user."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))

    to_encode = {
        "sub": user_id,
        "role": role,
        "exp": expire,
        "iat": now,
        "type": "access",
    }
    if email:
        to_encode["email"] = email
    if full_name:
        to_encode["full_name"] = full_name
    # Supabase session token, needed to revoke the provider session on sign-out
    if provider_token:
        to_encode["provider_token"] = provider_token
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict:
    """Decode and validate a JWT token."""
    try:
        return jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


class AuthContext:
    """Identity carried by the session token."""

    def __init__(
        self,
        user_id: str,
        role: str,
        email: str | None = None,
        full_name: str | None = None,
        provider_token: str | None = None,
    ):
        self.user_id = user_id
        self.role = role
        self.email = email
        self.full_name = full_name
        self.provider_token = provider_token

    @property
    def is_farmer(self) -> bool:
        return self.role == "farmer"

    @property
    def is_labourer(self) -> bool:
        return self.role == "labourer"

    def require_role(self, role: str) -> None:
        """Raise 403 unless the user has ``role``."""
        if self.role != role:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Only a {role} can do this",
            )


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    settings: Annotated[Settings, Depends(get_settings)],
    request: Request,
) -> AuthContext:
    """Resolve the session from the Authorization header or the auth cookie."""
    token = credentials.credentials if credentials else request.cookies.get(AUTH_COOKIE_NAME)

    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated - provide Authorization header or auth cookie",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_token(token, settings)
    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or role not in ("farmer", "labourer"):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return AuthContext(
        user_id=user_id,
        role=role,
        email=payload.get("email"),
        full_name=payload.get("full_name"),
        provider_token=payload.get("provider_token"),
    )


# Type alias for dependency injection
CurrentUser = Annotated[AuthContext, Depends(get_current_user)]
