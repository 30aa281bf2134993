"""
Authentication Utility - JWT handling.

Tokens are issued by the external auth service. Their claims carry
the caller's role and profile id, which the pipeline uses as the
authorization scope (company_id for companies, student_id for students).

Provides:
- JWT token creation/verification
- FastAPI dependencies for protected routes
"""

from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from placement_pipeline.core.config import get_settings

# Bearer token extractor
bearer_scheme = HTTPBearer()


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token."""
    settings = get_settings()
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=settings.jwt_expire_minutes))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and verify JWT token."""
    settings = get_settings()
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


async def get_current_user(credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme)) -> dict:
    """
    FastAPI dependency - Get current authenticated user from the token claims.

    Usage:
        @app.get("/protected")
        async def route(user: dict = Depends(get_current_user)):
            return user
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = decode_token(credentials.credentials)
    if not payload:
        raise credentials_exception

    user_id = payload.get("sub")
    role = payload.get("role")
    if not user_id or not role:
        raise credentials_exception

    return {
        "user_id": user_id,
        "role": role,
        "student_id": payload.get("student_id"),
        "company_id": payload.get("company_id"),
    }


async def get_current_student(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require student role and a student profile id."""
    if user["role"] != "student":
        raise HTTPException(status_code=403, detail="Students only")
    if user["student_id"] is None:
        raise HTTPException(status_code=404, detail="Student profile not found. Create profile first.")
    user["student_id"] = int(user["student_id"])
    return user


async def get_current_company(user: dict = Depends(get_current_user)) -> dict:
    """Dependency - Require company role and a company profile id."""
    if user["role"] != "company":
        raise HTTPException(status_code=403, detail="Companies only")
    if user["company_id"] is None:
        raise HTTPException(status_code=404, detail="Company profile not found. Create profile first.")
    user["company_id"] = int(user["company_id"])
    return user
