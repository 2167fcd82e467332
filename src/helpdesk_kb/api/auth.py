"""API key and JWT authentication for the HTTP API."""

from __future__ import annotations

import time

import jwt
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import APIKeyHeader, HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from helpdesk_kb.api.dependencies import get_settings
from helpdesk_kb.config.settings import Settings
from helpdesk_kb.observability.logger import get_logger

logger = get_logger("auth")

router = APIRouter(prefix="/auth", tags=["auth"])
api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)
bearer = HTTPBearer(auto_error=False)


class TokenRequest(BaseModel):
    api_key: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


def issue_token(api_key: str, settings: Settings) -> str:
    now = int(time.time())
    payload = {
        "sub": api_key[-6:],  # never embed the full key in the token
        "iat": now,
        "exp": now + settings.jwt_expiry_minutes * 60,
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str, settings: Settings) -> dict:
    try:
        return jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
        )
    except jwt.InvalidTokenError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
        )


@router.post("/token", response_model=TokenResponse)
async def create_token(
    body: TokenRequest,
    settings: Settings = Depends(get_settings),
) -> TokenResponse:
    """Exchange an API key for a JWT token."""
    valid_keys = settings.valid_api_keys
    if not valid_keys:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Authentication not configured",
        )
    if body.api_key not in valid_keys:
        logger.warning("invalid_api_key_attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid API key",
        )

    logger.info("token_issued", expiry_minutes=settings.jwt_expiry_minutes)
    return TokenResponse(
        access_token=issue_token(body.api_key, settings),
        expires_in=settings.jwt_expiry_minutes * 60,
    )


async def require_client(
    settings: Settings = Depends(get_settings),
    api_key: str | None = Depends(api_key_header),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> dict:
    """FastAPI dependency: accept either `X-API-Key` or a bearer JWT."""
    if api_key:
        if api_key in settings.valid_api_keys:
            return {"sub": api_key[-6:], "method": "api_key"}
        logger.warning("invalid_api_key_attempt")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized - Invalid or missing API key",
        )
    if credentials is not None:
        return {**decode_token(credentials.credentials, settings), "method": "jwt"}
    raise HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized - Invalid or missing API key",
    )
