# =============================================================================
# File: unistay/security/jwt_auth.py
# Description: JWT verification for HTTP and WebSocket callers
# =============================================================================

from __future__ import annotations

import logging
from typing import Optional, Dict, Any
from uuid import UUID

from jose import jwt, JWTError
from fastapi import WebSocket, Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from unistay.config.jwt_config import get_jwt_config, JWTConfig

log = logging.getLogger("unistay.security.jwt")

# Application close code for sockets without a valid token
WS_UNAUTHORIZED = 4401


def decode_token_payload(token: str, config: Optional[JWTConfig] = None) -> Optional[Dict[str, Any]]:
    """
    Decode and validate a JWT string.
    Returns the payload dict if valid, else None.
    """
    if not token:
        return None
    config = config or get_jwt_config()
    options = {"verify_aud": config.audience is not None}
    try:
        return jwt.decode(
            token,
            config.secret_key.get_secret_value(),
            algorithms=[config.algorithm],
            audience=config.audience,
            issuer=config.issuer,
            options=options,
        )
    except JWTError as exc:
        preview = token[:20] + "..." if len(token) > 20 else token
        log.info(f"JWT decode error ({type(exc).__name__}): {exc}. Token preview: {preview}")
        return None


def get_user_id_from_token(token: str, config: Optional[JWTConfig] = None) -> Optional[UUID]:
    """User id from the subject claim of a valid token"""
    config = config or get_jwt_config()
    payload = decode_token_payload(token, config)
    if not payload:
        return None
    subject = payload.get(config.user_id_claim)
    try:
        return UUID(str(subject))
    except ValueError:
        log.debug(f"JWT payload has no UUID subject: {subject!r}")
        return None


# =============================================================================
# WebSocket Token Extraction
# =============================================================================
def get_websocket_token(websocket: WebSocket, token_from_query: Optional[str] = None) -> Optional[str]:
    """
    Token for a WebSocket handshake.
    Tries the ?token= query param, then the 'Authorization: Bearer <token>' header.
    """
    if token_from_query:
        return token_from_query

    auth = websocket.headers.get("Authorization")
    if auth:
        scheme, _, creds = auth.partition(" ")
        if scheme.lower() == "bearer" and creds.strip():
            return creds.strip()
    return None


# =============================================================================
# HTTP Bearer Authentication Dependency
# =============================================================================
security_scheme = HTTPBearer(auto_error=False)


async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security_scheme),
) -> dict:
    """
    FastAPI dependency for HTTP endpoints.
    - Expects 'Authorization: Bearer <token>'.
    - Returns dict with user_id or raises HTTPException(401).
    """
    if not credentials or credentials.scheme.lower() != "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid auth scheme")

    user_id = get_user_id_from_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired token")

    return {"user_id": user_id}
