from __future__ import annotations

import re
import time
from typing import Any, Dict, Optional

import httpx
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import jwt

from .config import get_settings


_http = httpx.Client(timeout=5)
_bearer = HTTPBearer(auto_error=False)

ANONYMOUS_OWNER = "anonymous"
_SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_\-]{8,128}$")


class JWKSCache:
    def __init__(self, ttl_seconds: float = 600) -> None:
        self._jwks: Optional[Dict[str, Any]] = None
        self._url: Optional[str] = None
        self._exp_ts: float = 0.0
        self._ttl = ttl_seconds

    def get(self, url: str) -> Dict[str, Any]:
        now = time.time()
        if self._jwks is None or url != self._url or now >= self._exp_ts:
            resp = _http.get(url)
            resp.raise_for_status()
            self._jwks = resp.json()
            self._url = url
            self._exp_ts = now + self._ttl
        return self._jwks  # type: ignore[return-value]


_jwks_cache = JWKSCache()


def _verify_jwt(token: str) -> Dict[str, Any]:
    settings = get_settings()
    if settings.auth_disable_verification:
        # Dev mode: claims are trusted without a signature check.
        try:
            return jwt.get_unverified_claims(token)
        except Exception as e:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Invalid token: {e}")

    if not settings.auth_issuer:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Auth issuer not configured")

    jwks_url = settings.auth_jwks_url or settings.auth_issuer.rstrip("/") + "/.well-known/jwks.json"
    try:
        jwks = _jwks_cache.get(jwks_url)
    except httpx.HTTPError as e:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"Unable to fetch signing keys: {e}")

    try:
        unverified = jwt.get_unverified_header(token)
        kid = unverified.get("kid")
        key = next((k for k in jwks.get("keys", []) if k.get("kid") == kid), None)
        if not key:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Signing key not found")
        return jwt.decode(
            token,
            key,
            algorithms=[key.get("alg", "RS256")],
            audience=settings.auth_audience,
            issuer=settings.auth_issuer,
        )
    except HTTPException:
        raise
    except Exception as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"JWT verification failed: {e}")


def get_current_principal(creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer)) -> Dict[str, Any]:
    if not creds or not creds.scheme.lower() == "bearer":
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")
    claims = _verify_jwt(creds.credentials)
    principal = {
        "sub": claims.get("sub"),
        "email": claims.get("email") or claims.get("email_address"),
        "claims": claims,
    }
    if not principal["sub"]:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token: no sub")
    return principal


def get_cart_owner(
    creds: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    cart_session: Optional[str] = Header(default=None, alias="X-Cart-Session"),
) -> str:
    """Resolve whose cart a request touches.

    A bearer token always wins. Without one, anonymous access is allowed only
    when ``auth_required`` is off; the ``X-Cart-Session`` header then keeps
    separate browser sessions apart.
    """
    if creds is not None:
        return get_current_principal(creds)["sub"]

    if get_settings().auth_required:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing bearer token")

    if cart_session:
        if not _SESSION_ID_PATTERN.match(cart_session):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid X-Cart-Session header")
        return f"session:{cart_session}"
    return ANONYMOUS_OWNER
