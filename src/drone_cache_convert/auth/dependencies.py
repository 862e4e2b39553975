"""FastAPI dependencies for request authentication."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from ..utils.logging import get_logger
from .signatures import SignatureError, SignatureParameters, verify_request

logger = get_logger(__name__)


async def verify_signature(request: Request) -> SignatureParameters:
    """Reject requests that are not signed with the configured shared secret.

    Raises:
        HTTPException: 401 when the signature cannot be verified.
    """
    secret: str = request.app.state.secret
    body = await request.body()
    path = request.url.path
    if request.url.query:
        path = f"{path}?{request.url.query}"
    try:
        return verify_request(secret, request.method, path, request.headers, body)
    except SignatureError as exc:
        logger.warning("auth.signature.rejected", extra={"reason": str(exc)})
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc)) from exc


__all__ = ["verify_signature"]
