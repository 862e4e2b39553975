"""Authentication helpers for the conversion gateway.

This package exposes the HTTP signature primitives shared with the CI server
and the FastAPI dependency that enforces them on the conversion endpoint.
"""

from __future__ import annotations

# ============================================================================
# IMPORTS
# ============================================================================

from .dependencies import verify_signature
from .signatures import (
    SignatureError,
    SignatureParameters,
    body_digest,
    sign_request,
    verify_request,
)

# ============================================================================
# EXPORTS
# ============================================================================

__all__ = [
    "SignatureError",
    "SignatureParameters",
    "body_digest",
    "sign_request",
    "verify_request",
    "verify_signature",
]
