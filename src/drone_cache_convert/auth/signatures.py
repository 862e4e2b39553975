"""HTTP signature verification for conversion requests.

The CI server signs every extension request with the shared secret following
the HTTP Signatures draft (``hmac-sha256``): the ``Signature`` header lists
the signed header names and carries a base64 HMAC of the signing string. A
``Digest`` header binds the JSON body to that signature.

Key Responsibilities:
    - Parse ``Signature`` (or ``Authorization: Signature``) header values
    - Rebuild the signing string from the request and verify the HMAC
    - Require a signed SHA-256 body digest and check it against the body

Collaborators:
    - Upstream: :mod:`drone_cache_convert.auth.dependencies`
    - Downstream: ``hmac`` / ``hashlib`` from the standard library

Side Effects:
    - None; functions are pure

Thread Safety:
    - Thread-safe
"""

# ============================================================================
# IMPORTS
# ============================================================================

from __future__ import annotations

import base64
import hashlib
import hmac
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from ..utils.errors import FoundationError

# ============================================================================
# CONSTANTS
# ============================================================================

ALGORITHM = "hmac-sha256"
REQUEST_TARGET = "(request-target)"
DIGEST_PREFIX = "SHA-256="
_PARAM_PATTERN = re.compile(r'\s*([A-Za-z]+)\s*=\s*"([^"]*)"\s*(?:,|$)')


# ============================================================================
# MODELS
# ============================================================================


class SignatureError(FoundationError):
    """Raised when a request signature is missing, malformed or invalid."""

    status = 401
    type = "https://drone-cache-convert/errors/signature"


@dataclass(frozen=True, slots=True)
class SignatureParameters:
    key_id: str
    algorithm: str
    headers: tuple[str, ...]
    signature: str


# ============================================================================
# PARSING
# ============================================================================


def parse_signature_header(value: str) -> SignatureParameters:
    """Parse ``keyId="...",algorithm="...",headers="...",signature="..."``."""
    text = value.strip()
    if text.lower().startswith("signature "):
        text = text[len("signature ") :]

    params: dict[str, str] = {}
    position = 0
    while position < len(text):
        match = _PARAM_PATTERN.match(text, position)
        if match is None:
            raise SignatureError("Malformed signature header")
        params[match.group(1)] = match.group(2)
        position = match.end()

    signature = params.get("signature")
    if not signature:
        raise SignatureError("Signature header is missing the signature parameter")
    headers = tuple(params.get("headers", "date").lower().split())
    return SignatureParameters(
        key_id=params.get("keyId", ""),
        algorithm=params.get("algorithm", ALGORITHM).lower(),
        headers=headers,
        signature=signature,
    )


# ============================================================================
# SIGNING
# ============================================================================


def _lower_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {name.lower(): value for name, value in headers.items()}


def signing_string(
    method: str, path: str, headers: Mapping[str, str], names: Sequence[str]
) -> str:
    """Build the newline separated ``name: value`` string covered by the signature."""
    lowered = _lower_headers(headers)
    lines = []
    for name in names:
        if name == REQUEST_TARGET:
            lines.append(f"{REQUEST_TARGET}: {method.lower()} {path}")
            continue
        if name not in lowered:
            raise SignatureError(f"Signed header '{name}' is missing from the request")
        lines.append(f"{name}: {lowered[name]}")
    return "\n".join(lines)


def sign(secret: str, message: str) -> str:
    digest = hmac.new(secret.encode(), message.encode(), hashlib.sha256).digest()
    return base64.b64encode(digest).decode()


def body_digest(body: bytes) -> str:
    """Return the ``Digest`` header value for ``body``."""
    return DIGEST_PREFIX + base64.b64encode(hashlib.sha256(body).digest()).decode()


def sign_request(
    secret: str,
    method: str,
    path: str,
    headers: Mapping[str, str],
    names: Sequence[str] = (REQUEST_TARGET, "date", "digest"),
    *,
    key_id: str = "hmac-key",
) -> str:
    """Return a ``Signature`` header value for the given request parts."""
    signature = sign(secret, signing_string(method, path, headers, names))
    return (
        f'keyId="{key_id}",algorithm="{ALGORITHM}",'
        f'headers="{" ".join(names)}",signature="{signature}"'
    )


# ============================================================================
# VERIFICATION
# ============================================================================


def verify_request(
    secret: str,
    method: str,
    path: str,
    headers: Mapping[str, str],
    body: bytes,
) -> SignatureParameters:
    """Verify the signature and body digest of a request.

    Args:
        secret: Shared secret configured on both sides.
        method: HTTP method of the request.
        path: Request path including the query string.
        headers: Request headers (case-insensitive lookup is applied).
        body: Raw request body.

    Returns:
        The parsed signature parameters.

    Raises:
        SignatureError: When verification fails for any reason.
    """
    lowered = _lower_headers(headers)
    raw = lowered.get("signature")
    if raw is None:
        authorization = lowered.get("authorization", "")
        if authorization.lower().startswith("signature "):
            raw = authorization
    if not raw:
        raise SignatureError("Request is not signed")

    params = parse_signature_header(raw)
    if params.algorithm != ALGORITHM:
        raise SignatureError(f"Unsupported signature algorithm '{params.algorithm}'")

    expected = sign(secret, signing_string(method, path, lowered, params.headers))
    if not hmac.compare_digest(expected.encode(), params.signature.encode()):
        raise SignatureError("Invalid request signature")

    # The body is only bound to the signature through a signed SHA-256 digest.
    if "digest" not in params.headers:
        raise SignatureError("Request body digest is not signed")
    digest = lowered["digest"]
    if not digest.startswith(DIGEST_PREFIX):
        raise SignatureError("Unsupported body digest algorithm")
    if not hmac.compare_digest(digest.encode(), body_digest(body).encode()):
        raise SignatureError("Request body does not match its digest")
    return params


__all__ = [
    "ALGORITHM",
    "REQUEST_TARGET",
    "SignatureError",
    "SignatureParameters",
    "body_digest",
    "parse_signature_header",
    "sign",
    "sign_request",
    "signing_string",
    "verify_request",
]
