from __future__ import annotations

from email.utils import formatdate

import pytest

from drone_cache_convert.auth.signatures import (
    SignatureError,
    body_digest,
    parse_signature_header,
    sign,
    sign_request,
    signing_string,
    verify_request,
)

SECRET = "shared-secret"
BODY = b'{"config": {"data": "kind: pipeline"}}'


def _signed_headers(body: bytes = BODY, secret: str = SECRET) -> dict[str, str]:
    headers = {"Date": formatdate(usegmt=True), "Digest": body_digest(body)}
    headers["Signature"] = sign_request(secret, "POST", "/", headers)
    return headers


def test_parse_signature_header():
    params = parse_signature_header(
        'keyId="hmac-key",algorithm="hmac-sha256",headers="(request-target) Date digest",signature="abc="'
    )
    assert params.key_id == "hmac-key"
    assert params.algorithm == "hmac-sha256"
    assert params.headers == ("(request-target)", "date", "digest")
    assert params.signature == "abc="


def test_parse_signature_header_defaults_to_date():
    params = parse_signature_header('Signature keyId="k",signature="xyz"')
    assert params.headers == ("date",)
    assert params.algorithm == "hmac-sha256"


@pytest.mark.parametrize("value", ["garbage", 'keyId="k"', 'keyId="k",signature=unquoted'])
def test_parse_signature_header_rejects_malformed_values(value: str):
    with pytest.raises(SignatureError):
        parse_signature_header(value)


def test_signing_string_renders_request_target():
    text = signing_string(
        "POST", "/", {"Date": "today", "Digest": "SHA-256=x"}, ("(request-target)", "date", "digest")
    )
    assert text == "(request-target): post /\ndate: today\ndigest: SHA-256=x"


def test_verify_accepts_signed_request():
    params = verify_request(SECRET, "POST", "/", _signed_headers(), BODY)
    assert params.key_id == "hmac-key"


def test_verify_accepts_authorization_header():
    headers = _signed_headers()
    headers["Authorization"] = "Signature " + headers.pop("Signature")
    verify_request(SECRET, "POST", "/", headers, BODY)


def test_verify_rejects_wrong_secret():
    with pytest.raises(SignatureError, match="Invalid request signature"):
        verify_request(SECRET, "POST", "/", _signed_headers(secret="other"), BODY)


def test_verify_rejects_tampered_body():
    with pytest.raises(SignatureError, match="digest"):
        verify_request(SECRET, "POST", "/", _signed_headers(), BODY + b" ")


def test_verify_rejects_signature_without_body_digest():
    headers = {"Date": formatdate(usegmt=True)}
    headers["Signature"] = sign_request(SECRET, "POST", "/", headers, names=("date",))
    with pytest.raises(SignatureError, match="digest is not signed"):
        verify_request(SECRET, "POST", "/", headers, b'{"config": {"data": "anything"}}')


def test_verify_rejects_unsigned_digest_header():
    headers = {"Date": formatdate(usegmt=True), "Digest": body_digest(BODY)}
    headers["Signature"] = sign_request(SECRET, "POST", "/", headers, names=("(request-target)", "date"))
    with pytest.raises(SignatureError, match="digest is not signed"):
        verify_request(SECRET, "POST", "/", headers, BODY)


def test_verify_rejects_other_digest_algorithms():
    headers = {"Date": "today", "Digest": "SHA-512=bogus"}
    headers["Signature"] = sign_request(SECRET, "POST", "/", headers)
    with pytest.raises(SignatureError, match="Unsupported body digest"):
        verify_request(SECRET, "POST", "/", headers, b"totally different body")


def test_verify_rejects_other_request_target():
    with pytest.raises(SignatureError):
        verify_request(SECRET, "POST", "/other", _signed_headers(), BODY)


def test_verify_rejects_unsigned_request():
    with pytest.raises(SignatureError, match="not signed"):
        verify_request(SECRET, "POST", "/", {"Date": "today"}, BODY)


def test_verify_rejects_missing_signed_header():
    headers = _signed_headers()
    del headers["Date"]
    with pytest.raises(SignatureError, match="missing"):
        verify_request(SECRET, "POST", "/", headers, BODY)


def test_verify_rejects_unsupported_algorithm():
    signature = sign(SECRET, "date: today")
    headers = {
        "Date": "today",
        "Signature": f'keyId="k",algorithm="rsa-sha256",headers="date",signature="{signature}"',
    }
    with pytest.raises(SignatureError, match="Unsupported"):
        verify_request(SECRET, "POST", "/", headers, BODY)


def test_signature_error_maps_to_unauthorized():
    assert SignatureError("nope").problem.status == 401
