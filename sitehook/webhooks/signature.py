"""HMAC-SHA256 signature checks for webhook deliveries."""

from __future__ import annotations

import hashlib
import hmac
import re

from sitehook.errors import InvalidSignatureHeader
from sitehook.webhooks.models import SignatureHeader

ALGORITHM = "sha256"

_HEX_RE = re.compile(r"[0-9a-fA-F]+")


def parse_signature_header(value: str) -> SignatureHeader:
    """Split ``algorithm=hexdigest`` into its parts.

    Raises InvalidSignatureHeader if the separator is missing, the algorithm
    tag is empty, or the digest is not even-length hexadecimal.
    """
    algorithm, sep, hex_digest = value.strip().partition("=")
    if not sep or not algorithm:
        raise InvalidSignatureHeader("expected 'algorithm=hexdigest'")
    if not _HEX_RE.fullmatch(hex_digest):
        raise InvalidSignatureHeader("digest is not hexadecimal")
    if len(hex_digest) % 2:
        raise InvalidSignatureHeader("digest has an odd number of hex digits")
    return SignatureHeader(algorithm=algorithm.lower(), hex_digest=hex_digest)


def sign(secret: bytes, payload: bytes) -> str:
    """Return the header value a sender holding ``secret`` would attach."""
    return f"{ALGORITHM}=" + hmac.new(secret, payload, hashlib.sha256).hexdigest()


def verify(secret: bytes, header_value: str, payload: bytes) -> bool:
    """Check ``header_value`` against an HMAC-SHA256 of ``payload``.

    Malformed headers, unknown algorithms and mismatches all return False;
    this never raises on attacker-controlled input.
    """
    if not secret or not header_value:
        return False
    try:
        header = parse_signature_header(header_value)
    except InvalidSignatureHeader:
        return False
    if header.algorithm != ALGORITHM:
        return False

    sent = bytes.fromhex(header.hex_digest)
    expected = hmac.new(secret, payload, hashlib.sha256).digest()
    return hmac.compare_digest(expected, sent)
