"""Signed webhook intake."""

from .signature import parse_signature_header, sign, verify

__all__ = ["parse_signature_header", "sign", "verify"]
