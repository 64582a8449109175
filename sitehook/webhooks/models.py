"""Webhook request models."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SignatureHeader:
    algorithm: str
    hex_digest: str


@dataclass
class WebhookRequest:
    """One inbound delivery. ``raw_body`` is exactly what was on the wire."""

    raw_body: bytes
    headers: Mapping[str, str] = field(default_factory=dict)
    event_type: str = ""
    delivery_id: str = ""
