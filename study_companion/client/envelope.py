"""Response envelopes of the REST layer, decoded once at the transport boundary.

The API answers ``{"items": [...]}`` for collections, ``{"item": {...}}`` for a
single created record and ``{"error": "..."}`` on failure. Anything else
(auth and AI payloads) is kept as a bare payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Union


@dataclass(frozen=True)
class ItemsEnvelope:
    items: List[Any]


@dataclass(frozen=True)
class ItemEnvelope:
    item: Dict[str, Any]


@dataclass(frozen=True)
class ErrorEnvelope:
    error: str


@dataclass(frozen=True)
class BareEnvelope:
    payload: Any


Envelope = Union[ItemsEnvelope, ItemEnvelope, ErrorEnvelope, BareEnvelope]


def decode_envelope(payload: Any) -> Envelope:
    if not isinstance(payload, dict):
        return BareEnvelope(payload)
    if isinstance(payload.get('items'), list):
        return ItemsEnvelope(payload['items'])
    if isinstance(payload.get('item'), dict):
        return ItemEnvelope(payload['item'])
    if 'error' in payload and payload['error']:
        return ErrorEnvelope(str(payload['error']))
    return BareEnvelope(payload)


def error_message(envelope: Envelope, default: str) -> str:
    """Remote ``error`` (or ``message``) text, else ``default``."""
    if isinstance(envelope, ErrorEnvelope):
        return envelope.error
    if isinstance(envelope, BareEnvelope) and isinstance(envelope.payload, dict):
        message = envelope.payload.get('message')
        if message:
            return str(message)
    return default
