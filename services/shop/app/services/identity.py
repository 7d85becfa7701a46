"""Phone normalization and client lookup.

Stored phones are canonical Argentine mobile numbers (``+549...``). Lookups
compare digits only, so a partial number typed in the booking form still
finds the client.
"""

from __future__ import annotations

import re
from typing import Iterable, Optional

from app.core.errors import ConflictError, ValidationError
from app.schemas.shop_schema import Client

COUNTRY_PREFIX = "549"
MIN_LOOKUP_DIGITS = 7

_NON_DIGITS = re.compile(r"\D")


def _digits(value: str) -> str:
    return _NON_DIGITS.sub("", value or "")


def normalize_phone(raw: str) -> str:
    digits = _digits(raw)
    if not digits:
        raise ValidationError("El teléfono no contiene dígitos")
    if digits.startswith(COUNTRY_PREFIX):
        return f"+{digits}"
    return f"+{COUNTRY_PREFIX}{digits}"


def find_by_phone(
    clients: Iterable[Client],
    partial: str,
    *,
    min_digits: int = MIN_LOOKUP_DIGITS,
) -> Optional[Client]:
    """First client whose phone digits contain the input digits, or the other way round."""
    wanted = _digits(partial)
    if len(wanted) < min_digits:
        return None

    for client in clients:
        stored = _digits(client.phone)
        if not stored:
            continue
        if wanted in stored or stored in wanted:
            return client
    return None


def ensure_unique_phone(clients: Iterable[Client], phone: str, client_id: Optional[str] = None) -> str:
    """Return the canonical phone, or fail if another client already has it."""
    canonical = normalize_phone(phone)
    for client in clients:
        if client.id == client_id or not _digits(client.phone):
            continue
        if normalize_phone(client.phone) == canonical:
            raise ConflictError(f"Ya existe un cliente con el teléfono {canonical}")
    return canonical
