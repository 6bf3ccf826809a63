"""
QR payload decoding.

A loyalty card QR code carries either a JSON object or just the customer id.
Decoding never fails: text that is not a JSON object becomes a RawIdentifier
and the accrual engine decides whether the result is usable.
"""

import json
import math
from dataclasses import dataclass
from typing import Optional, Union

DEFAULT_POINTS = 1

CUSTOMER_ID_KEYS = ("idUsuario", "userId", "customer_id")
POINTS_KEYS = ("cantidadPuntos", "puntos", "points")
BUSINESS_ID_KEYS = ("empresaId", "empresaUid", "business_id")


@dataclass(frozen=True)
class StructuredPayload:
    customer_id: Optional[str]
    points_hint: Optional[int] = None
    business_id: Optional[str] = None

    @property
    def points(self) -> int:
        return self.points_hint if self.points_hint is not None else DEFAULT_POINTS


@dataclass(frozen=True)
class RawIdentifier:
    value: str

    @property
    def customer_id(self) -> Optional[str]:
        return self.value or None

    @property
    def business_id(self) -> None:
        return None

    @property
    def points(self) -> int:
        return DEFAULT_POINTS


ScanPayload = Union[StructuredPayload, RawIdentifier]


def _first(data: dict, keys: tuple[str, ...]):
    for key in keys:
        value = data.get(key)
        if value is not None and value != "":
            return value
    return None


def _as_id(value) -> Optional[str]:
    if value is None or isinstance(value, (dict, list, bool)):
        return None
    text = str(value).strip()
    return text or None


def parse_points(value) -> Optional[int]:
    """Coerce a points hint to an int; None when absent or not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        value = value.strip()
        if not value:
            return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def parse_scan_payload(raw: str) -> ScanPayload:
    text = (raw or "").strip()
    try:
        data = json.loads(text)
    except ValueError:
        return RawIdentifier(text)

    if not isinstance(data, dict):
        return RawIdentifier(text)

    return StructuredPayload(
        customer_id=_as_id(_first(data, CUSTOMER_ID_KEYS)),
        points_hint=parse_points(_first(data, POINTS_KEYS)),
        business_id=_as_id(_first(data, BUSINESS_ID_KEYS)),
    )
