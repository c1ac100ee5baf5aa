"""Identity of a recurring class: same start time, weekday and modality within a month."""

import base64
import binascii
import json
from dataclasses import dataclass

from fastapi import status

from gymledger.core.enums import Weekday
from gymledger.core.exceptions import ServiceError


@dataclass(frozen=True, order=True)
class ClassGroupKey:
    start_time: str
    weekday: Weekday
    modality: str

    @property
    def token(self) -> str:
        """URL-safe id for the API edge. Field values may contain any character."""
        raw = json.dumps([self.start_time, self.weekday.label, self.modality], ensure_ascii=False)
        return base64.urlsafe_b64encode(raw.encode("utf-8")).decode("ascii").rstrip("=")

    @property
    def legacy_id(self) -> str:
        return f"{self.start_time}-{self.weekday.label}-{self.modality}"

    @classmethod
    def parse(cls, value: str) -> "ClassGroupKey":
        """Accept a token or the legacy `HH:MM-Weekday-Modality` form."""
        value = (value or "").strip()
        parts = _decode_token(value)
        if parts is None:
            # Time and weekday never contain hyphens, so the modality keeps any of its own
            parts = value.split("-", 2)
        if len(parts) != 3 or not all(isinstance(p, str) and p.strip() for p in parts):
            raise ServiceError("Invalid class group id", status.HTTP_400_BAD_REQUEST)
        start_time, weekday_label, modality = parts
        weekday = Weekday.from_label(weekday_label)
        if weekday is None:
            raise ServiceError(f"Unknown weekday: {weekday_label}", status.HTTP_400_BAD_REQUEST)
        return cls(start_time=start_time.strip(), weekday=weekday, modality=modality)


def _decode_token(value: str):
    padded = value + "=" * (-len(value) % 4)
    try:
        decoded = json.loads(base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8"))
    except (binascii.Error, UnicodeError, ValueError):
        return None
    if not isinstance(decoded, list):
        return None
    return decoded
