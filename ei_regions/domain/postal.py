"""Canadian postal code normalisation."""

from __future__ import annotations

import re

from ei_regions.domain.exceptions import InvalidPostalCodeError

_WHITESPACE_RE = re.compile(r"\s+")


def normalise_postal_code(raw: str | None) -> str:
    """Return the canonical store key: uppercase with all whitespace removed.

    "k1a 0a1", "K1A0A1" and " K1A  0A1 " all map to "K1A0A1".
    """
    if raw is None:
        raise InvalidPostalCodeError("Postal code is required")
    cleaned = _WHITESPACE_RE.sub("", raw).upper()
    if not cleaned:
        raise InvalidPostalCodeError("Postal code is empty")
    return cleaned
