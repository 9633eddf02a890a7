"""Stock keeping unit normalization."""

import re

from protean.exceptions import ValidationError

_SKU_PATTERN = re.compile(r"^[A-Z0-9-]{3,50}$")


def normalize_sku(code: str) -> str:
    """Upper-case and validate a SKU.

    Format: alphanumeric + hyphens, 3-50 chars.
    E.g., "ELEC-PHN-001", "SHOE-RUN-BLK-42"
    """
    normalized = (code or "").strip().upper()

    if not _SKU_PATTERN.match(normalized):
        raise ValidationError({"sku": ["SKU must be 3-50 alphanumeric characters or hyphens"]})

    if normalized.startswith("-") or normalized.endswith("-"):
        raise ValidationError({"sku": ["SKU must not start or end with a hyphen"]})

    if "--" in normalized:
        raise ValidationError({"sku": ["SKU must not contain consecutive hyphens"]})

    return normalized
