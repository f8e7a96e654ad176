from typing import Iterable
import re

from ..core.exceptions import ValidationError

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def require_fields(data, fields: Iterable[str], message: str = "All required fields must be filled"):
    """Raise ValidationError if any of ``fields`` is missing or blank on ``data``."""
    missing = [name for name in fields if is_blank(getattr(data, name, None))]
    if missing:
        raise ValidationError(message)


def is_valid_email(email: str) -> bool:
    return bool(EMAIL_PATTERN.match(email or ""))


def changed_fields(update_data) -> dict:
    """Fields present on a partial update; null counts as "keep the stored value"."""
    return update_data.model_dump(exclude_none=True)
