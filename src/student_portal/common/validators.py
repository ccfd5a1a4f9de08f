from __future__ import annotations

import re
from typing import Any, Optional

from ..core.exceptions import ValidationError

_HEX_COLOR = re.compile(r"^#?([0-9a-fA-F]{3}|[0-9a-fA-F]{6})$")


def require_non_empty(value: Any, field_name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} must be {max_len} characters or less")
    return value


def optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def require_int(value: Any, field_name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def as_flag(value: Any) -> int:
    """Normalize checkbox-ish input (true, 1, "1", "true") to 1/0."""
    if isinstance(value, str):
        return 1 if value.strip().lower() in {"1", "true", "yes", "on"} else 0
    return 1 if value is True or value == 1 else 0


def normalize_color(value: Any, default: str) -> str:
    text = (value or "").strip() if isinstance(value, str) else ""
    m = _HEX_COLOR.match(text)
    if not m:
        return default
    digits = m.group(1)
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    return f"#{digits.upper()}"
