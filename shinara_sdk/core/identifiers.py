from __future__ import annotations

import uuid


def generate_anonymous_user_id() -> str:
    """Generates the device-scoped external user id used before registration."""
    return str(uuid.uuid4())


def is_valid_external_id(value: object, *, max_length: int = 512) -> bool:
    if not isinstance(value, str):
        return False
    stripped = value.strip()
    return bool(stripped) and stripped == value and len(value) <= max_length
