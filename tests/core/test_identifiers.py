from __future__ import annotations

import uuid

from shinara_sdk.core.identifiers import generate_anonymous_user_id, is_valid_external_id


def test_generate_anonymous_user_id_is_uuid4_and_unique() -> None:
    first = generate_anonymous_user_id()
    second = generate_anonymous_user_id()

    assert uuid.UUID(first).version == 4
    assert first != second


def test_is_valid_external_id_rejects_blank_and_padded_values() -> None:
    assert is_valid_external_id("user-1") is True
    assert is_valid_external_id("") is False
    assert is_valid_external_id("   ") is False
    assert is_valid_external_id(" user-1") is False
    assert is_valid_external_id(42) is False
    assert is_valid_external_id("x" * 513) is False
