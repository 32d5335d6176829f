"""Unit tests for prefixed id generation."""

from __future__ import annotations

from creative_engine.core.ids import generate_id


def test_generate_id_format_and_uniqueness() -> None:
    ids = [generate_id("act") for _ in range(200)]

    assert len(ids) == len(set(ids))
    assert all(item.startswith("act_") for item in ids)
    assert all(item[4:].isalnum() and item == item.lower() for item in ids)


def test_generate_id_is_sortable_by_creation_order() -> None:
    ids = [generate_id("snap", random_length=0) for _ in range(50)]

    assert ids == sorted(ids)
