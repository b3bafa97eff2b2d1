import pytest

from app.core.positions import (
    FALLBACK_DIFFICULTY_TEXT,
    FALLBACK_POSITION_LEVEL,
    VALID_POSITIONS,
    get_position_metadata,
    is_valid_position,
)


@pytest.mark.parametrize("position", VALID_POSITIONS)
def test_every_position_has_wording(position):
    metadata = get_position_metadata(position)
    assert metadata.slug == position
    assert metadata.difficulty_text
    assert metadata.position_instruction


def test_levels_increase_with_seniority():
    levels = [get_position_metadata(position).level for position in VALID_POSITIONS]
    assert levels == sorted(levels)


def test_position_lookup_is_case_insensitive():
    assert get_position_metadata(" Senior ").slug == "senior"
    assert is_valid_position("EXPERT")
    assert not is_valid_position("ceo")
    assert not is_valid_position(None)


def test_unknown_position_gets_generic_wording():
    metadata = get_position_metadata("wizard")
    assert metadata.difficulty_text == FALLBACK_DIFFICULTY_TEXT
    assert metadata.level == FALLBACK_POSITION_LEVEL


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("POSITION_DIFFICULTY_TEXT_JUNIOR", "hands-on debugging skills")
    monkeypatch.setenv("POSITION_INSTRUCTION_JUNIOR", "aimed at a first-year developer")
    monkeypatch.setenv("POSITION_LEVEL_JUNIOR", "7")

    metadata = get_position_metadata("junior")
    assert metadata.difficulty_text == "hands-on debugging skills"
    assert metadata.position_instruction == "aimed at a first-year developer"
    assert metadata.level == 7


def test_non_integer_level_override_is_ignored(monkeypatch):
    monkeypatch.setenv("POSITION_LEVEL_SENIOR", "high")
    assert get_position_metadata("senior").level == 5
