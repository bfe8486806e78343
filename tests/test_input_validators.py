from __future__ import annotations

import pytest

from paddock.input.types import InputTag, TransformedInput
from paddock.input.validators import (
    BASE_PIPELINE,
    InputValidationError,
    NameLengthValidator,
    SelectionRangeValidator,
    ValidationContext,
    name_entry_pipeline,
    pipeline_for_state,
)


@pytest.mark.parametrize("index", range(-1, 7))
def test_selection_must_point_into_offered_options(index: int) -> None:
    ctx = ValidationContext(state="character_creation", option_count=6)
    item = TransformedInput(InputTag.selection, index, str(index + 1))

    if 0 <= index < 6:
        SelectionRangeValidator().validate(ctx=ctx, item=item)
    else:
        with pytest.raises(InputValidationError) as e:
            SelectionRangeValidator().validate(ctx=ctx, item=item)
        assert str(e.value) == "Invalid selection. Choose 1-6."


def test_selection_without_options_asks_to_generate() -> None:
    ctx = ValidationContext(state="character_creation", option_count=0)

    with pytest.raises(InputValidationError) as e:
        SelectionRangeValidator().validate(ctx=ctx, item=TransformedInput(InputTag.selection, 0, "1"))
    assert "Generate names first" in str(e.value)


@pytest.mark.parametrize(
    ("name", "error"),
    [
        ("A", "Name must be at least 2 characters long."),
        ("Ab", None),
        ("A" * 18, None),
        ("A" * 19, "Name must be 18 characters or less."),
    ],
)
def test_name_length_bounds(name: str, error: str | None) -> None:
    ctx = ValidationContext(state="character_creation")
    item = TransformedInput(InputTag.submission, name, "enter")

    if error is None:
        NameLengthValidator().validate(ctx=ctx, item=item)
        return
    with pytest.raises(InputValidationError) as e:
        NameLengthValidator().validate(ctx=ctx, item=item)
    assert str(e.value) == error


def test_length_only_checked_on_submit() -> None:
    ctx = ValidationContext(state="character_creation")
    NameLengthValidator(min_length=5).validate(ctx=ctx, item=TransformedInput(InputTag.buffer_update, "char_added", "a"))


def test_base_pipeline_rejects_invalid_and_error_tags() -> None:
    ctx = ValidationContext(state="character_creation")

    with pytest.raises(InputValidationError) as e:
        BASE_PIPELINE.validate(ctx=ctx, item=TransformedInput(InputTag.invalid, "!", "!"))
    assert str(e.value) == 'Invalid input "!" for character_creation'

    with pytest.raises(InputValidationError) as e:
        BASE_PIPELINE.validate(ctx=ctx, item=TransformedInput(InputTag.error, "Please enter a name first", "enter"))
    assert str(e.value) == "Please enter a name first"

    BASE_PIPELINE.validate(ctx=ctx, item=TransformedInput(InputTag.direct, "1", "1"))


def test_validation_errors_are_value_errors() -> None:
    ctx = ValidationContext(state="x")
    with pytest.raises(ValueError):
        name_entry_pipeline(min_length=3).validate(ctx=ctx, item=TransformedInput(InputTag.submission, "ab", "enter"))


def test_pipeline_lookup_falls_back_to_base() -> None:
    custom = name_entry_pipeline()
    pipelines = {"character_creation": custom}

    assert pipeline_for_state("character_creation", pipelines) is custom
    assert pipeline_for_state("training", pipelines) is BASE_PIPELINE
    assert pipeline_for_state(None, pipelines) is BASE_PIPELINE
    assert pipeline_for_state("character_creation") is BASE_PIPELINE
