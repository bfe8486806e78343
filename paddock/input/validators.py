from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from paddock.input.types import InputTag, TransformedInput


class InputValidationError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class ValidationContext:
    """Inputs available to validators.

    Keep this tight and serializable-ish so we can safely log it.
    """

    state: str | None
    option_count: int = 0


class InputValidator(ABC):
    """A small, composable validation unit for a transformed input."""

    @abstractmethod
    def validate(self, *, ctx: ValidationContext, item: TransformedInput) -> None:
        raise NotImplementedError


@dataclass(frozen=True, slots=True)
class TagValidator(InputValidator):
    """Rejects inputs the transform step already judged unusable."""

    def validate(self, *, ctx: ValidationContext, item: TransformedInput) -> None:
        if item.tag == InputTag.invalid:
            raise InputValidationError(f'Invalid input "{item.value}" for {ctx.state}')
        if item.tag == InputTag.error:
            raise InputValidationError(str(item.value))


@dataclass(frozen=True, slots=True)
class NameLengthValidator(InputValidator):
    min_length: int = 2
    max_length: int = 18

    def validate(self, *, ctx: ValidationContext, item: TransformedInput) -> None:
        if item.tag != InputTag.submission:
            return
        name = str(item.value)
        if len(name) < self.min_length:
            raise InputValidationError(f"Name must be at least {self.min_length} characters long.")
        if len(name) > self.max_length:
            raise InputValidationError(f"Name must be {self.max_length} characters or less.")


@dataclass(frozen=True, slots=True)
class SelectionRangeValidator(InputValidator):
    """A selection must point into the currently offered option list."""

    generate_hint: str = 'Generate names first with "g".'

    def validate(self, *, ctx: ValidationContext, item: TransformedInput) -> None:
        if item.tag != InputTag.selection:
            return
        if ctx.option_count == 0:
            raise InputValidationError(f"No options available to select. {self.generate_hint}")
        index = int(item.value)
        if index < 0 or index >= ctx.option_count:
            raise InputValidationError(f"Invalid selection. Choose 1-{ctx.option_count}.")


@dataclass(frozen=True, slots=True)
class ValidatorPipeline:
    validators: tuple[InputValidator, ...]

    def validate(self, *, ctx: ValidationContext, item: TransformedInput) -> None:
        for v in self.validators:
            v.validate(ctx=ctx, item=item)


BASE_PIPELINE = ValidatorPipeline(validators=(TagValidator(),))


def name_entry_pipeline(*, min_length: int = 2, max_length: int = 18) -> ValidatorPipeline:
    return ValidatorPipeline(
        validators=(
            TagValidator(),
            SelectionRangeValidator(),
            NameLengthValidator(min_length=min_length, max_length=max_length),
        )
    )


def pipeline_for_state(
    state: str | None,
    pipelines: dict[str, ValidatorPipeline] | None = None,
) -> ValidatorPipeline:
    if state is None or pipelines is None:
        return BASE_PIPELINE
    return pipelines.get(state, BASE_PIPELINE)
