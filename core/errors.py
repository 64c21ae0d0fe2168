"""
core/errors.py
────────────────────────────────────────────────────────────────────────
Domain exceptions.  Raised where the problem is detected, translated to
HTTP responses once in `main.py`.
"""

from __future__ import annotations

from dataclasses import dataclass


class FitplanError(Exception):
    """Base class for every error this service raises on purpose."""


@dataclass(frozen=True)
class FieldError:
    field: str
    constraint: str

    def as_dict(self) -> dict[str, str]:
        return {"field": self.field, "constraint": self.constraint}


class ValidationError(FitplanError):
    """One or more input fields are missing, out of range or not allowed."""

    def __init__(self, errors: list[FieldError]) -> None:
        if not errors:
            raise ValueError("ValidationError needs at least one FieldError")
        self.errors = list(errors)
        super().__init__(
            "; ".join(f"{e.field}: {e.constraint}" for e in self.errors)
        )

    @property
    def fields(self) -> list[str]:
        return [e.field for e in self.errors]

    @classmethod
    def single(cls, field: str, constraint: str) -> "ValidationError":
        return cls([FieldError(field, constraint)])


class ProfileIncompleteError(ValidationError):
    """A stored profile lacks fields the calculator needs."""

    def __init__(self, missing: list[str]) -> None:
        super().__init__([FieldError(f, "missing") for f in missing])
        self.missing = list(missing)


class UnsafeTargetError(FitplanError):
    """Computed calorie target is below the safety floor or cannot be split."""

    def __init__(self, calories: int, floor: int, reason: str) -> None:
        self.calories = calories
        self.floor = floor
        self.reason = reason
        super().__init__(f"target unsafe for given inputs: {reason}")


class UpstreamGenerationError(FitplanError):
    """The text-generation service failed or returned unusable content."""

    def __init__(self, stage: str, detail: str, raw_output: str = "") -> None:
        self.stage = stage
        self.detail = detail
        self.raw_output = raw_output
        super().__init__(f"{stage}: {detail}")
