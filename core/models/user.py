from __future__ import annotations

from typing import Any

from pydantic import BaseModel

from core.errors import ProfileIncompleteError

# fields the calculator cannot do without, in calculator-input names
REQUIRED_FOR_TARGETS = ("weight", "height", "age", "gender", "activityLevel", "goal")

# checklist shown to the user: (key, label)
COMPLETION_CHECKS = (
    ("height", "Height"),
    ("age", "Age"),
    ("gender", "Gender"),
    ("activityLevel", "Activity Level"),
    ("weight", "Current Weight"),
    ("target_weight", "Target Weight"),
    ("goal", "Fitness Goal"),
)


class ProfileSnapshot(BaseModel):
    """Latest known profile for one user, as read from the store.

    Any field may be missing; nothing here is defaulted.
    """

    user_id: str
    height: float | None = None
    age: int | None = None
    gender: str | None = None
    activity_level: str | None = None
    weight: float | None = None
    target_weight: float | None = None
    goal: str | None = None

    def _value(self, key: str) -> Any:
        return self.activity_level if key == "activityLevel" else getattr(self, key)

    def _filled(self, key: str) -> bool:
        return self._value(key) not in (None, "", 0)

    def missing_fields(self) -> list[str]:
        return [k for k in REQUIRED_FOR_TARGETS if not self._filled(k)]

    def completion(self) -> dict[str, Any]:
        checks = [
            {"key": key, "label": label, "completed": self._filled(key)}
            for key, label in COMPLETION_CHECKS
        ]
        missing = [c["key"] for c in checks if not c["completed"]]
        return {
            "checks": checks,
            "completed": len(checks) - len(missing),
            "total": len(checks),
            "is_complete": not missing,
            "missing": missing,
        }

    def require(self, keys: tuple[str, ...]) -> None:
        missing = [k for k in keys if not self._filled(k)]
        if missing:
            raise ProfileIncompleteError(missing)

    def to_payload(self) -> dict[str, Any]:
        """Calculator input; raises when required fields are absent."""
        self.require(REQUIRED_FOR_TARGETS)
        return {k: self._value(k) for k in REQUIRED_FOR_TARGETS}
