"""Business validation rules for profile payloads."""

import math
from datetime import date
from typing import Callable

from domain.entities.profile import ProfileInput, calculate_age
from domain.services.errors import FieldViolation

MIN_NAME_LENGTH = 2
MAX_NAME_LENGTH = 100
MIN_AGE = 18
MAX_AGE = 80
MIN_HEIGHT_CM = 100.0
MAX_HEIGHT_CM = 250.0
MIN_WEIGHT_KG = 30.0
MAX_WEIGHT_KG = 200.0


class ProfileValidator:
    """Stateless validator for profile creation and update payloads.

    Every rule runs independently so a single call reports all violated
    fields. The only input besides the payload is ``today``, supplied by the
    injected clock.
    """

    def __init__(self, today: Callable[[], date] = date.today) -> None:
        self._today = today

    def validate(self, payload: ProfileInput) -> list[FieldViolation]:
        violations: list[FieldViolation] = []
        violations.extend(self._check_name(payload.name))
        violations.extend(self._check_date_of_birth(payload))
        violations.extend(
            self._check_measure(
                "height", payload.height, MIN_HEIGHT_CM, MAX_HEIGHT_CM, "Height", "cm"
            )
        )
        violations.extend(
            self._check_measure(
                "weight", payload.weight, MIN_WEIGHT_KG, MAX_WEIGHT_KG, "Weight", "kg"
            )
        )
        return violations

    def _check_name(self, name: str) -> list[FieldViolation]:
        length = len(name)
        if length < MIN_NAME_LENGTH:
            return [
                FieldViolation(
                    "name", f"Name must be at least {MIN_NAME_LENGTH} characters long"
                )
            ]
        if length > MAX_NAME_LENGTH:
            return [
                FieldViolation("name", f"Name must not exceed {MAX_NAME_LENGTH} characters")
            ]
        return []

    def _check_date_of_birth(self, payload: ProfileInput) -> list[FieldViolation]:
        try:
            dob = payload.parsed_date_of_birth()
        except ValueError:
            return [
                FieldViolation("date_of_birth", "Invalid date format, expected YYYY-MM-DD")
            ]

        age = calculate_age(dob, self._today())
        if age < MIN_AGE:
            return [FieldViolation("date_of_birth", f"Age must be at least {MIN_AGE} years")]
        if age > MAX_AGE:
            return [FieldViolation("date_of_birth", f"Age must not exceed {MAX_AGE} years")]
        return []

    @staticmethod
    def _check_measure(
        field: str, value: float, lower: float, upper: float, label: str, unit: str
    ) -> list[FieldViolation]:
        if value <= 0:
            return [FieldViolation(field, f"{label} must be greater than 0")]
        if not math.isfinite(value) or value < lower or value > upper:
            return [
                FieldViolation(
                    field, f"{label} must be between {lower:g} and {upper:g} {unit}"
                )
            ]
        return []
