from __future__ import annotations

import math
from dataclasses import dataclass
from decimal import Decimal

from shotcoach.core.constants import (
    SCALE_MAX_CEILING,
    SCALE_MIN_FLOOR,
    STEP_SIZE_MAX,
    STEP_SIZE_MIN,
)
from shotcoach.core.exceptions import InvalidGrinderConfigurationError
from shotcoach.models.grinder_configuration import GrinderConfiguration

_EPSILON = 1e-9


def _decimal_places(value: float) -> int:
    exponent = Decimal(str(value)).normalize().as_tuple().exponent
    if not isinstance(exponent, int):
        return 0
    return max(0, -exponent)


def validate_grinder_scale(scale_min: float, scale_max: float, step_size: float) -> list[str]:
    errors: list[str] = []

    if scale_min >= scale_max:
        errors.append("Minimum scale value must be less than maximum scale value")
    if scale_min < SCALE_MIN_FLOOR:
        errors.append("Minimum scale value cannot be negative")
    if scale_max > SCALE_MAX_CEILING:
        errors.append(f"Maximum scale value cannot exceed {SCALE_MAX_CEILING:g}")

    if step_size <= 0:
        errors.append("Step size must be positive")
    elif step_size < STEP_SIZE_MIN:
        errors.append(f"Step size must be at least {STEP_SIZE_MIN:g}")
    elif step_size > STEP_SIZE_MAX:
        errors.append(f"Step size cannot exceed {STEP_SIZE_MAX:g}")
    elif scale_max > scale_min and step_size > scale_max - scale_min:
        errors.append("Step size cannot be larger than the scale range")

    return errors


@dataclass(frozen=True)
class GrinderScale:
    scale_min: float
    scale_max: float
    step_size: float

    @classmethod
    def from_configuration(cls, config: GrinderConfiguration) -> GrinderScale:
        return cls(
            scale_min=float(config.scale_min),
            scale_max=float(config.scale_max),
            step_size=float(config.step_size),
        )

    def validate(self) -> list[str]:
        return validate_grinder_scale(self.scale_min, self.scale_max, self.step_size)

    def ensure_valid(self) -> None:
        errors = self.validate()
        if errors:
            raise InvalidGrinderConfigurationError(errors)

    @property
    def decimals(self) -> int:
        return max(_decimal_places(self.step_size), _decimal_places(self.scale_min))

    def _aligned_step_count(self) -> int:
        return math.floor((self.scale_max - self.scale_min) / self.step_size + _EPSILON)

    def valid_values(self) -> list[float]:
        """Every selectable point: min, min + step, ... and max itself."""
        self.ensure_valid()
        values = [
            round(self.scale_min + index * self.step_size, self.decimals)
            for index in range(self._aligned_step_count() + 1)
        ]
        if self.scale_max - values[-1] > _EPSILON:
            values.append(round(self.scale_max, self.decimals))
        return values

    def round_to_nearest_step(self, value: float) -> float:
        """Clamp into the scale and snap to the closest selectable point."""
        self.ensure_valid()
        clamped = min(max(value, self.scale_min), self.scale_max)

        index = min(round((clamped - self.scale_min) / self.step_size), self._aligned_step_count())
        snapped = self.scale_min + index * self.step_size
        if abs(self.scale_max - clamped) < abs(snapped - clamped):
            snapped = self.scale_max

        return round(snapped, self.decimals)

    def format_value(self, value: float) -> str:
        decimals = _decimal_places(self.step_size)
        if decimals == 0 and self.step_size >= 1:
            return f"{round(value):d}"
        return f"{value:.{max(decimals, 1)}f}"
