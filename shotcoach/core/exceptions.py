from datetime import datetime


class ShotCoachError(RuntimeError):
    """Base class for domain errors raised by the coaching core."""


class InvalidGrinderConfigurationError(ShotCoachError):
    """Raised when a grinder scale cannot produce meaningful grind values."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__("Invalid grinder configuration: " + "; ".join(errors))


class RecommendationAlreadyExistsError(ShotCoachError):
    """Raised when a second recommendation is created for the same shot."""

    def __init__(self, shot_id: int):
        self.shot_id = shot_id
        super().__init__(f"Shot {shot_id} already has a recommendation")


class BeanNotFoundError(ShotCoachError):
    def __init__(self, bean_id: int):
        self.bean_id = bean_id
        super().__init__(f"Bean {bean_id} not found")


class ShotNotFoundError(ShotCoachError):
    def __init__(self, shot_id: int):
        self.shot_id = shot_id
        super().__init__(f"Shot {shot_id} not found")


class GrinderConfigurationNotFoundError(ShotCoachError):
    def __init__(self, bean_id: int | None = None):
        self.bean_id = bean_id
        detail = "No grinder configuration found"
        if bean_id is not None:
            detail = f"{detail} for bean {bean_id}"
        super().__init__(detail)


class ShotOutOfOrderError(ShotCoachError):
    """Raised when a shot is backdated before the bean's latest recorded shot."""

    def __init__(self, bean_id: int, latest_shot_at: datetime):
        self.bean_id = bean_id
        self.latest_shot_at = latest_shot_at
        super().__init__(
            f"Shot for bean {bean_id} cannot be recorded before the latest shot at {latest_shot_at.isoformat()}"
        )
