"""Configuration and run-state exceptions."""

from typing import Any

from .base import CollabInsightError


class ConfigurationError(CollabInsightError):
    """Base class for configuration-related errors."""

    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason


class RunStateError(CollabInsightError):
    """Base class for course-run lifecycle errors."""

    pass


class RunAlreadyActiveError(RunStateError):
    """Raised when a second run is started for an exercise that is still running."""

    def __init__(self, exercise_id: str):
        super().__init__(
            f"Analysis already running for exercise {exercise_id}",
            details={"exercise_id": exercise_id},
        )
        self.exercise_id = exercise_id
