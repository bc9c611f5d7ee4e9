"""
Exception hierarchy for Habitat.

Kept free of Flask imports so the pure ``logics`` layers can raise these
errors without pulling in the web stack. The Flask handlers that turn them
into JSON responses live in ``error_handlers``.
"""

from typing import Optional, Dict, Any


class HabitatError(Exception):
    """Base exception class for Habitat."""

    def __init__(
        self,
        message: str,
        code: str = 'UNKNOWN_ERROR',
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to dictionary for JSON response."""
        return {
            'success': False,
            'message': self.message,
            'code': self.code,
            'details': self.details
        }


class NotFoundError(HabitatError):
    """Resource not found."""

    def __init__(self, message: str = 'Resource not found', resource: str = None):
        super().__init__(
            message=message,
            code='NOT_FOUND',
            status_code=404,
            details={'resource': resource} if resource else None
        )


class ValidationError(HabitatError):
    """Input validation failed."""

    def __init__(self, message: str = 'Validation failed', errors: Dict = None):
        super().__init__(
            message=message,
            code='VALIDATION_ERROR',
            status_code=400,
            details={'errors': errors} if errors else None
        )


class InvalidConfigurationError(HabitatError):
    """A reward policy, threshold table or unit definition is invalid.

    The engine refuses to compute a result instead of guessing a fallback.
    """

    def __init__(self, message: str = 'Invalid scoring configuration', field: str = None):
        super().__init__(
            message=message,
            code='INVALID_CONFIGURATION',
            status_code=422,
            details={'field': field} if field else None
        )


class ScoringError(HabitatError):
    """An attempt cannot be scored against the given unit."""

    def __init__(self, message: str = 'Attempt cannot be scored', unit_id: str = None):
        super().__init__(
            message=message,
            code='SCORING_ERROR',
            status_code=400,
            details={'unit_id': unit_id} if unit_id else None
        )


class UnscoreableStepError(ScoringError):
    """The step type carries no answers to score (video, dialogue, ...)."""

    def __init__(self, step_type: str):
        super().__init__(message=f"Step type '{step_type}' is not scoreable")
        self.code = 'UNSCOREABLE_STEP'
        self.details = {'step_type': step_type}
