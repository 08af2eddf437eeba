"""
Typed errors raised by the scoring and bracket engines.
The HTTP layer maps them to responses through ``status_code``.
"""


class ScoringError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ScoringError):
    """Missing or inconsistent input"""
    status_code = 400


class PhaseTransitionError(ValidationError):
    """Requested match phase is not reachable from the current one"""


class NotFoundError(ScoringError):
    """Unknown match, innings, team or tournament"""
    status_code = 404


class InsufficientEntrants(ScoringError):
    status_code = 400


class NoMatchesGenerated(ScoringError):
    status_code = 500


class ConcurrencyConflict(ScoringError):
    """A bracket slot or match result was already decided differently"""
    status_code = 409
