"""Dashboard error types.

Standard error codes:
- DATA_UNAVAILABLE: A data provider could not supply a collection
- INSUFFICIENT_DATA: Risk scoring was asked to score an empty log sequence
- NARRATIVE_UNAVAILABLE: The narrative model failed or returned unusable output

DATA_UNAVAILABLE and INSUFFICIENT_DATA propagate to the caller.
NARRATIVE_UNAVAILABLE never leaves the narrative gateway; it is replaced by
the request's fallback value.
"""


class DashboardError(RuntimeError):
    """Base class for dashboard errors.

    Attributes:
        code: Error code (e.g., "DATA_UNAVAILABLE", "INSUFFICIENT_DATA")
        reason: Human-readable reason
    """

    code = "DASHBOARD_ERROR"

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"{self.code}: {reason}")


class DataUnavailable(DashboardError):
    """Raised when a data provider cannot reach its source."""

    code = "DATA_UNAVAILABLE"

    def __init__(self, source: str, reason: str):
        self.source = source
        super().__init__(f"{source}: {reason}")


class InsufficientData(DashboardError):
    """Raised when there is not enough data to compute a derived record."""

    code = "INSUFFICIENT_DATA"


class NarrativeUnavailable(DashboardError):
    """Raised inside the narrative gateway when a request cannot be fulfilled."""

    code = "NARRATIVE_UNAVAILABLE"

    def __init__(self, request: str, reason: str):
        self.request = request
        super().__init__(f"{request}: {reason}")
