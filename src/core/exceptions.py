"""
Custom exceptions for the API responsiveness measurement
"""

from typing import List, Optional


class MeasurementError(Exception):
    """Base exception for measurement errors"""


class ConfigurationError(MeasurementError):
    """Configuration related errors"""


class QueryExecutionError(MeasurementError):
    """Monitoring backend failed to execute a query"""

    def __init__(self, query: str, message: str):
        self.query = query
        super().__init__(f"query {query!r} failed: {message}")


class MalformedSampleError(MeasurementError):
    """Sample carries a label that cannot be interpreted"""


class MetricViolationError(MeasurementError):
    """
    One or more metrics breached their objective.

    Not raised by the gatherer: it is returned next to the report so the
    caller decides how to treat the failed check.
    """

    def __init__(
        self, metric: str, details: str, violations: Optional[List[str]] = None
    ):
        self.metric = metric
        self.details = details
        self.violations = list(violations or [])
        super().__init__(f"metric violation: {metric}: {details}")
