"""
Labeled scalar sample returned by the monitoring backend
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional


@dataclass(frozen=True)
class Sample:
    """
    Single instant-vector element of a query result.

    Attributes:
        metric: Label set identifying the series (e.g. resource, verb)
        value: Scalar value at the evaluation instant
        timestamp: Evaluation instant reported by the backend, if any
    """

    metric: Dict[str, str] = field(default_factory=dict)
    value: float = 0.0
    timestamp: Optional[datetime] = None

    def label(self, name: str) -> str:
        """Return label value, empty string when the label is absent."""
        return self.metric.get(name, "")

    def with_label(self, name: str, value: str) -> "Sample":
        """Return a copy of the sample with one label added or replaced."""
        return Sample(
            metric={**self.metric, name: value},
            value=self.value,
            timestamp=self.timestamp,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "Sample":
        """Build sample from a plain mapping (replay fixtures)."""
        labels = data.get("metric") or {}
        return cls(
            metric={str(k): "" if v is None else str(v) for k, v in labels.items()},
            value=float(data.get("value", 0.0)),
        )
