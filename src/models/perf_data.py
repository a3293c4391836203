"""
Performance report format and measurement summary.
"""

import json
from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class DataItem:
    """Single report row: numeric data with a unit plus descriptive labels."""

    data: Dict[str, float]
    unit: str
    labels: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        result = {"data": dict(self.data), "unit": self.unit}
        if self.labels:
            result["labels"] = dict(self.labels)
        return result


@dataclass
class PerfData:
    """
    Versioned list of report rows.

    The version tag lets consumers detect format changes.
    """

    version: str
    data_items: List[DataItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "dataItems": [item.to_dict() for item in self.data_items],
        }

    def to_json(self) -> str:
        """Pretty-printed JSON with two-space indentation."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass
class Summary:
    """Named, rendered measurement output."""

    name: str
    ext: str
    content: str

    def file_name(self, timestamp: str) -> str:
        return f"{self.name}_{timestamp}.{self.ext}"
