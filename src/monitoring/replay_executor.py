"""In-memory query executor replaying canned monitoring backend responses.

Implements the QueryExecutor ABC as a drop-in replacement for a live
backend in offline runs and tests.

Example YAML:
```yaml
responses:
  - match: "quantile_over_time"
    samples:
      - metric: {resource: pods, verb: GET, scope: resource, quantile: "0.99"}
        value: 0.5
```
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Tuple, Union

import yaml

from src.core.exceptions import ConfigurationError, QueryExecutionError
from src.models.sample import Sample
from src.monitoring.collector import QueryExecutor


@dataclass
class ReplayResponse:
    """Samples returned for every query containing ``match``."""

    match: str
    samples: List[Sample] = field(default_factory=list)


class ReplayQueryExecutor(QueryExecutor):
    """In-memory backend answering queries by substring match.

    The first response whose ``match`` occurs in the query text wins.

    Attributes:
        _responses: Canned responses in match priority order
        _strict: Raise QueryExecutionError for unmatched queries
        _history: Issued (query, query_time) pairs
    """

    def __init__(self, responses: List[ReplayResponse], strict: bool = False):
        self._responses = list(responses)
        self._strict = strict
        self._history: List[Tuple[str, datetime]] = []
        self.logger = logging.getLogger(__name__)

    @property
    def history(self) -> List[Tuple[str, datetime]]:
        return list(self._history)

    def query(self, query: str, query_time: datetime) -> List[Sample]:
        self._history.append((query, query_time))
        for response in self._responses:
            if response.match in query:
                self.logger.debug(f"Replaying {len(response.samples)} samples for {response.match!r}")
                return list(response.samples)

        if self._strict:
            raise QueryExecutionError(query, "no replay response matches")
        self.logger.debug(f"No replay response for query, returning empty result: {query}")
        return []

    @classmethod
    def from_dict(cls, data: dict, strict: bool = False) -> "ReplayQueryExecutor":
        responses = []
        for entry in data.get("responses") or []:
            if not isinstance(entry, dict) or "match" not in entry:
                raise ConfigurationError(f"Replay response needs a 'match' key: {entry!r}")
            try:
                samples = [Sample.from_dict(s) for s in entry.get("samples") or []]
            except (TypeError, ValueError, AttributeError) as e:
                raise ConfigurationError(f"Invalid replay sample for {entry['match']!r}: {e}") from e
            responses.append(ReplayResponse(match=str(entry["match"]), samples=samples))
        return cls(responses, strict=strict)

    @classmethod
    def from_yaml(cls, path: Union[str, Path], strict: bool = False) -> "ReplayQueryExecutor":
        yaml_file = Path(path)
        if not yaml_file.exists():
            raise ConfigurationError(f"Replay responses not found: {yaml_file}")
        try:
            with open(yaml_file, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Failed to parse replay file {yaml_file}: {e}") from e
        except OSError as e:
            raise ConfigurationError(f"Cannot read replay file {yaml_file}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Replay file {yaml_file} must contain a mapping")
        return cls.from_dict(data, strict=strict)
