"""
Sample collection from the monitoring backend.

All queries of a pass are evaluated at the same instant so latency, count and
slow-count results describe the same window.
"""

import logging
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List

from src.core.exceptions import QueryExecutionError
from src.models.sample import Sample
from src.monitoring.queries import LatencyQuery, format_quantile
from src.utils.logger import log_execution_time

logger = logging.getLogger(__name__)


class QueryExecutor(ABC):
    """Abstract interface of the query-executing backend."""

    @abstractmethod
    def query(self, query: str, query_time: datetime) -> List[Sample]:
        """
        Evaluate an instant query.

        Args:
            query: PromQL expression
            query_time: Evaluation instant

        Returns:
            Samples of the resulting instant vector

        Raises:
            QueryExecutionError: If the backend fails to evaluate the query
        """
        ...


class SampleCollector:
    """
    Runs queries against a QueryExecutor at one fixed evaluation instant.

    Fail-fast: the first failing query aborts collection and nothing
    collected so far is returned.
    """

    def __init__(self, executor: QueryExecutor, query_time: datetime):
        self._executor = executor
        self.query_time = query_time

    def collect(self, query: str) -> List[Sample]:
        logger.debug(f"Executing query at {self.query_time.isoformat()}: {query}")
        try:
            with log_execution_time(f"query {query!r}"):
                samples = self._executor.query(query, self.query_time)
        except QueryExecutionError:
            raise
        except Exception as e:
            raise QueryExecutionError(query, str(e)) from e
        return list(samples or [])

    def collect_all(self, queries: Iterable[str]) -> List[Sample]:
        samples: List[Sample] = []
        for query in queries:
            samples.extend(self.collect(query))
        return samples

    def collect_latency(self, queries: Iterable[LatencyQuery]) -> List[Sample]:
        """
        Collect latency samples.

        Results of queries that compute an explicit quantile are tagged with a
        'quantile' label, since the backend doesn't label them itself.
        """
        samples: List[Sample] = []
        for latency_query in queries:
            result = self.collect(latency_query.text)
            if latency_query.quantile is not None:
                tag = format_quantile(latency_query.quantile)
                result = [sample.with_label("quantile", tag) for sample in result]
            samples.extend(result)
        return samples
