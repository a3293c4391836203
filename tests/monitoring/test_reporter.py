"""
Unit tests for ranking, diagnostics and rendering (Reporter)
"""

import json
import logging
from datetime import timedelta

import pytest

from src.models.api_call import APICallMetric, LatencyMetric
from src.monitoring.reporter import CURRENT_API_CALL_METRICS_VERSION, Reporter, rank
from src.monitoring.validator import SLOValidator


def make_metric(resource, perc99_ms, verb="GET", scope="resource", count=0, slow_count=0):
    return APICallMetric(
        resource=resource,
        subresource="",
        verb=verb,
        scope=scope,
        latency=LatencyMetric(perc99=timedelta(milliseconds=perc99_ms)),
        count=count,
        slow_count=slow_count,
    )


class TestRank:
    def test_descending_perc99(self):
        metrics = [make_metric("a", 10), make_metric("b", 500), make_metric("c", 50)]

        ranked = rank(metrics)

        assert [m.latency.perc99 for m in ranked] == [
            timedelta(milliseconds=500),
            timedelta(milliseconds=50),
            timedelta(milliseconds=10),
        ]

    def test_ties_keep_input_order(self):
        metrics = [make_metric("x", 10), make_metric("y", 10), make_metric("z", 20)]

        assert [m.resource for m in rank(metrics)] == ["z", "x", "y"]


class TestLogTopMetrics:
    """Test diagnostic output selection."""

    @pytest.fixture
    def validator(self):
        return SLOValidator()

    def _log(self, caplog, ranked, validator, top_to_print=5):
        reporter = Reporter("test-id", top_to_print=top_to_print)
        failures = validator.validate_all(ranked)
        with caplog.at_level(logging.INFO, logger="src.monitoring.reporter"):
            printed = reporter.log_top_metrics(ranked, failures, validator.threshold)
        messages = [r.getMessage() for r in caplog.records if r.name == "src.monitoring.reporter"]
        return printed, messages

    def test_only_top_n_printed_when_all_pass(self, caplog, validator):
        ranked = rank([make_metric(f"r{i}", i) for i in range(8)])

        printed, messages = self._log(caplog, ranked, validator)

        assert printed == 5
        assert len(messages) == 5
        assert all(m.startswith("test-id: Top latency metric: ") for m in messages)
        assert "Resource: r7" in messages[0]

    def test_failing_metrics_printed_below_top_n(self, caplog, validator):
        # Deliberately unsorted: the failing record sits past the top N
        ranked = [
            make_metric("fast1", 900),
            make_metric("fast2", 800),
            make_metric("slow-get", 1500),
        ]

        printed, messages = self._log(caplog, ranked, validator, top_to_print=1)

        assert printed == 2
        assert messages[0] == (
            f"test-id: Top latency metric: {ranked[0]}; threshold: 1s"
        )
        assert messages[1].startswith("test-id: WARNING Top latency metric: ")
        assert "Resource: slow-get" in messages[1]

    def test_threshold_in_diagnostics(self, caplog, validator):
        ranked = [make_metric("pods", 100, verb="LIST", scope="cluster")]

        _, messages = self._log(caplog, ranked, validator)

        assert messages[0].endswith("; threshold: 30s")


class TestRender:
    """Test report rendering."""

    def test_perf_data_in_ranked_order_with_ms_values(self):
        ranked = rank([
            make_metric("a", 10, count=1),
            make_metric("b", 500, count=2, slow_count=1),
            make_metric("c", 50, count=3),
        ])

        perf_data = Reporter.to_perf_data(ranked)

        assert perf_data.version == CURRENT_API_CALL_METRICS_VERSION
        assert [item.data["Perc99"] for item in perf_data.data_items] == [500.0, 50.0, 10.0]
        assert perf_data.data_items[0].unit == "ms"
        assert perf_data.data_items[0].labels == {
            "Verb": "GET",
            "Resource": "b",
            "Subresource": "",
            "Scope": "resource",
            "Count": "2",
            "SlowCount": "1",
        }

    def test_sub_millisecond_precision(self):
        metric = make_metric("a", 0)
        metric.latency.perc50 = timedelta(microseconds=1500)

        perf_data = Reporter.to_perf_data([metric])

        assert perf_data.data_items[0].data["Perc50"] == 1.5

    def test_render_summary(self):
        reporter = Reporter("id")

        summary = reporter.render("MySummary", [make_metric("pods", 250)])

        assert summary.name == "MySummary"
        assert summary.ext == "json"
        content = json.loads(summary.content)
        assert content["version"] == "v1"
        assert content["dataItems"][0]["data"] == {"Perc50": 0.0, "Perc90": 0.0, "Perc99": 250.0}
