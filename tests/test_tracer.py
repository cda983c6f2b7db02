"""Tests for the tracer module."""

import json

import numpy as np
import pytest


class TestSummarize:
    """Tests for object summarization."""

    def test_numpy_array_summary(self):
        """Test that numpy arrays are summarized with shape and type."""
        from tlsvect.tracer import summarize

        arr = np.zeros((100, 3), dtype=np.float64)
        summary = summarize(arr)

        assert "ndarray" in summary
        assert "100x3" in summary
        assert "float64" in summary

    def test_summary_capped_length(self):
        """Test that summary never exceeds max length."""
        from tlsvect.tracer import summarize

        large_dict = {f"key_{i}": f"value_{i}" for i in range(100)}
        summary = summarize(large_dict, max_len=200)

        assert len(summary) <= 200

    def test_list_summary(self):
        """Test list summarization."""
        from tlsvect.tracer import summarize

        summary = summarize([1, 2, 3, 4, 5])

        assert "list" in summary
        assert "len=5" in summary

    def test_string_summary(self):
        """Test long string summarization."""
        from tlsvect.tracer import summarize

        summary = summarize("a" * 1000)

        assert "str" in summary
        assert "len=1000" in summary
        assert len(summary) <= 200

    def test_none_summary(self):
        """Test None summarization."""
        from tlsvect.tracer import summarize

        assert summarize(None) == "None"

    def test_pydantic_model_summary(self):
        """Test Pydantic model summarization."""
        from tlsvect.tracer import summarize
        from tlsvect.models import IndexRange

        summary = summarize(IndexRange(begin=0, end=10))

        assert "IndexRange" in summary

    def test_approximation_summary(self, collinear_points):
        """Fitted approximations show their residual variance."""
        from tlsvect.fit.line2d import TlsLine2D
        from tlsvect.stats.sums import SufficientStatistics
        from tlsvect.tracer import summarize

        line = TlsLine2D.fit(SufficientStatistics.from_points(collinear_points))
        summary = summarize(line)

        assert summary.startswith("TlsLine2D(sigma2=")

    def test_statistics_summary(self, collinear_points):
        """Sufficient statistics show dimension and count."""
        from tlsvect.stats.sums import SufficientStatistics
        from tlsvect.tracer import summarize

        summary = summarize(SufficientStatistics.from_points(collinear_points))

        assert summary == "SufficientStatistics(dim=2,count=50)"


class TestTracerSpan:
    """Tests for tracer span functionality."""

    def test_span_nesting(self, capsys):
        """Test that spans produce start/end lines and an indented event."""
        from tlsvect.tracer import get_tracer, configure_tracer

        configure_tracer(enabled=True, level="INFO")
        tracer = get_tracer()

        with tracer.span("outer", module="test"):
            with tracer.span("inner", module="test"):
                tracer.event("inside")

        lines = capsys.readouterr().err.strip().split("\n")

        assert len(lines) == 5
        assert "inside" in lines[2]
        assert "    test:inner" in lines[2]

    def test_tracer_disabled_no_output(self, capsys):
        """Test that disabled tracer produces no output."""
        from tlsvect.tracer import get_tracer, configure_tracer

        configure_tracer(enabled=False)
        tracer = get_tracer()

        with tracer.span("test", module="test"):
            tracer.event("should not appear")

        assert capsys.readouterr().err == ""

    def test_level_filtering(self, capsys):
        """DEBUG events are dropped at INFO level, WARN events kept."""
        from tlsvect.tracer import get_tracer, configure_tracer

        configure_tracer(enabled=True, level="INFO")
        tracer = get_tracer()
        tracer.event("hidden", level="DEBUG")
        tracer.event("shown", level="WARN")

        err = capsys.readouterr().err
        assert "hidden" not in err
        assert "shown" in err

    def test_json_output(self, capsys):
        """JSON mode writes one parseable record per line."""
        from tlsvect.tracer import get_tracer, configure_tracer

        configure_tracer(enabled=True, level="INFO", json_output=True)
        get_tracer().event("fitted", count=3)

        record = json.loads(capsys.readouterr().err.strip())
        assert record["message"] == "fitted count=3"
        assert record["meta"] == {"count": "3"}

    def test_file_output(self, temp_dir, capsys):
        """Trace lines are mirrored to the configured file."""
        import os
        from tlsvect.tracer import get_tracer, configure_tracer

        path = os.path.join(temp_dir, "trace.log")
        configure_tracer(enabled=True, level="INFO", file_path=path)
        get_tracer().event("to file")
        configure_tracer(enabled=False)

        with open(path, encoding="utf-8") as f:
            assert "to file" in f.read()

    def test_span_logs_exception(self, capsys):
        """Exceptions inside a span are logged and re-raised."""
        from tlsvect.tracer import get_tracer, configure_tracer

        configure_tracer(enabled=True, level="INFO")

        with pytest.raises(ValueError):
            with get_tracer().span("broken", module="test"):
                raise ValueError("boom")

        err = capsys.readouterr().err
        assert "ERROR" in err
        assert "ValueError: boom" in err


class TestTraceDecorator:
    """Tests for the @trace decorator."""

    def test_decorator_runs_function(self):
        """Test that decorated function executes normally."""
        from tlsvect.tracer import trace, configure_tracer

        configure_tracer(enabled=False)

        @trace(label="test_func")
        def my_func(x):
            return x * 2

        assert my_func(5) == 10

    def test_decorator_with_exception(self):
        """Test that decorator handles exceptions properly."""
        from tlsvect.tracer import trace, configure_tracer

        configure_tracer(enabled=True, level="ERROR")

        @trace(label="failing_func")
        def failing_func():
            raise ValueError("test error")

        with pytest.raises(ValueError):
            failing_func()

    def test_decorator_opens_span(self, capsys):
        """Enabled tracing wraps the call in a labelled span."""
        from tlsvect.tracer import trace, configure_tracer

        configure_tracer(enabled=True, level="INFO")

        @trace(label="labelled", arg_names=["size"])
        def work(size=0):
            return size

        assert work(size=4) == 4
        err = capsys.readouterr().err
        assert "labelled" in err
        assert "size=4" in err


class TestTimings:
    """Tests for per-span timing totals."""

    def test_spans_accumulate(self, capsys):
        from tlsvect.tracer import get_tracer, configure_tracer

        configure_tracer(enabled=True, level="ERROR")
        tracer = get_tracer()
        tracer.reset_timings()

        for _ in range(3):
            with tracer.span("stage", module="test"):
                pass

        calls, total = tracer.timings["stage"]
        assert calls == 3
        assert total >= 0.0
        assert tracer.depth == 0

    def test_vectorizer_stages_are_timed(self, l_shape_points, capsys):
        from tlsvect.presets import aftls_polyline_2d
        from tlsvect.tracer import get_tracer, configure_tracer

        vectorizer = aftls_polyline_2d()
        configure_tracer(enabled=True, level="ERROR")
        get_tracer().reset_timings()
        vectorizer(l_shape_points)

        assert {
            "PrefixSumArray", "FastExtractor", "TotalErrorOptimizer",
            "ContinuityOptimizer", "PolylinePostprocessor",
        } <= set(get_tracer().timings)
