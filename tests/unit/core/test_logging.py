"""Unit tests for LogSpan."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from mermaid2img.logging import LogSpan, logger


@pytest.fixture
def records() -> Iterator[list[dict]]:
    """Capture loguru records emitted during the test."""
    captured: list[dict] = []
    handler_id = logger.add(lambda m: captured.append(m.record), level="DEBUG")
    yield captured
    logger.remove(handler_id)


@pytest.mark.unit
@pytest.mark.core
def test_span_emits_attributes(records: list[dict]) -> None:
    with LogSpan(span="document.process", path="a.md") as s:
        s.add(failures=0).add("output", "a_mermaid2svg.md")

    record = records[-1]
    assert record["level"].name == "DEBUG"
    assert record["extra"]["span"] == "document.process"
    assert record["extra"]["failures"] == 0
    assert "output=a_mermaid2svg.md" in record["message"]
    assert "elapsed_ms=" in record["message"]


@pytest.mark.unit
@pytest.mark.core
def test_span_records_error_and_reraises(records: list[dict]) -> None:
    with pytest.raises(RuntimeError), LogSpan(span="batch.run"):
        raise RuntimeError("boom")

    record = records[-1]
    assert record["level"].name == "WARNING"
    assert "RuntimeError: boom" in record["message"]
