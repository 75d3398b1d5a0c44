"""Unit tests for folding replacements back into documents."""

from __future__ import annotations

import base64
import random

import pytest

from mermaid2img.compositor import (
    compose,
    shape_file_image,
    shape_inline_image,
    shape_svg,
)
from mermaid2img.locator import find_diagrams
from mermaid2img.models import Failed, Rendered, ReplacementDecision, Span


def _rendered(start: int, end: int, text: str) -> ReplacementDecision:
    return ReplacementDecision(Span(start, end), Rendered(text))


def _failed(start: int, end: int) -> ReplacementDecision:
    return ReplacementDecision(Span(start, end), Failed("boom"))


@pytest.mark.unit
@pytest.mark.core
def test_no_decisions_returns_text_unchanged() -> None:
    assert compose("abc", []) == "abc"


@pytest.mark.unit
@pytest.mark.core
def test_longer_and_shorter_replacements() -> None:
    """Edits of different lengths do not disturb each other's offsets."""
    text = "0123456789"
    decisions = [
        _rendered(1, 3, "LONGER-THAN-BEFORE"),
        _rendered(5, 8, ""),
        _rendered(9, 10, "x"),
    ]

    assert compose(text, decisions) == "0LONGER-THAN-BEFORE348x"


@pytest.mark.unit
@pytest.mark.core
def test_decision_order_does_not_matter() -> None:
    """Decisions are applied by position regardless of input order."""
    text = "aaXbbYcc"
    forward = [_rendered(2, 3, "[X]"), _rendered(5, 6, "[Y]")]

    assert compose(text, forward) == compose(text, list(reversed(forward)))
    assert compose(text, forward) == "aa[X]bb[Y]cc"


@pytest.mark.unit
@pytest.mark.core
def test_failed_span_is_left_verbatim() -> None:
    """A failed decision keeps the original slice."""
    text = "keep [diagram] and [other]"
    decisions = [_failed(5, 14), _rendered(19, 26, "IMG")]

    assert compose(text, decisions) == "keep [diagram] and IMG"


@pytest.mark.unit
@pytest.mark.core
def test_all_failed_is_identity() -> None:
    text = "x" * 50
    decisions = [_failed(0, 10), _failed(20, 30), _failed(40, 50)]

    assert compose(text, decisions) == text


@pytest.mark.unit
@pytest.mark.core
def test_adjacent_spans() -> None:
    """Spans that touch are both applied."""
    assert compose("abcd", [_rendered(0, 2, "1"), _rendered(2, 4, "2")]) == "12"


@pytest.mark.unit
@pytest.mark.core
def test_overlapping_spans_raise() -> None:
    with pytest.raises(ValueError, match="overlaps"):
        compose("abcdef", [_rendered(0, 3, "x"), _rendered(2, 5, "y")])


@pytest.mark.unit
@pytest.mark.core
def test_span_past_end_raises() -> None:
    with pytest.raises(ValueError, match="outside"):
        compose("abc", [_rendered(1, 10, "x")])


@pytest.mark.unit
@pytest.mark.core
def test_non_diagram_text_preserved_in_order() -> None:
    """Replace every diagram with a marker of a different length and check
    that all surrounding text survives exactly and in order."""
    rng = random.Random(1234)
    chunks = [f"para {i} " + "é漢 " * rng.randint(0, 5) + "\n" for i in range(8)]
    diagrams = [
        "```mermaid\n" + "graph TD\n" + "  A-->B\n" * rng.randint(1, 6) + "```"
        for _ in range(7)
    ]
    text = chunks[0]
    for chunk, diagram in zip(chunks[1:], diagrams):
        text += "\n" + diagram + "\n" + chunk

    blocks = find_diagrams(text)
    assert len(blocks) == len(diagrams)

    markers = {b.ordinal: f"<<{b.ordinal}:" + "#" * (b.ordinal * 3) + ">>" for b in blocks}
    decisions = [
        ReplacementDecision(b.span, Rendered(markers[b.ordinal])) for b in blocks
    ]
    result = compose(text, decisions)

    expected = chunks[0]
    for ordinal, chunk in enumerate(chunks[1:], start=1):
        expected += "\n" + markers[ordinal] + "\n" + chunk
    assert result == expected

    # Gaps between spans reappear unchanged between the markers
    gaps = [text[: blocks[0].span.start]]
    gaps += [text[a.span.end : b.span.start] for a, b in zip(blocks, blocks[1:])]
    gaps.append(text[blocks[-1].span.end :])
    rebuilt = gaps[0] + "".join(
        markers[b.ordinal] + gap for b, gap in zip(blocks, gaps[1:])
    )
    assert result == rebuilt


@pytest.mark.unit
@pytest.mark.core
def test_shape_svg_adds_blank_lines() -> None:
    assert shape_svg("<svg/>") == "\n<svg/>\n"


@pytest.mark.unit
@pytest.mark.core
def test_shape_inline_image_is_data_uri() -> None:
    payload = b"\xff\xd8\xff\xe0jpeg"
    text = shape_inline_image(payload, 3)
    encoded = base64.b64encode(payload).decode("ascii")

    assert text == f"![Diagram 3](data:image/jpeg;base64,{encoded})"


@pytest.mark.unit
@pytest.mark.core
def test_shape_file_image_reference() -> None:
    assert (
        shape_file_image("./mermaid/architecture-1.jpg", 1)
        == "![Diagram 1](./mermaid/architecture-1.jpg)"
    )
