"""Data model for diagram conversion."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class OutputFormat(str, Enum):
    """Rendered output representation."""

    SVG = "svg"
    JPG = "jpg"


class EmbedMode(str, Enum):
    """How raster output is referenced from the document."""

    B64 = "b64"  # data URI inline
    FILES = "files"  # sibling ./mermaid/ folder


class RenderStage(str, Enum):
    """Step of the per-diagram pipeline that produced a failure."""

    RENDER = "render"
    CAPTURE = "capture"
    EMBED = "embed"


@dataclass(frozen=True)
class Span:
    """Half-open ``[start, end)`` range into the original document text."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 0 or self.start > self.end:
            raise ValueError(f"Invalid span: [{self.start}, {self.end})")

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class DiagramBlock:
    """A fenced mermaid block located in a document."""

    source: str  # trimmed diagram source
    span: Span
    ordinal: int  # 1-based position in the document


@dataclass(frozen=True)
class RenderResult:
    """Output of rendering one diagram."""

    svg: str
    jpeg: bytes | None = None


@dataclass(frozen=True)
class Rendered:
    """Successful outcome: replacement text for the span."""

    text: str


@dataclass(frozen=True)
class Failed:
    """Failed outcome: the original span is kept verbatim."""

    reason: str
    stage: RenderStage = RenderStage.RENDER


Outcome = Rendered | Failed


@dataclass(frozen=True)
class ReplacementDecision:
    """What to do with one span of the document."""

    span: Span
    outcome: Outcome

    @property
    def failed(self) -> bool:
        return isinstance(self.outcome, Failed)


@dataclass
class DocumentOutcome:
    """Result of processing one document with at least one diagram."""

    path: Path
    diagram_count: int
    failure_count: int
    output_path: Path


@dataclass
class BatchSummary:
    """Aggregate counts for one run."""

    files_scanned: int = 0
    documents: list[DocumentOutcome] = field(default_factory=list)

    @property
    def files_processed(self) -> int:
        return len(self.documents)

    @property
    def diagrams_total(self) -> int:
        return sum(doc.diagram_count for doc in self.documents)

    @property
    def diagrams_failed(self) -> int:
        return sum(doc.failure_count for doc in self.documents)
