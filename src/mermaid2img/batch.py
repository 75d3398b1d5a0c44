"""Batch conversion of Markdown files.

Discovers documents, opens a single render session for the whole run and
processes each document in turn: locate diagrams, render them in document
order, fold the results back into the text and write the output file.
"""

from __future__ import annotations

from collections.abc import Callable
from contextlib import AbstractAsyncContextManager
from pathlib import Path

from rich.console import Console

from mermaid2img.browser import DiagramRenderer, RenderSession
from mermaid2img.compositor import compose
from mermaid2img.config import RenderConfig
from mermaid2img.locator import find_diagrams
from mermaid2img.logging import LogSpan, logger
from mermaid2img.models import (
    BatchSummary,
    DocumentOutcome,
    EmbedMode,
    Failed,
    OutputFormat,
    ReplacementDecision,
)
from mermaid2img.orchestrator import RenderTarget, decide

__all__ = [
    "BatchCoordinator",
    "collect_documents",
    "output_path_for",
]

SessionFactory = Callable[[RenderConfig], AbstractAsyncContextManager[DiagramRenderer]]


def collect_documents(
    root: Path,
    extension: str = ".md",
    marker: str = "_mermaid2",
) -> list[Path]:
    """Find documents to convert.

    A file path is returned as-is. A directory is walked recursively and
    entries are visited in name order; files whose name contains ``marker``
    are generated output and are skipped. Symlinked directories are not
    followed.
    """
    if not root.is_dir():
        return [root]

    files: list[Path] = []
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_symlink() and entry.is_dir():
            logger.debug(f"Skipping symlinked directory {entry}")
        elif entry.is_dir():
            files.extend(collect_documents(entry, extension, marker))
        elif entry.name.endswith(extension) and marker not in entry.name:
            files.append(entry)
    return files


def output_path_for(path: Path, fmt: OutputFormat, marker: str = "_mermaid2") -> Path:
    """``dir/name.ext`` -> ``dir/name_mermaid2<fmt>.ext``."""
    return path.with_name(f"{path.stem}{marker}{fmt.value}{path.suffix}")


class BatchCoordinator:
    """Drives conversion of one file or a directory tree."""

    def __init__(
        self,
        config: RenderConfig,
        console: Console | None = None,
        session_factory: SessionFactory = RenderSession,
    ) -> None:
        """Initialize the coordinator.

        Args:
            config: Validated run configuration.
            console: Where progress is printed (default: stdout).
            session_factory: Builds the render session from config.
        """
        self.config = config
        self.console = console or Console(highlight=False, soft_wrap=True)
        self.session_factory = session_factory

    def target_for(self, path: Path) -> RenderTarget:
        config = self.config
        return RenderTarget(
            format=config.format,
            mode=config.mode,
            base_name=path.stem,
            image_dir=path.parent / config.image_dir,
            image_dir_name=config.image_dir,
            jpeg_quality=config.jpeg_quality,
        )

    async def run(self, root: Path) -> BatchSummary:
        """Convert every eligible document under ``root``.

        Raises:
            SessionInitError: If the render session cannot start.
            OSError: If a document cannot be read or written.
        """
        config = self.config
        summary = BatchSummary()

        with LogSpan(span="batch.run", level="INFO", root=str(root)) as span:
            files = collect_documents(root, config.extension, config.output_marker)
            summary.files_scanned = len(files)
            span.add(files=len(files))

            if not files:
                self.console.print("No markdown files found.")
                return summary

            self.console.print(
                f"{len(files)} markdown file(s) to scan. Launching browser..."
            )
            async with self.session_factory(config) as session:
                for path in files:
                    outcome = await self.process_document(session, path)
                    if outcome is not None:
                        summary.documents.append(outcome)

            span.add(
                processed=summary.files_processed,
                diagrams=summary.diagrams_total,
                failed=summary.diagrams_failed,
            )

        self.console.print(
            f"\nDone. {summary.files_processed} file(s) with diagrams rendered."
        )
        return summary

    async def process_document(
        self, session: DiagramRenderer, path: Path
    ) -> DocumentOutcome | None:
        """Convert one document.

        Returns:
            The outcome, or None when the document has no diagrams (no output
            file is written in that case).
        """
        content = path.read_text(encoding="utf-8")
        blocks = find_diagrams(content)
        if not blocks:
            logger.debug(f"No diagrams in {path}")
            return None

        config = self.config
        target = self.target_for(path)
        total = len(blocks)
        out = self.console

        with LogSpan(span="document.process", path=str(path), diagrams=total) as span:
            out.print(f"\n{path.name}: {total} diagram(s)", markup=False)

            if config.format is OutputFormat.JPG and config.mode is EmbedMode.FILES:
                target.image_dir.mkdir(parents=True, exist_ok=True)

            decisions: list[ReplacementDecision] = []
            for block in blocks:
                decision = await decide(session, block, target)
                decisions.append(decision)
                if isinstance(decision.outcome, Failed):
                    out.print(
                        f"  [{block.ordinal}/{total}] failed — "
                        f"{decision.outcome.reason}",
                        markup=False,
                    )
                else:
                    out.print(f"  [{block.ordinal}/{total}] done", markup=False)

            failures = sum(1 for d in decisions if d.failed)
            output_path = output_path_for(path, config.format, config.output_marker)
            output_path.write_text(compose(content, decisions), encoding="utf-8")
            span.add(failures=failures, output=str(output_path))

        if failures:
            out.print(
                f"  Warning: {failures} diagram(s) failed and were left as "
                "raw mermaid blocks.",
                style="yellow",
            )
        out.print(f"  -> {output_path}", markup=False)

        return DocumentOutcome(
            path=path,
            diagram_count=total,
            failure_count=failures,
            output_path=output_path,
        )
