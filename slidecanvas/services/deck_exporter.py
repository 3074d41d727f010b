"""
Deck Exporter
=============

End-to-end export: slides -> writer records -> .pptx file -> storage.

From the caller's point of view export is all-or-nothing. Per-element
and per-slide skips come back as warnings on a successful result; a
writer or storage failure comes back as one failure result with a
generic message, and any file already written is removed.
"""

import logging
import re
import secrets
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional

from ..config import get_settings
from ..exceptions import StorageError, WriterError
from ..models.canvas_models import CanvasConfig, DEFAULT_CANVAS
from ..models.element_models import Slide
from ..models.presentation_models import Presentation
from ..models.writer_models import ExportResult
from .export_transform import ExportTransform
from .pptx_writer import PptxWriter
from .storage_client import StorageClient
from .template_builder import TemplateBuilder

logger = logging.getLogger(__name__)

GENERIC_EXPORT_ERROR = "Export failed. Please try again."
DEFAULT_FILE_STEM = "presentation"


def make_file_name(title: Optional[str]) -> str:
    """Title stripped to alphanumerics plus 16 random hex characters."""
    stem = re.sub(r"[^A-Za-z0-9]", "", title or "") or DEFAULT_FILE_STEM
    return f"{stem}{secrets.token_hex(8)}.pptx"


class DeckExporter:
    """Runs the export pipeline for editor slides or a presentation document."""

    def __init__(
        self,
        canvas: CanvasConfig = DEFAULT_CANVAS,
        writer: Optional[PptxWriter] = None,
        storage: Optional[StorageClient] = None,
        export_dir: Optional[Path] = None
    ):
        self.canvas = canvas
        self.transform = ExportTransform(canvas)
        self.writer = writer or PptxWriter(canvas)
        self.storage = storage
        self.export_dir = Path(export_dir or get_settings().export_dir)

    async def export(
        self,
        slides: List[Slide],
        output_path: Optional[Path] = None,
        owner: Optional[str] = None,
        title: Optional[str] = None
    ) -> ExportResult:
        """
        Export slides to a .pptx file.

        Args:
            slides: Slides in deck order
            output_path: Target file (defaults to export_dir / generated name)
            owner: Storage key (e.g. account email); upload is skipped without it
            title: Used for the generated file name

        Returns:
            ExportResult with success flag, file info and warnings
        """
        records, warnings = self.transform.to_writer_records(slides)

        if output_path is None:
            output_path = self.export_dir / make_file_name(title or (slides[0].title if slides else None))
        output_path = Path(output_path)

        try:
            warnings.extend(await self.writer.write_async(records, output_path))

            storage_url = None
            if owner and self.storage is not None and self.storage.enabled:
                response = await self.storage.store_presentation(output_path, owner)
                if not response.success:
                    raise StorageError(response.error or "Storage rejected the file", context={"owner": owner})
                storage_url = response.url

        except (WriterError, StorageError) as e:
            logger.exception(f"[DECK-EXPORTER] Export to {output_path} failed: {e}")
            self._discard(output_path)
            return ExportResult(success=False, warnings=warnings, error=GENERIC_EXPORT_ERROR)
        except Exception as e:
            # Unexpected writer library failure
            logger.exception(f"[DECK-EXPORTER] Unexpected error exporting to {output_path}: {e}")
            self._discard(output_path)
            return ExportResult(success=False, warnings=warnings, error=GENERIC_EXPORT_ERROR)

        logger.info(
            f"[DECK-EXPORTER] Exported {len(records)} slides to {output_path.name} "
            f"({len(warnings)} warnings)"
        )
        return ExportResult(
            success=True,
            slide_count=len(records),
            output_path=str(output_path),
            file_name=output_path.name,
            storage_url=storage_url,
            warnings=warnings
        )

    async def generate(
        self,
        presentation: Presentation,
        owner: Optional[str] = None,
        now: Optional[Callable[[], datetime]] = None
    ) -> ExportResult:
        """Server-side entry point: build template slides, then export them."""
        slides = TemplateBuilder(now=now).build(presentation)
        return await self.export(slides, owner=owner, title=presentation.title)

    def _discard(self, path: Path) -> None:
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"[DECK-EXPORTER] Could not remove partial file {path}: {e}")
