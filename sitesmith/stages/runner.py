"""Ordered hook collection and the per-document envelope protocol."""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, Sequence
from typing import Any

from pydantic import ValidationError

from sitesmith.errors import StageError
from sitesmith.pipeline.markup import MarkupConverter
from sitesmith.pipeline.models import Document, normalize_target_name
from sitesmith.stages.base import FOR_FILE, WRITER, StageContext
from sitesmith.stages.models import StageEnvelope, StageResponse

logger = logging.getLogger(__name__)


def merge_mappings(target: dict[str, Any], update: dict[str, Any] | None) -> dict[str, Any]:
    """Shallow, key-by-key merge where ``update`` wins. ``None`` is a no-op."""
    merged = dict(target)
    if update:
        merged.update(update)
    return merged


class StageCollection:
    """Hooks in discovery order, built once before any document is processed.

    Hook contexts are not reentrant, so every invocation goes through a
    single collection-wide lock.
    """

    def __init__(self, stages: Sequence[StageContext] = ()) -> None:
        self._stages: list[StageContext] = list(stages)
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._stages)

    def __iter__(self) -> Iterator[StageContext]:
        return iter(self._stages)

    def run_all(self, entry_point: str) -> None:
        """Call ``entry_point`` once on every hook that defines it."""
        with self._lock:
            for stage in self._stages:
                if not stage.has_entry_point(entry_point):
                    continue
                logger.debug("running %s of %s", entry_point, stage.label)
                stage.invoke(entry_point)

    def close(self) -> None:
        with self._lock:
            for stage in self._stages:
                stage.close()

    # -- document processing ---------------------------------------------

    @staticmethod
    def applies_to(stage: StageContext, document: Document) -> bool:
        """False if the hook has no writer or is filtered to another file."""
        if not stage.has_entry_point(WRITER):
            return False
        only_for = stage.get_global(FOR_FILE)
        return only_for is None or str(only_for) == document.name

    def apply(self, document: Document, converter: MarkupConverter) -> None:
        """Run every applicable hook's ``writer`` against ``document``.

        The HTML preview is computed once, before the first hook, so all
        hooks see the same pre-transform HTML.
        """
        with document.lock:
            document.html = converter.convert(document.body) if document.is_markup else ""

        for stage in self._stages:
            if not self.applies_to(stage, document):
                logger.debug("hook %s skipped for %s", stage.label, document.name)
                continue
            with self._lock, document.lock:
                response = self._call_writer(stage, document)
                self._apply_response(stage, document, response)

    def _call_writer(self, stage: StageContext, document: Document) -> StageResponse:
        try:
            envelope = StageEnvelope(
                name=document.target_name,
                source_path=str(document.source_path),
                dest_path=str(document.dest_path),
                meta=document.meta,
                content=document.body,
                html=document.html,
            )
        except ValidationError as e:
            raise StageError(stage.label, WRITER, f"cannot build request: {e}") from e
        raw = stage.invoke(WRITER, envelope.model_dump_json())

        try:
            if isinstance(raw, (str, bytes, bytearray)):
                return StageResponse.model_validate_json(raw)
            if isinstance(raw, dict):
                return StageResponse.model_validate(raw)
        except ValidationError as e:
            raise StageError(stage.label, WRITER, f"malformed response: {e}") from e
        raise StageError(
            stage.label, WRITER, f"expected a JSON string, got {type(raw).__name__}"
        )

    @staticmethod
    def _apply_response(stage: StageContext, document: Document, response: StageResponse) -> None:
        if response.content is not None:
            document.body = response.content
        if response.name is not None:
            target = normalize_target_name(response.name)
            if target is None:
                raise StageError(
                    stage.label, WRITER, f"name {response.name!r} is outside the output directory"
                )
            logger.debug("%s will be written as %s", document.name, target)
            document.target_name = target
        document.data = merge_mappings(document.data, response.data)
        document.extras = merge_mappings(document.extras, response.extras)
