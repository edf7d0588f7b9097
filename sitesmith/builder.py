"""SiteBuilder: runs the whole build, one document at a time."""

from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path

from sitesmith.config.models import SiteConfig
from sitesmith.errors import SourceError
from sitesmith.pipeline.discovery import collect_documents
from sitesmith.pipeline.frontmatter import split_front_matter
from sitesmith.pipeline.markup import MarkupConverter
from sitesmith.pipeline.models import BuildReport, Document, SiteMeta
from sitesmith.pipeline.templates import TemplateComposer
from sitesmith.stages.base import ON_FINISH, ON_START
from sitesmith.stages.loader import load_stages
from sitesmith.stages.runner import StageCollection

logger = logging.getLogger(__name__)


class SiteBuilder:
    """Builds ``<path>/pages`` into ``<out>``.

    Order of work: copy ``public/``, load hooks, run ``on_start`` hooks,
    render every document (read, split front matter, hooks, flush), run
    ``on_finish`` hooks, close hooks. The first error aborts the build.
    """

    def __init__(self, config: SiteConfig, stages: StageCollection | None = None) -> None:
        self.config = config
        self._stages = stages

    def _working_dir(self) -> str:
        root = self.config.path
        return "" if root in (".", "") else root

    def copy_public(self) -> None:
        public = self.config.public_dir
        if not public.is_dir():
            return
        try:
            shutil.copytree(public, self.config.out_dir, dirs_exist_ok=True)
        except OSError as e:
            raise SourceError(public, f"could not copy static files: {e}") from e
        logger.debug("copied %s to %s", public, self.config.out_dir)

    def build(self) -> BuildReport:
        start = time.monotonic()
        cfg = self.config
        report = BuildReport()

        converter = MarkupConverter(cfg.markup)
        composer = TemplateComposer.from_pages_dir(
            cfg.pages_dir, SiteMeta(base_url=cfg.base_url), converter, cfg.out_dir
        )

        self.copy_public()

        stages = self._stages
        if stages is None:
            stages = load_stages(cfg.hooks_dir, self._working_dir())
        report.stages = len(stages)

        try:
            sources = collect_documents(cfg.pages_dir)
            logger.debug("files to process: %s", [str(p) for p in sources])

            stages.run_all(ON_START)
            for source in sources:
                target = self.process(source, stages, converter, composer)
                report.written.append(str(target))
                report.documents += 1
            stages.run_all(ON_FINISH)
        finally:
            stages.close()

        report.duration = time.monotonic() - start
        return report

    def process(
        self,
        source: Path,
        stages: StageCollection,
        converter: MarkupConverter,
        composer: TemplateComposer,
    ) -> Path:
        """Render one source file and return the path written."""
        cfg = self.config
        document = Document.from_source(source, cfg.pages_dir, cfg.out_dir)
        logger.debug("%s will be changed to %s", document.name, document.target_name)

        try:
            document.raw = source.read_bytes()
        except OSError as e:
            raise SourceError(source, f"error reading file: {e.strerror or e}") from e

        meta, body = split_front_matter(document.raw, source)
        try:
            document.body = body.decode("utf-8")
        except UnicodeDecodeError as e:
            raise SourceError(source, f"not valid UTF-8 text: {e}") from e
        document.meta = meta

        if len(stages):
            stages.apply(document, converter)

        return composer.flush(document)
