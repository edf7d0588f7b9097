"""Discover hook scripts in the hooks directory."""

from __future__ import annotations

import logging
from pathlib import Path

from sitesmith.errors import StageError
from sitesmith.stages.runner import StageCollection
from sitesmith.stages.script import ScriptStage

logger = logging.getLogger(__name__)

HOOK_SUFFIX = ".py"


def load_stages(hooks_dir: Path, working_dir: str = "") -> StageCollection:
    """Load every ``*.py`` file in ``hooks_dir`` in sorted name order.

    A missing hooks directory gives an empty collection. A hook that fails
    to load raises StageError.
    """
    if not hooks_dir.is_dir():
        logger.debug("no hooks directory at %s", hooks_dir)
        return StageCollection()

    paths = sorted(
        (p for p in hooks_dir.iterdir() if p.is_file() and p.name.endswith(HOOK_SUFFIX)),
        key=lambda p: p.name,
    )
    stages: list[ScriptStage] = []
    try:
        for path in paths:
            stages.append(ScriptStage(path, working_dir))
    except StageError:
        for stage in stages:
            stage.close()
        raise
    logger.info("loaded %d hook(s) from %s", len(stages), hooks_dir)
    return StageCollection(stages)
