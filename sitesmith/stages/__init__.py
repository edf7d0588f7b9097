"""Build hooks: discovery, execution contexts and the envelope protocol."""

from sitesmith.stages.base import FOR_FILE, ON_FINISH, ON_START, WRITER, StageContext
from sitesmith.stages.function import FunctionStage
from sitesmith.stages.loader import load_stages
from sitesmith.stages.models import StageEnvelope, StageResponse
from sitesmith.stages.runner import StageCollection, merge_mappings
from sitesmith.stages.script import ScriptStage

__all__ = [
    "FOR_FILE",
    "ON_FINISH",
    "ON_START",
    "WRITER",
    "FunctionStage",
    "ScriptStage",
    "StageCollection",
    "StageContext",
    "StageEnvelope",
    "StageResponse",
    "load_stages",
    "merge_mappings",
]
