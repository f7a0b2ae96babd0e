"""Stage controllers: planner, materials, copywriter, feedback."""

from edu_master.stages.base import PLAN_REQUIRED_MESSAGE, PreparedPrompt, StageController
from edu_master.stages.copywriter import CHANNEL_OPTIONS, CopywriterController
from edu_master.stages.feedback import FeedbackController, FeedbackMode
from edu_master.stages.materials import (
    BatchExportResult,
    MaterialController,
    resolve_item_count,
)
from edu_master.stages.planner import PlannerController, PlannerForm

__all__ = [
    "CHANNEL_OPTIONS",
    "PLAN_REQUIRED_MESSAGE",
    "BatchExportResult",
    "CopywriterController",
    "FeedbackController",
    "FeedbackMode",
    "MaterialController",
    "PlannerController",
    "PlannerForm",
    "PreparedPrompt",
    "StageController",
    "resolve_item_count",
]
