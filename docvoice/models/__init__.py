"""Shared typed data models for Docvoice.

This package contains dataclasses and enums used across pipeline modules to
avoid cross-module coupling and circular imports.
"""

from .datatypes import (
    ArtifactKind,
    PipelineStage,
    RunMode,
    RunPlan,
    RunReport,
    SourceDocument,
    StageOutcome,
    StageReport,
    StageState,
)

__all__ = [
    "ArtifactKind",
    "PipelineStage",
    "RunMode",
    "RunPlan",
    "RunReport",
    "SourceDocument",
    "StageOutcome",
    "StageReport",
    "StageState",
]
