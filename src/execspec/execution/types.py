"""Engine type tags used to select an execution spec adapter."""

from __future__ import annotations

from enum import Enum


class ExecutionType(str, Enum):
    """Supported (and reserved) workflow-execution engine types.

    The value is the engine resource kind; it appears verbatim in
    ``"type:<value>: ExecutionType is not supported"``.
    """

    WORKFLOW = "Workflow"  # Argo Workflow - reference engine
    PIPELINE_RUN = "PipelineRun"  # Tekton PipelineRun - reserved, no adapter yet

    def __str__(self) -> str:
        return self.value
