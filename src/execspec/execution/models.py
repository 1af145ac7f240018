"""Pydantic models for the reference engine's Workflow resource.

Only the fields the execution spec layer reads or writes are modelled.
Everything else the compiler emits (DAG tasks, loop iterators, container
specs, ``withParam`` expressions, embedded manifests) is carried through
untouched via ``extra="allow"``, so parse → mutate → serialize never drops
or rewrites structure the layer does not understand.

Example YAML::

    apiVersion: argoproj.io/v1alpha1
    kind: Workflow
    metadata:
      generateName: hello-
      labels:
        pipelines.kubeflow.org/v2_component: "true"
    spec:
      entrypoint: main
      arguments:
        parameters:
          - name: message
            value: hello
      templates:
        - name: main
          container:
            image: alpine
    status:
      phase: Succeeded
      nodes:
        hello-abc:
          outputs:
            artifacts:
              - name: main-logs
                s3:
                  key: artifacts/hello-abc/main.log

Tags:
    execspec, models, pydantic, argo, serialization

Doc-Types:
    api-reference
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from execspec.core.constants import SCHEDULED_WORKFLOW_API_VERSION, SCHEDULED_WORKFLOW_KIND


def to_wire_string(value: Any) -> Any:
    """Coerce YAML scalars to the string form the engine stores."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return value


def _stringify_map(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k): to_wire_string(v) for k, v in value.items()}
    return value


class _Resource(BaseModel):
    """Base for every resource section: aliases on, unknown keys preserved."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)


class _Labelled(_Resource):
    labels: dict[str, str] | None = None
    annotations: dict[str, str] | None = None

    @field_validator("labels", "annotations", mode="before")
    @classmethod
    def _coerce_values(cls, v: Any) -> Any:
        return _stringify_map(v)


# =============================================================================
# METADATA
# =============================================================================


class OwnerReference(_Resource):
    """Garbage-collection back-reference to a parent resource."""

    api_version: str | None = Field(default=None, alias="apiVersion")
    kind: str | None = None
    name: str | None = None
    uid: str | None = None
    controller: bool | None = None
    block_owner_deletion: bool | None = Field(default=None, alias="blockOwnerDeletion")


class ObjectMeta(_Labelled):
    """Resource metadata. ``name`` and ``generate_name`` are mutually exclusive on submit."""

    name: str | None = None
    generate_name: str | None = Field(default=None, alias="generateName")
    namespace: str | None = None
    uid: str | None = None
    owner_references: list[OwnerReference] | None = Field(default=None, alias="ownerReferences")


class TemplateMetadata(_Labelled):
    """Per-template metadata applied to the pods the template creates."""


class PodMetadata(_Labelled):
    """Spec-level metadata applied to every pod of the workflow."""


# =============================================================================
# SPEC
# =============================================================================


class Parameter(_Resource):
    """A named argument. ``value=None`` means absent, which differs from ``""``."""

    name: str
    value: str | None = None

    @field_validator("value", mode="before")
    @classmethod
    def _coerce_value(cls, v: Any) -> Any:
        return to_wire_string(v)


class Arguments(_Resource):
    parameters: list[Parameter] | None = None


class Template(_Resource):
    """One task template. Container/DAG/steps/resource bodies stay in extras."""

    name: str | None = None
    metadata: TemplateMetadata | None = None


class WorkflowSpec(_Resource):
    entrypoint: str | None = None
    templates: list[Template] | None = None
    arguments: Arguments | None = None
    pod_metadata: PodMetadata | None = Field(default=None, alias="podMetadata")


# =============================================================================
# STATUS
# =============================================================================


class WorkflowPhase(str, Enum):
    """Workflow-level phase reported by the engine."""

    PENDING = "Pending"
    RUNNING = "Running"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    ERROR = "Error"


FINAL_PHASES = frozenset({WorkflowPhase.SUCCEEDED, WorkflowPhase.FAILED, WorkflowPhase.ERROR})


class S3Artifact(_Resource):
    """Object-store location (bucket, endpoint, etc. stay in extras)."""

    key: str | None = None


class Artifact(_Resource):
    """A named artifact. The location variant is inlined, as the engine does."""

    name: str
    s3: S3Artifact | None = None


class Outputs(_Resource):
    artifacts: list[Artifact] | None = None
    parameters: list[Parameter] | None = None


class NodeStatus(_Resource):
    id: str | None = None
    name: str | None = None
    type: str | None = None
    phase: str | None = None
    outputs: Outputs | None = None


class WorkflowStatus(_Resource):
    phase: WorkflowPhase | None = None
    message: str | None = None
    started_at: str | None = Field(default=None, alias="startedAt")
    finished_at: str | None = Field(default=None, alias="finishedAt")
    nodes: dict[str, NodeStatus] | None = None

    @field_validator("phase", mode="before")
    @classmethod
    def _empty_phase(cls, v: Any) -> Any:
        return v or None


# =============================================================================
# RESOURCES
# =============================================================================


class WorkflowResource(_Resource):
    """The complete Workflow resource: type meta, metadata, spec, status."""

    api_version: str | None = Field(default=None, alias="apiVersion")
    kind: str | None = None
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: WorkflowSpec = Field(default_factory=WorkflowSpec)
    status: WorkflowStatus | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain JSON-compatible dict using wire (camelCase) field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ScheduledWorkflow(_Resource):
    """The recurring-run parent. Only its identity is needed here."""

    api_version: str = Field(default=SCHEDULED_WORKFLOW_API_VERSION, alias="apiVersion")
    kind: str = SCHEDULED_WORKFLOW_KIND
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)


__all__ = [
    "OwnerReference",
    "ObjectMeta",
    "TemplateMetadata",
    "PodMetadata",
    "Parameter",
    "Arguments",
    "Template",
    "WorkflowSpec",
    "WorkflowPhase",
    "FINAL_PHASES",
    "S3Artifact",
    "Artifact",
    "Outputs",
    "NodeStatus",
    "WorkflowStatus",
    "WorkflowResource",
    "ScheduledWorkflow",
]
