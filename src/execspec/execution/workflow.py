"""Argo Workflow adapter - the reference ExecutionSpec implementation.

Wraps a :class:`~execspec.execution.models.WorkflowResource` and implements
every submission-time mutation and status-time lookup the backend needs.

Mutation rules worth knowing before changing anything here:

- ``override_parameters`` only ever replaces values of parameters the
  compiled template already declares. Unknown override keys are dropped, so
  a caller can never inject a parameter the pipeline did not declare.
- ``set_owner_references`` always writes exactly one reference, to the
  recurring schedule, with ``controller`` and ``blockOwnerDeletion`` set.
- ``replace_uid`` is a text substitution over the serialized form. The
  placeholder usually sits inside a manifest string embedded in a resource
  template, which is not modelled.
- Loop and selector expressions (``withParam``, ``{{=jsonpath(...)}}``,
  ``{{inputs.parameters.x}}``) live in template extras and are never
  touched.

Example:
    >>> wf = Workflow.from_bytes(compiled_yaml)
    >>> wf.override_parameters({"learning_rate": "0.01"})
    >>> wf.set_owner_references(schedule)
    >>> wf.set_labels("pipeline/runid", run_id)
    >>> wf.validate()
    >>> payload = wf.to_string_for_store()

Tags:
    execspec, execution, argo, workflow, adapter

Doc-Types:
    api-reference
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from datetime import datetime
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from execspec.core.constants import (
    LABEL_KEY_IS_OWNED_BY_SCHEDULED_WORKFLOW,
    LABEL_KEY_PERSISTED_FINAL_STATE,
    LABEL_KEY_SCHEDULED_WORKFLOW_NAME,
    LABEL_KEY_WORKFLOW_EPOCH,
    LABEL_KEY_WORKFLOW_INDEX,
    MAX_GENERATE_NAME_LENGTH,
    SCHEDULED_WORKFLOW_API_VERSION,
    SCHEDULED_WORKFLOW_KIND,
    WORKFLOW_API_GROUP,
    WORKFLOW_KIND,
    WORKFLOW_UID_PLACEHOLDER,
)
from execspec.core.errors import InvalidInputError, ValidationError, unmarshal_error
from execspec.core.logging import get_logger
from execspec.execution.codec import dump_canonical, dump_yaml
from execspec.execution.models import (
    FINAL_PHASES,
    ObjectMeta,
    OwnerReference,
    PodMetadata,
    ScheduledWorkflow,
    TemplateMetadata,
    WorkflowResource,
    to_wire_string,
)
from execspec.execution.spec import ExecutionSpec
from execspec.execution.types import ExecutionType

logger = get_logger(__name__)


class Workflow(ExecutionSpec):
    """ExecutionSpec backed by an Argo ``Workflow`` resource.

    The wrapped resource is shared, not copied: mutations through this
    adapter are visible on the object passed to the constructor.
    """

    EXECUTION_TYPE = ExecutionType.WORKFLOW
    API_GROUP = WORKFLOW_API_GROUP
    KIND = WORKFLOW_KIND
    HOST_TYPE = WorkflowResource

    def __init__(self, resource: WorkflowResource):
        self._resource = resource

    # =========================================================================
    # CONSTRUCTION
    # =========================================================================

    @classmethod
    def from_dict(cls, document: Mapping[str, Any]) -> Workflow:
        try:
            resource = WorkflowResource.model_validate(document)
        except PydanticValidationError as e:
            raise unmarshal_error(e) from e
        return cls(resource)

    @classmethod
    def from_object(cls, obj: Any) -> Workflow:
        if not isinstance(obj, WorkflowResource):
            raise InvalidInputError("not a Workflow resource").with_context(
                execution_type=str(cls.EXECUTION_TYPE),
                received_type=type(obj).__name__,
            )
        return cls(obj)

    # =========================================================================
    # MUTATION
    # =========================================================================

    def override_name(self, name: str) -> None:
        """Assign a concrete name; a generate-name can no longer apply."""
        self._resource.metadata.generate_name = None
        self._resource.metadata.name = name

    def set_execution_name(self, name: str) -> None:
        self.override_name(name)

    def override_parameters(self, overrides: Mapping[str, str] | None) -> None:
        """Replace values of declared parameters named in *overrides*.

        Keys that name no declared parameter are ignored; no parameter is
        ever added.
        """
        params = self._declared_parameters()
        if not overrides or not params:
            return

        applied = 0
        for param in params:
            if param.name in overrides:
                param.value = to_wire_string(overrides[param.name])
                applied += 1

        ignored = sorted(set(overrides) - {p.name for p in params})
        logger.debug(
            "parameters_overridden",
            execution_name=self.execution_name(),
            applied=applied,
            ignored=ignored,
        )

    def verify_parameters(self, names: Iterable[str] | None) -> None:
        """Raise ValidationError if any of *names* is not a declared parameter."""
        if not names:
            return
        declared = {p.name for p in self._declared_parameters()}
        unknown = sorted(set(names) - declared)
        if unknown:
            logger.warning(
                "unrecognized_parameters",
                execution_name=self.execution_name(),
                unknown=unknown,
            )
            raise ValidationError(
                f"Unrecognized input parameter: {unknown[0]}",
                unknown_parameters=unknown,
            ).with_context(execution_name=self.execution_name(), parameter=unknown[0])

    def set_owner_references(self, schedule: ScheduledWorkflow) -> None:
        """Make *schedule* the controlling owner of this run."""
        if not isinstance(schedule, ScheduledWorkflow):
            raise InvalidInputError("not a ScheduledWorkflow resource").with_context(
                received_type=type(schedule).__name__,
            )
        self._resource.metadata.owner_references = [
            OwnerReference(
                api_version=SCHEDULED_WORKFLOW_API_VERSION,
                kind=SCHEDULED_WORKFLOW_KIND,
                name=schedule.metadata.name,
                uid=schedule.metadata.uid,
                controller=True,
                block_owner_deletion=True,
            )
        ]

    def set_labels(self, key: str, value: str) -> None:
        meta = self._resource.metadata
        if meta.labels is None:
            meta.labels = {}
        meta.labels[key] = value

    def set_annotations(self, key: str, value: str) -> None:
        meta = self._resource.metadata
        if meta.annotations is None:
            meta.annotations = {}
        meta.annotations[key] = value

    def set_labels_to_all_templates(self, key: str, value: str) -> None:
        for template in self._resource.spec.templates or []:
            if template.metadata is None:
                template.metadata = TemplateMetadata()
            if template.metadata.labels is None:
                template.metadata.labels = {}
            template.metadata.labels[key] = value

    def set_annotations_to_all_templates(self, key: str, value: str) -> None:
        for template in self._resource.spec.templates or []:
            if template.metadata is None:
                template.metadata = TemplateMetadata()
            if template.metadata.annotations is None:
                template.metadata.annotations = {}
            template.metadata.annotations[key] = value

    def set_pod_metadata_labels(self, key: str, value: str) -> None:
        spec = self._resource.spec
        if spec.pod_metadata is None:
            spec.pod_metadata = PodMetadata()
        if spec.pod_metadata.labels is None:
            spec.pod_metadata.labels = {}
        spec.pod_metadata.labels[key] = value

    def set_canonical_labels(self, schedule_name: str, next_scheduled_epoch: int, index: int) -> None:
        """Stamp the labels the schedule controller uses to find its runs."""
        self.set_labels(LABEL_KEY_IS_OWNED_BY_SCHEDULED_WORKFLOW, "true")
        self.set_labels(LABEL_KEY_SCHEDULED_WORKFLOW_NAME, schedule_name)
        self.set_labels(LABEL_KEY_WORKFLOW_EPOCH, str(next_scheduled_epoch))
        self.set_labels(LABEL_KEY_WORKFLOW_INDEX, str(index))

    def mark_persisted_final_state(self) -> None:
        self.set_labels(LABEL_KEY_PERSISTED_FINAL_STATE, "true")

    def replace_uid(self, uid: str) -> None:
        """Substitute every ``{{workflow.uid}}`` with *uid*."""
        serialized = self.to_string_for_store()
        if WORKFLOW_UID_PLACEHOLDER not in serialized:
            return
        # The replacement lands inside JSON string literals.
        escaped = json.dumps(uid)[1:-1]
        replaced = serialized.replace(WORKFLOW_UID_PLACEHOLDER, escaped)
        self._resource = WorkflowResource.model_validate_json(replaced)
        logger.debug("workflow_uid_replaced", execution_name=self.execution_name(), uid=uid)

    def get_execution_spec(self) -> Workflow:
        """Reusable template for runs that each get their own generated name."""
        source = self._resource
        name = source.metadata.name or ""
        return Workflow(
            WorkflowResource(
                api_version=source.api_version,
                kind=source.kind,
                metadata=ObjectMeta(generate_name=name[:MAX_GENERATE_NAME_LENGTH] or None),
                spec=source.spec.model_copy(deep=True),
            )
        )

    def validate(self, *, ignore_entrypoint: bool = False) -> None:
        """Check the structural invariants required before submission.

        Raises:
            InvalidInputError: describing the first violated invariant.
        """
        meta = self._resource.metadata
        if bool(meta.name) == bool(meta.generate_name):
            raise InvalidInputError(
                "exactly one of metadata.name and metadata.generateName must be set"
            ).with_context(execution_name=self.execution_name())

        names = [p.name for p in self._declared_parameters()]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise InvalidInputError(f"duplicate parameter names: {', '.join(duplicates)}").with_context(
                execution_name=self.execution_name()
            )

        templates = self.template_names()
        duplicates = sorted({n for n in templates if templates.count(n) > 1})
        if duplicates:
            raise InvalidInputError(f"duplicate template names: {', '.join(duplicates)}").with_context(
                execution_name=self.execution_name()
            )

        if not ignore_entrypoint:
            entrypoint = self._resource.spec.entrypoint
            if not entrypoint:
                raise InvalidInputError("spec.entrypoint is required").with_context(
                    execution_name=self.execution_name()
                )
            if entrypoint not in templates:
                raise InvalidInputError(
                    f"spec.entrypoint {entrypoint!r} does not name a template"
                ).with_context(execution_name=self.execution_name())

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def execution_name(self) -> str:
        meta = self._resource.metadata
        return meta.name or meta.generate_name or ""

    def execution_namespace(self) -> str:
        return self._resource.metadata.namespace or ""

    def execution_uid(self) -> str:
        return self._resource.metadata.uid or ""

    def scheduled_workflow_uuid_as_string_or_empty(self) -> str:
        for ref in self._resource.metadata.owner_references or []:
            if ref.api_version == SCHEDULED_WORKFLOW_API_VERSION and ref.kind == SCHEDULED_WORKFLOW_KIND:
                return ref.uid or ""
        return ""

    def scheduled_at_in_sec_or_0(self) -> int:
        labels = self._resource.metadata.labels or {}
        raw = labels.get(LABEL_KEY_WORKFLOW_EPOCH)
        if raw is None:
            return 0
        try:
            return int(raw)
        except ValueError:
            logger.debug("invalid_schedule_epoch_label", execution_name=self.execution_name(), value=raw)
            return 0

    def condition(self) -> str:
        status = self._resource.status
        if status is None or status.phase is None:
            return ""
        return status.phase.value

    def message(self) -> str:
        status = self._resource.status
        return (status.message or "") if status else ""

    def is_in_final_state(self) -> bool:
        status = self._resource.status
        return status is not None and status.phase in FINAL_PHASES

    def is_persisted_final_state(self) -> bool:
        labels = self._resource.metadata.labels or {}
        return labels.get(LABEL_KEY_PERSISTED_FINAL_STATE) == "true"

    def finished_at_in_sec_or_0(self) -> int:
        status = self._resource.status
        if status is None or not status.finished_at:
            return 0
        try:
            finished = datetime.fromisoformat(status.finished_at.replace("Z", "+00:00"))
        except ValueError:
            return 0
        return int(finished.timestamp())

    def find_object_store_artifact_key_or_empty(self, node_id: str, artifact_name: str) -> str:
        status = self._resource.status
        if status is None or not status.nodes:
            return ""
        node = status.nodes.get(node_id)
        if node is None or node.outputs is None:
            return ""
        for artifact in node.outputs.artifacts or []:
            if artifact.name == artifact_name:
                if artifact.s3 is None:
                    return ""
                return artifact.s3.key or ""
        return ""

    def parameters(self) -> dict[str, str | None]:
        return {p.name: p.value for p in self._declared_parameters()}

    def template_names(self) -> list[str]:
        return [t.name for t in self._resource.spec.templates or [] if t.name]

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    def to_string_for_store(self) -> str:
        return dump_canonical(self._resource.to_dict())

    def to_yaml(self) -> str:
        return dump_yaml(self._resource.to_dict())

    def get(self) -> WorkflowResource:
        return self._resource

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _declared_parameters(self):
        arguments = self._resource.spec.arguments
        if arguments is None:
            return []
        return arguments.parameters or []
