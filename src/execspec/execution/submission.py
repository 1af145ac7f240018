"""Submission preparation - the fixed mutation sequence for one run.

``prepare_execution`` applies, in order:

1. strict parameter check (only when requested)
2. parameter overrides
3. name assignment
4. ownership by the recurring schedule
5. resource labels, then template labels
6. UID placeholder substitution
7. structural validation

Unknown override keys are silently ignored by step 2. Callers that want
typos rejected instead pass ``strict_parameters=True`` (or set
``EXECSPEC_STRICT_PARAMETERS=true``), which runs ``verify_parameters``
first; the override itself never changes behavior.
"""

from __future__ import annotations

from collections.abc import Mapping

from execspec.core.logging import get_logger
from execspec.core.settings import get_settings
from execspec.execution.models import ScheduledWorkflow
from execspec.execution.spec import ExecutionSpec

logger = get_logger(__name__)


def prepare_execution(
    spec: ExecutionSpec,
    *,
    parameters: Mapping[str, str] | None = None,
    schedule: ScheduledWorkflow | None = None,
    labels: Mapping[str, str] | None = None,
    template_labels: Mapping[str, str] | None = None,
    name: str | None = None,
    uid: str | None = None,
    strict_parameters: bool | None = None,
    ignore_entrypoint: bool = False,
) -> ExecutionSpec:
    """Mutate *spec* for submission and validate it. Returns *spec*.

    Raises:
        ValidationError: strict mode and an override names no declared parameter.
        InvalidInputError: the prepared resource fails validation.
    """
    if strict_parameters is None:
        strict_parameters = get_settings().strict_parameters

    if parameters:
        if strict_parameters:
            spec.verify_parameters(parameters)
        spec.override_parameters(parameters)

    if name:
        spec.override_name(name)

    if schedule is not None:
        spec.set_owner_references(schedule)

    for key, value in (labels or {}).items():
        spec.set_labels(key, value)

    for key, value in (template_labels or {}).items():
        spec.set_labels_to_all_templates(key, value)

    if uid:
        spec.replace_uid(uid)

    spec.validate(ignore_entrypoint=ignore_entrypoint)

    logger.info(
        "execution_prepared",
        execution_type=spec.execution_type().value,
        execution_name=spec.execution_name(),
        parameters=sorted(parameters or {}),
        owned_by_schedule=spec.has_scheduled_workflow_as_parent(),
        strict=strict_parameters,
    )
    return spec
