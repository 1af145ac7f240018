"""
Execution specs: engine-agnostic run resources and their adapters.

Typical use::

    from execspec.execution import new_execution_spec, prepare_execution

    spec = new_execution_spec(stored_template_bytes)
    prepare_execution(spec, parameters={"epochs": "5"}, labels={"pipeline/runid": run_id})
    payload = spec.to_string_for_store()
"""

from execspec.execution.factory import (
    get_execution_spec_class,
    list_execution_types,
    new_execution_spec,
    new_execution_spec_from_object,
    register_execution_spec,
    unregister_execution_spec,
)
from execspec.execution.models import (
    Artifact,
    NodeStatus,
    ObjectMeta,
    OwnerReference,
    Parameter,
    ScheduledWorkflow,
    WorkflowPhase,
    WorkflowResource,
    WorkflowStatus,
)
from execspec.execution.spec import ExecutionSpec
from execspec.execution.submission import prepare_execution
from execspec.execution.types import ExecutionType
from execspec.execution.workflow import Workflow

__all__ = [
    # Abstraction
    "ExecutionSpec",
    "ExecutionType",
    "Workflow",
    # Factory
    "new_execution_spec",
    "new_execution_spec_from_object",
    "register_execution_spec",
    "unregister_execution_spec",
    "get_execution_spec_class",
    "list_execution_types",
    # Submission
    "prepare_execution",
    # Models
    "Artifact",
    "NodeStatus",
    "ObjectMeta",
    "OwnerReference",
    "Parameter",
    "ScheduledWorkflow",
    "WorkflowPhase",
    "WorkflowResource",
    "WorkflowStatus",
]
