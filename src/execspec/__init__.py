"""
execspec - execution spec abstraction and workflow lifecycle manager.

- execspec.core: errors, constants, logging, settings
- execspec.execution: ExecutionSpec, engine adapters, factory, submission
- execspec.cli: command-line inspection and preparation of serialized specs
"""

__version__ = "0.4.0"

from execspec.core.errors import (  # noqa: E402
    ExecSpecError,
    InternalServerError,
    InvalidInputError,
    ValidationError,
)
from execspec.execution import (  # noqa: E402
    ExecutionSpec,
    ExecutionType,
    Workflow,
    new_execution_spec,
    new_execution_spec_from_object,
    prepare_execution,
)

__all__ = [
    "__version__",
    "ExecSpecError",
    "InternalServerError",
    "InvalidInputError",
    "ValidationError",
    "ExecutionSpec",
    "ExecutionType",
    "Workflow",
    "new_execution_spec",
    "new_execution_spec_from_object",
    "prepare_execution",
]
