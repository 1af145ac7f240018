"""ExecutionSpec factory - dispatch from bytes or host objects to an adapter.

ARCHITECTURE
────────────
::

    new_execution_spec(data)
      └── load_document → (apiVersion group, kind) → matching adapter.from_dict

    new_execution_spec_from_object(execution_type, obj)
      └── dispatch table[execution_type] → adapter.from_object(obj)

    register_execution_spec(cls)    ─ add an adapter to the dispatch table
    get_execution_spec_class(type)  ─ lookup, InternalServerError if missing
    list_execution_types()          ─ registered engine types

Adding an engine is one adapter class plus one ``register_execution_spec``
call; callers never branch on engine type.

Tags:
    execspec, execution, factory, registry, dispatch

Doc-Types:
    api-reference
"""

from __future__ import annotations

from typing import Any

from execspec.core.errors import InvalidInputError, unsupported_execution_type
from execspec.core.logging import get_logger
from execspec.execution.codec import load_document
from execspec.execution.spec import ExecutionSpec
from execspec.execution.types import ExecutionType

logger = get_logger(__name__)

_registry: dict[ExecutionType, type[ExecutionSpec]] = {}


def register_execution_spec(cls: type[ExecutionSpec]) -> type[ExecutionSpec]:
    """Register an adapter class under its ``EXECUTION_TYPE``.

    Usable as a class decorator. Re-registering the same class is a no-op;
    registering a different class for a taken type raises ValueError.
    """
    existing = _registry.get(cls.EXECUTION_TYPE)
    if existing is not None and existing is not cls:
        raise ValueError(
            f"ExecutionType {cls.EXECUTION_TYPE.value!r} is already registered to {existing.__name__}"
        )
    _registry[cls.EXECUTION_TYPE] = cls
    logger.debug(
        "execution_spec_registered",
        execution_type=cls.EXECUTION_TYPE.value,
        adapter=cls.__name__,
        api_group=cls.API_GROUP,
        kind=cls.KIND,
    )
    return cls


def unregister_execution_spec(execution_type: ExecutionType) -> None:
    """Remove an adapter (primarily for testing)."""
    _registry.pop(ExecutionType(execution_type), None)


def get_execution_spec_class(execution_type: ExecutionType | str) -> type[ExecutionSpec]:
    """Look up the adapter for *execution_type*.

    Raises:
        InternalServerError: ``type:<engineType>: ExecutionType is not supported``
    """
    try:
        key = ExecutionType(execution_type)
    except ValueError:
        raise unsupported_execution_type(execution_type) from None
    cls = _registry.get(key)
    if cls is None:
        raise unsupported_execution_type(key)
    return cls


def list_execution_types() -> list[ExecutionType]:
    return sorted(_registry, key=lambda t: t.value)


def new_execution_spec(data: bytes | str) -> ExecutionSpec:
    """Materialize an ExecutionSpec from serialized YAML or JSON.

    Raises:
        InvalidInputError: empty input, undecodable input, or a document whose
            api-group/kind matches no registered adapter.
    """
    document = load_document(data)
    api_version = document.get("apiVersion")
    kind = document.get("kind")
    for cls in _registry.values():
        if cls.matches(api_version, kind):
            spec = cls.from_dict(document)
            logger.debug(
                "execution_spec_parsed",
                execution_type=cls.EXECUTION_TYPE.value,
                execution_name=spec.execution_name(),
            )
            return spec
    logger.debug("unknown_execution_spec", api_version=api_version, kind=kind)
    raise InvalidInputError("Unknown execution spec").with_context(api_version=api_version, kind=kind)


def new_execution_spec_from_object(execution_type: ExecutionType | str, obj: Any) -> ExecutionSpec:
    """Wrap a typed host object with the adapter for *execution_type*.

    Raises:
        InternalServerError: no adapter for *execution_type*.
        InvalidInputError: *obj* is not the adapter's host type.
    """
    cls = get_execution_spec_class(execution_type)
    return cls.from_object(obj)


from execspec.execution.workflow import Workflow  # noqa: E402

register_execution_spec(Workflow)
