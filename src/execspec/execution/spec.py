"""ExecutionSpec - the engine-agnostic view of one pipeline run.

An ExecutionSpec wraps exactly one native execution resource (an Argo
Workflow today) and exposes the lifecycle operations the run-submission
backend needs, without the backend ever branching on engine type.

ARCHITECTURE
────────────
::

    ExecutionSpec (ABC)
      ├── construct   ─ from_bytes(data) / from_object(obj)   (classmethods)
      ├── mutate      ─ override_name, override_parameters, set_owner_references,
      │                 set_labels, set_labels_to_all_templates, replace_uid, ...
      ├── inspect     ─ condition, scheduled_workflow_uuid_as_string_or_empty,
      │                 find_object_store_artifact_key_or_empty, ...
      └── serialize   ─ to_string_for_store, content_hash, get()
              │
              ▼
        Workflow (Argo adapter)        <reserved: PipelineRun adapter>

    Adapters are registered with the factory (``factory.py``) by their
    ExecutionType and their (api-group, kind) discriminator.

BEST PRACTICES
──────────────
- Create a fresh instance per submission attempt; never share one across
  threads.
- Mutate in this order: override → ownership → labels → validate, then
  serialize once. ``submission.prepare_execution`` does exactly that.
- Introspection never raises; only construction and validation do.

Tags:
    execspec, execution, spec, abstraction, adapter-ABC

Doc-Types:
    api-reference
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any, ClassVar

from execspec.core.hashing import compute_document_hash
from execspec.execution.codec import load_document
from execspec.execution.types import ExecutionType


class ExecutionSpec(ABC):
    """Capability interface every engine adapter satisfies.

    Class attributes identify the adapter to the factory:

    - ``EXECUTION_TYPE``: the engine type tag
    - ``API_GROUP`` / ``KIND``: discriminator matched against serialized input
    - ``HOST_TYPE``: the typed resource ``from_object`` accepts

    Instances compare equal by engine type and resource content and are
    therefore unhashable.
    """

    EXECUTION_TYPE: ClassVar[ExecutionType]
    API_GROUP: ClassVar[str]
    KIND: ClassVar[str]
    HOST_TYPE: ClassVar[type]

    # ── Construction ─────────────────────────────────────────────

    @classmethod
    def from_bytes(cls, data: bytes | str) -> ExecutionSpec:
        """Parse a serialized (YAML or JSON) resource."""
        return cls.from_dict(load_document(data))

    @classmethod
    @abstractmethod
    def from_dict(cls, document: Mapping[str, Any]) -> ExecutionSpec:
        """Build from an already-decoded document."""
        ...

    @classmethod
    @abstractmethod
    def from_object(cls, obj: Any) -> ExecutionSpec:
        """Wrap an in-memory host object of ``HOST_TYPE``."""
        ...

    @classmethod
    def matches(cls, api_version: str | None, kind: str | None) -> bool:
        """Whether a serialized document's type meta selects this adapter."""
        group = (api_version or "").split("/", 1)[0]
        return group == cls.API_GROUP and kind == cls.KIND

    # ── Mutation ─────────────────────────────────────────────────

    @abstractmethod
    def override_name(self, name: str) -> None: ...

    @abstractmethod
    def set_execution_name(self, name: str) -> None: ...

    @abstractmethod
    def override_parameters(self, overrides: Mapping[str, str] | None) -> None: ...

    @abstractmethod
    def verify_parameters(self, names: Iterable[str] | None) -> None: ...

    @abstractmethod
    def set_owner_references(self, schedule: Any) -> None: ...

    @abstractmethod
    def set_labels(self, key: str, value: str) -> None: ...

    @abstractmethod
    def set_labels_to_all_templates(self, key: str, value: str) -> None: ...

    @abstractmethod
    def set_annotations(self, key: str, value: str) -> None: ...

    @abstractmethod
    def set_annotations_to_all_templates(self, key: str, value: str) -> None: ...

    @abstractmethod
    def set_canonical_labels(self, schedule_name: str, next_scheduled_epoch: int, index: int) -> None: ...

    @abstractmethod
    def replace_uid(self, uid: str) -> None: ...

    @abstractmethod
    def get_execution_spec(self) -> ExecutionSpec:
        """Reusable template: spec only, identity reduced to a generate-name."""
        ...

    @abstractmethod
    def validate(self, *, ignore_entrypoint: bool = False) -> None: ...

    # ── Introspection ────────────────────────────────────────────

    @abstractmethod
    def execution_name(self) -> str: ...

    @abstractmethod
    def execution_namespace(self) -> str: ...

    @abstractmethod
    def execution_uid(self) -> str: ...

    @abstractmethod
    def scheduled_workflow_uuid_as_string_or_empty(self) -> str: ...

    def has_scheduled_workflow_as_parent(self) -> bool:
        return self.scheduled_workflow_uuid_as_string_or_empty() != ""

    @abstractmethod
    def scheduled_at_in_sec_or_0(self) -> int: ...

    @abstractmethod
    def condition(self) -> str: ...

    @abstractmethod
    def is_in_final_state(self) -> bool: ...

    @abstractmethod
    def find_object_store_artifact_key_or_empty(self, node_id: str, artifact_name: str) -> str: ...

    @abstractmethod
    def parameters(self) -> dict[str, str | None]: ...

    # ── Serialization ────────────────────────────────────────────

    @abstractmethod
    def to_string_for_store(self) -> str:
        """Deterministic JSON for persistence and equality checks."""
        ...

    @abstractmethod
    def to_yaml(self) -> str: ...

    @abstractmethod
    def get(self) -> Any:
        """The underlying typed resource (engine-specific escape hatch)."""
        ...

    def content_hash(self) -> str:
        """Short stable hash of the canonical form."""
        return compute_document_hash(self.to_string_for_store())

    def execution_type(self) -> ExecutionType:
        return self.EXECUTION_TYPE

    # Mutable wrapper: equal by content, so not hashable.
    __hash__ = None  # type: ignore[assignment]

    def __eq__(self, other: object) -> bool:
        """Same engine type and equal underlying resources."""
        if not isinstance(other, ExecutionSpec):
            return NotImplemented
        return self.EXECUTION_TYPE == other.EXECUTION_TYPE and self.get() == other.get()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.execution_name()!r})"
