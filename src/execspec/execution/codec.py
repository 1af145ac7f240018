"""Decoding and canonical encoding of serialized execution resources.

Input may be YAML (what the compiler writes) or JSON (what the engine and
the store hand back). Output for storage is always canonical JSON: sorted
keys, compact separators, ``None`` dropped, so equal resources produce equal
strings regardless of how the input was formatted.
"""

from __future__ import annotations

import json
from typing import Any

import yaml

from execspec.core.errors import InvalidInputError, unmarshal_error


class _NoTimestampLoader(yaml.SafeLoader):
    """SafeLoader that keeps RFC3339 timestamps as strings.

    ``startedAt``/``finishedAt`` and timestamp-looking labels must survive a
    round trip as the exact strings the engine wrote.
    """


_NoTimestampLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != "tag:yaml.org,2002:timestamp"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}


def load_document(data: bytes | str) -> dict[str, Any]:
    """Decode serialized bytes into a mapping.

    Raises:
        InvalidInputError: ``empty input`` for zero-length data, otherwise
            ``Failed to unmarshal the inputs: <cause>``.
    """
    if data is None or len(data) == 0:
        raise InvalidInputError("empty input")

    if isinstance(data, bytes):
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            raise unmarshal_error(e) from e
    else:
        text = data

    try:
        if text.lstrip().startswith("{"):
            document = _load_json_or_flow_yaml(text)
        else:
            document = yaml.load(text, Loader=_NoTimestampLoader)  # noqa: S506 - SafeLoader subclass
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise unmarshal_error(e) from e

    if not isinstance(document, dict):
        raise unmarshal_error(f"expected a mapping at the document root, got {type(document).__name__}")
    return document


def _load_json_or_flow_yaml(text: str) -> Any:
    """JSON first; a flow-style YAML mapping (unquoted keys) is also valid input.

    When both fail the JSON error is reported.
    """
    try:
        return json.loads(text)
    except json.JSONDecodeError as json_error:
        try:
            return yaml.load(text, Loader=_NoTimestampLoader)  # noqa: S506 - SafeLoader subclass
        except yaml.YAMLError:
            raise json_error from None


def dump_canonical(document: dict[str, Any]) -> str:
    """Deterministic compact JSON."""
    return json.dumps(document, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def dump_yaml(document: dict[str, Any]) -> str:
    """Block-style YAML, preserving field order."""
    return yaml.safe_dump(document, sort_keys=False, default_flow_style=False, allow_unicode=True)
