"""
Deep merge of configuration trees.

Configuration values are treated as a tagged union of three node kinds:
mappings merge key by key, sequences merge position by position, and scalars
(None included) overwrite. Every container written into the destination is a
fresh copy, so the two trees never share references after a merge.
"""

from collections.abc import Mapping, Sequence
from enum import Enum, auto
from typing import Any, Callable, Dict, List, MutableMapping


class NodeKind(Enum):
    """Structural kind of a configuration value."""
    SCALAR = auto()
    SEQUENCE = auto()
    MAPPING = auto()


def node_kind(value: Any) -> NodeKind:
    """Classify a configuration value."""
    if isinstance(value, Mapping):
        return NodeKind.MAPPING
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray)):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def _merge_scalar(destination: Any, source: Any) -> Any:
    return source


def _merge_sequence(destination: Any, source: Sequence) -> List[Any]:
    # Positional merge; destination elements past len(source) are kept
    if node_kind(destination) is NodeKind.SEQUENCE and isinstance(destination, list):
        result = destination
    elif node_kind(destination) is NodeKind.SEQUENCE:
        result = list(destination)
    else:
        result = []

    for index, value in enumerate(list(source)):
        if index < len(result):
            result[index] = deep_merge(result[index], value)
        else:
            result.append(deep_merge(None, value))
    return result


def _merge_mapping(destination: Any, source: Mapping) -> MutableMapping[str, Any]:
    if isinstance(destination, MutableMapping):
        result = destination
    elif node_kind(destination) is NodeKind.MAPPING:
        result = dict(destination)
    else:
        result = {}

    for key, value in list(source.items()):
        result[key] = deep_merge(result.get(key), value)
    return result


_MERGERS: Dict[NodeKind, Callable[[Any, Any], Any]] = {
    NodeKind.SCALAR: _merge_scalar,
    NodeKind.SEQUENCE: _merge_sequence,
    NodeKind.MAPPING: _merge_mapping,
}


def deep_merge(destination: Any, source: Any) -> Any:
    """
    Merge source into destination.

    Args:
        destination: Existing value, or None to produce a deep copy of source
        source: Value to merge in; never mutated

    Returns:
        The merged value. This is the destination object itself when it is a
        container of the same kind as source, otherwise a new value.
    """
    return _MERGERS[node_kind(source)](destination, source)
