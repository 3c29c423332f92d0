"""Path-addressed output record filled in while a run executes."""

from __future__ import annotations

import copy
from typing import Any

from chorus.errors import OutputAddressError
from chorus.types import Address, PathKey

_MISSING = object()


def format_address(path: Address) -> str:
    return "/".join(str(part) for part in path)


class OutputMap:
    """Nested dict/list record addressed by ``(key, index, key, ...)`` paths."""

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data if data is not None else {}

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"OutputMap({self._data!r})"

    def get(self, path: Address, default: Any = None) -> Any:
        node: Any = self._data
        for key in path:
            node = _child(node, key)
            if node is _MISSING:
                return default
        return node

    def set(self, path: Address, value: Any) -> None:
        if not path:
            raise OutputAddressError(path, "cannot replace the output root")
        parent = self._container(path[:-1])
        _assign(parent, path, value)

    def ensure_list(self, path: Address) -> list[Any]:
        """Return the list stored at ``path``, creating an empty one when absent."""
        current = self.get(path, _MISSING)
        if current is _MISSING:
            self.set(path, [])
            return self.get(path)
        if not isinstance(current, list):
            raise OutputAddressError(path, f"expected a list, found {type(current).__name__}")
        return current

    def to_dict(self) -> dict[str, Any]:
        return copy.deepcopy(self._data)

    def _container(self, path: Address) -> dict[str, Any] | list[Any]:
        node: Any = self._data
        for depth, key in enumerate(path):
            child = _child(node, key)
            if child is _MISSING:
                child = {}
                _assign(node, path[: depth + 1], child)
            node = child
        if not isinstance(node, (dict, list)):
            raise OutputAddressError(path, f"cannot write into {type(node).__name__}")
        return node


def _child(node: Any, key: PathKey) -> Any:
    if isinstance(node, dict):
        return node.get(key, _MISSING)
    if isinstance(node, list) and isinstance(key, int) and 0 <= key < len(node):
        return node[key]
    return _MISSING


def _assign(node: Any, path: Address, value: Any) -> None:
    key = path[-1]
    if isinstance(node, dict):
        if not isinstance(key, str):
            raise OutputAddressError(path, "mapping keys must be strings")
        node[key] = value
        return
    if isinstance(node, list):
        if not isinstance(key, int) or key < 0 or key > len(node):
            raise OutputAddressError(path, f"index out of range for list of {len(node)}")
        if key == len(node):
            node.append(value)
        else:
            node[key] = value
        return
    raise OutputAddressError(path, f"cannot write into {type(node).__name__}")
