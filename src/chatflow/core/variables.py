"""Session-scoped variable store."""

from collections.abc import Iterator, MutableMapping
from types import MappingProxyType
from typing import Any


class VariableStore(MutableMapping[str, Any]):
    """Variables written by SaveResponse, Integration and AICall blocks.

    Entries are created lazily on first write and live as long as the runner
    that owns the store.
    """

    def __init__(self, initial: dict[str, Any] | None = None) -> None:
        self._values: dict[str, Any] = dict(initial or {})

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._values[name] = value

    def __delitem__(self, name: str) -> None:
        del self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"VariableStore({self._values!r})"

    def snapshot(self) -> MappingProxyType[str, Any]:
        """Read-only copy of the current values."""
        return MappingProxyType(dict(self._values))
