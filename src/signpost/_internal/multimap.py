"""Read-only multi-valued string mappings, as conditions see them.

``RequestDescriptor.headers`` and ``RequestDescriptor.query`` are typed
against this protocol. Anything that satisfies it is passed through as is,
so an HTTP layer can hand over its own header or query objects instead of
copying them into ``Headers`` / ``QueryParams``.
"""

from collections.abc import Iterator
from typing import Protocol, runtime_checkable


@runtime_checkable
class MultiValueMapping(Protocol):
    """String keys with one or more string values each.

    Indexing and ``get`` give the first value; ``get_list`` gives them all
    (empty when the key is absent).
    """

    def __getitem__(self, key: str) -> str: ...
    def __contains__(self, key: object) -> bool: ...
    def __iter__(self) -> Iterator[str]: ...
    def __len__(self) -> int: ...
    def get(self, key: str, default: str | None = None) -> str | None: ...
    def get_list(self, key: str) -> list[str]: ...
