"""Shard boundaries of the generated navigation index.

The generator splits its sorted anchor index over several
``navtreeindex<N>.js`` files. ``NAVTREEINDEX`` lists the first key of every
file, so the file holding any anchor is found by binary search over those
boundaries.
"""

from __future__ import annotations

import locale
from bisect import bisect_right
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from doxnav.errors import MalformedNavTree, NoShardsAvailable

SHARD_FILE_PREFIX = "navtreeindex"
SHARD_VARIABLE_PREFIX = "NAVTREEINDEX"


class SortPolicy(str, Enum):
    """How index keys are compared.

    ``LOCALE`` collates with the process's ``LC_COLLATE``, which starts out
    as the C locale; call :func:`set_collation` first.
    """

    BYTES = "bytes"
    CASEFOLD = "casefold"
    LOCALE = "locale"

    def sort_key(self) -> Callable[[str], str]:
        if self is SortPolicy.CASEFOLD:
            return str.casefold
        if self is SortPolicy.LOCALE:
            return locale.strxfrm
        return str


@dataclass(frozen=True)
class NavTreeIndex:
    """Ordered shard boundary keys; position ``i`` starts shard ``i``.

    Raises:
        MalformedNavTree: If the keys are not strictly increasing under
            ``policy``.
    """

    keys: tuple[str, ...]
    policy: SortPolicy = SortPolicy.BYTES
    _sort_keys: tuple[str, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        transform = self.policy.sort_key()
        sort_keys = tuple(transform(key) for key in self.keys)
        for position in range(1, len(sort_keys)):
            if sort_keys[position - 1] >= sort_keys[position]:
                raise MalformedNavTree(
                    f"NAVTREEINDEX entry {position} ({self.keys[position]!r}) does "
                    f"not sort after {self.keys[position - 1]!r} "
                    f"under {self.policy.value!r} order"
                )
        object.__setattr__(self, "_sort_keys", sort_keys)

    @classmethod
    def from_keys(
        cls, keys: Sequence[str], policy: SortPolicy = SortPolicy.BYTES
    ) -> NavTreeIndex:
        return cls(tuple(keys), policy)

    def __len__(self) -> int:
        return len(self.keys)

    def resolve(self, key: str) -> int:
        return resolve_shard(self, key)


def resolve_shard(index: NavTreeIndex, key: str) -> int:
    """Find the shard that holds ``key``.

    Returns the greatest ``i`` with ``index.keys[i] <= key``. Keys before the
    first boundary map to shard 0; there is no "not found".

    Raises:
        NoShardsAvailable: If the index is empty.
    """
    if not index.keys:
        raise NoShardsAvailable()
    position = bisect_right(index._sort_keys, index.policy.sort_key()(key))
    return max(position - 1, 0)


def shard_file_name(number: int) -> str:
    """File name of index shard ``number`` (e.g. ``navtreeindex3.js``)."""
    return f"{SHARD_FILE_PREFIX}{number}.js"


def shard_variable_name(number: int) -> str:
    return f"{SHARD_VARIABLE_PREFIX}{number}"


def set_collation(collation: str = "") -> str:
    """Select the ``LC_COLLATE`` locale used by :attr:`SortPolicy.LOCALE`.

    Args:
        collation: Locale name such as ``en_US.UTF-8``; empty takes it from
            the environment (``LC_ALL``, ``LC_COLLATE``, ``LANG``).

    Returns:
        The locale now in effect.

    Raises:
        ValueError: If the locale is not available.
    """
    try:
        return locale.setlocale(locale.LC_COLLATE, collation)
    except locale.Error as exc:
        raise ValueError(f"Unknown collation {collation!r}: {exc}") from None
