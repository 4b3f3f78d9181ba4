"""Errors raised while reading and querying navigation data."""

from __future__ import annotations

from collections.abc import Sequence


class NavDataError(Exception):
    """Base class for navigation data errors."""


class MalformedNavTree(NavDataError, ValueError):
    """A tree or table violates the navigation data format.

    Args:
        reason: What is wrong.
        breadcrumb: Labels from the root down to the offending node.
    """

    def __init__(self, reason: str, breadcrumb: Sequence[str] = ()) -> None:
        self.reason = reason
        self.breadcrumb = tuple(breadcrumb)
        if self.breadcrumb:
            super().__init__(f"{' > '.join(self.breadcrumb)}: {reason}")
        else:
            super().__init__(reason)


class NoShardsAvailable(NavDataError, LookupError):
    """The navigation index has no shard boundaries."""

    def __init__(self) -> None:
        super().__init__("Navigation index is empty; no shards available")


class ShardFetchFailure(NavDataError):
    """A lazily loaded child table or index shard could not be fetched."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Failed to fetch {key!r}: {reason}")


class AnchorNotFound(NavDataError, LookupError):
    """An anchor is not listed in the index shard it resolves to."""

    def __init__(self, anchor: str) -> None:
        self.anchor = anchor
        super().__init__(f"Anchor not found in navigation index: {anchor}")
