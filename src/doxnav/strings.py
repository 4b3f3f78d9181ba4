"""Tooltip strings for the tree view's synchronisation toggle."""

from __future__ import annotations

from dataclasses import dataclass

SYNC_ON_MESSAGE = "click to disable panel synchronisation"
SYNC_OFF_MESSAGE = "click to enable panel synchronisation"


@dataclass(frozen=True)
class SyncMessages:
    """``SYNCONMSG`` and ``SYNCOFFMSG`` as declared by the artifact."""

    sync_on: str = SYNC_ON_MESSAGE
    sync_off: str = SYNC_OFF_MESSAGE
