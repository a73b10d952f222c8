"""Store contract consumed by the TUI and its SQLite reference adapter.

The TUI never touches storage directly: worker threads call these methods
and turn results or ``StoreError`` into completion messages.
"""

from __future__ import annotations

from datetime import datetime
from typing import Protocol

from ..errors import StoreError
from ..model import AgentContext, DepStatus, Item, ItemType, LogEntry, Status


class Store(Protocol):
    def list_items(self, project: str | None = None) -> list[Item]: ...

    def get_item(self, item_id: str) -> Item: ...

    def get_logs(self, item_id: str) -> list[LogEntry]: ...

    def get_depends_on(self, item_id: str) -> list[DepStatus]: ...

    def get_blocked_by(self, item_id: str) -> list[DepStatus]: ...

    def update_status(self, item_id: str, status: Status, agent: AgentContext) -> None: ...

    def add_log(self, item_id: str, text: str) -> None: ...

    def add_dependency(self, blocker_id: str, blocked_id: str) -> None: ...

    def create_item(self, item: Item) -> None: ...

    def set_parent(self, item_id: str, parent_id: str) -> None: ...

    def add_label(self, item_id: str, project: str, name: str) -> None: ...

    def set_description(self, item_id: str, text: str) -> None: ...

    def set_template_variable(self, item_id: str, name: str, value: str) -> None: ...

    def update_priority(self, item_id: str, priority: int) -> None: ...

    def delete_item(self, item_id: str) -> None: ...

    def stale_items(self, project: str | None, cutoff: datetime) -> list[Item]: ...

    def generate_item_id(self, item_type: ItemType) -> str: ...


def open_store(path: str, **kwargs) -> Store:
    """Lazily import the SQLite adapter and open ``path``."""
    from .sqlite import SqliteStore

    return SqliteStore(path, **kwargs)


__all__ = ["Store", "StoreError", "open_store"]
