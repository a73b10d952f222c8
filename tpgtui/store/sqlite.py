"""SQLite-backed store adapter.

One connection is shared by the dispatcher's worker threads, so every
statement runs under a lock. Schema management is limited to
``CREATE TABLE IF NOT EXISTS``.
"""

from __future__ import annotations

import json
import logging
import secrets
import sqlite3
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path

from ..errors import StoreError
from ..model import AgentContext, DepStatus, Item, ItemType, LogEntry, Status

logger = logging.getLogger(__name__)

SCHEMA = """
CREATE TABLE IF NOT EXISTS items (
    id TEXT PRIMARY KEY,
    project TEXT NOT NULL,
    type TEXT NOT NULL,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    status TEXT NOT NULL DEFAULT 'open',
    priority INTEGER NOT NULL DEFAULT 2,
    parent_id TEXT REFERENCES items(id),
    template_id TEXT,
    template_step INTEGER,
    template_vars TEXT,
    template_hash TEXT,
    worktree_branch TEXT,
    worktree_base TEXT,
    updated_by TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS deps (
    item_id TEXT NOT NULL REFERENCES items(id) ON DELETE CASCADE,
    depends_on TEXT NOT NULL REFERENCES items(id) ON DELETE CASCADE,
    PRIMARY KEY (item_id, depends_on)
);

CREATE TABLE IF NOT EXISTS logs (
    id INTEGER PRIMARY KEY,
    item_id TEXT NOT NULL REFERENCES items(id) ON DELETE CASCADE,
    message TEXT NOT NULL,
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS item_labels (
    item_id TEXT NOT NULL REFERENCES items(id) ON DELETE CASCADE,
    project TEXT NOT NULL,
    name TEXT NOT NULL,
    PRIMARY KEY (item_id, name)
);

CREATE INDEX IF NOT EXISTS idx_items_project ON items(project);
CREATE INDEX IF NOT EXISTS idx_items_parent ON items(parent_id);
CREATE INDEX IF NOT EXISTS idx_logs_item ON logs(item_id);
"""

ITEM_COLUMNS = (
    "id, project, type, title, description, status, priority, parent_id, template_id, "
    "template_step, template_vars, template_hash, worktree_branch, worktree_base, "
    "created_at, updated_at"
)

DEFAULT_PREFIXES = {ItemType.TASK: "ts", ItemType.EPIC: "ep"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_time(raw: str | None) -> datetime | None:
    if not raw:
        return None
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return None
    return parsed if parsed.tzinfo is not None else parsed.replace(tzinfo=timezone.utc)


class SqliteStore:
    """Reference ``Store`` implementation over a single SQLite file."""

    def __init__(
        self,
        path: str | Path,
        *,
        prefixes: dict[ItemType, str] | None = None,
        id_length: int = 6,
    ) -> None:
        target = str(path)
        if target != ":memory:":
            Path(target).parent.mkdir(parents=True, exist_ok=True)
        try:
            self._conn = sqlite3.connect(target, check_same_thread=False)
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.executescript(SCHEMA)
        except sqlite3.Error as exc:
            raise StoreError(f"failed to open database {target}: {exc}") from exc
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.Lock()
        self._prefixes = dict(DEFAULT_PREFIXES)
        if prefixes:
            self._prefixes.update(prefixes)
        self._id_length = max(3, id_length)

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def _tx(self, action: str) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                with self._conn:
                    yield self._conn
            except sqlite3.Error as exc:
                logger.warning("store %s failed: %s", action, exc)
                raise StoreError(f"failed to {action}: {exc}") from exc

    # ------------------------------------------------------------ reads

    def _row_to_item(self, row: sqlite3.Row, labels: tuple[str, ...]) -> Item:
        try:
            template_vars = json.loads(row["template_vars"]) if row["template_vars"] else {}
        except json.JSONDecodeError:
            template_vars = {}
        return Item(
            id=row["id"],
            project=row["project"],
            type=ItemType(row["type"]),
            title=row["title"],
            description=row["description"] or "",
            status=Status(row["status"]),
            priority=int(row["priority"]),
            parent_id=row["parent_id"],
            labels=labels,
            template_id=row["template_id"],
            template_step=row["template_step"],
            template_vars={str(k): str(v) for k, v in template_vars.items()},
            template_hash=row["template_hash"],
            worktree_branch=row["worktree_branch"],
            worktree_base=row["worktree_base"],
            created_at=_parse_time(row["created_at"]),
            updated_at=_parse_time(row["updated_at"]),
        )

    def _items(self, conn: sqlite3.Connection, where: str, args: tuple) -> list[Item]:
        rows = conn.execute(
            f"SELECT {ITEM_COLUMNS} FROM items {where} ORDER BY created_at, id", args
        ).fetchall()
        labels: dict[str, list[str]] = {}
        for label_row in conn.execute("SELECT item_id, name FROM item_labels ORDER BY name"):
            labels.setdefault(label_row["item_id"], []).append(label_row["name"])
        return [self._row_to_item(row, tuple(labels.get(row["id"], ()))) for row in rows]

    def list_items(self, project: str | None = None) -> list[Item]:
        with self._tx("list items") as conn:
            if project:
                return self._items(conn, "WHERE project = ?", (project,))
            return self._items(conn, "", ())

    def get_item(self, item_id: str) -> Item:
        with self._tx("get item") as conn:
            found = self._items(conn, "WHERE id = ?", (item_id,))
        if not found:
            raise StoreError(f"item not found: {item_id}")
        return found[0]

    def get_logs(self, item_id: str) -> list[LogEntry]:
        with self._tx("get logs") as conn:
            rows = conn.execute(
                "SELECT id, item_id, message, created_at FROM logs WHERE item_id = ? ORDER BY id",
                (item_id,),
            ).fetchall()
        return [
            LogEntry(row["id"], row["item_id"], row["message"], _parse_time(row["created_at"]))
            for row in rows
        ]

    def get_depends_on(self, item_id: str) -> list[DepStatus]:
        """Return the items ``item_id`` waits for."""
        with self._tx("get dependencies") as conn:
            rows = conn.execute(
                "SELECT i.id, i.title, i.status FROM deps d JOIN items i ON d.depends_on = i.id "
                "WHERE d.item_id = ? ORDER BY i.id",
                (item_id,),
            ).fetchall()
        return [DepStatus(row["id"], row["title"], row["status"]) for row in rows]

    def get_blocked_by(self, item_id: str) -> list[DepStatus]:
        """Return the items held up by ``item_id``."""
        with self._tx("get blocked items") as conn:
            rows = conn.execute(
                "SELECT i.id, i.title, i.status FROM deps d JOIN items i ON d.item_id = i.id "
                "WHERE d.depends_on = ? ORDER BY i.id",
                (item_id,),
            ).fetchall()
        return [DepStatus(row["id"], row["title"], row["status"]) for row in rows]

    def stale_items(self, project: str | None, cutoff: datetime) -> list[Item]:
        args: tuple = (Status.IN_PROGRESS.value, cutoff.isoformat())
        where = "WHERE status = ? AND updated_at < ?"
        if project:
            where += " AND project = ?"
            args += (project,)
        with self._tx("list stale items") as conn:
            return self._items(conn, where, args)

    def generate_item_id(self, item_type: ItemType) -> str:
        prefix = self._prefixes.get(ItemType(item_type), "it")
        with self._tx("generate id") as conn:
            for _attempt in range(32):
                candidate = f"{prefix}-{secrets.token_hex(self._id_length)[: self._id_length]}"
                if conn.execute("SELECT 1 FROM items WHERE id = ?", (candidate,)).fetchone() is None:
                    return candidate
        raise StoreError(f"could not generate a unique {item_type} id")

    # ------------------------------------------------------------ writes

    def _require(self, conn: sqlite3.Connection, item_id: str) -> sqlite3.Row:
        row = conn.execute("SELECT id, type, project FROM items WHERE id = ?", (item_id,)).fetchone()
        if row is None:
            raise StoreError(f"item not found: {item_id}")
        return row

    def _touch(self, conn: sqlite3.Connection, item_id: str, assignments: str, args: tuple) -> None:
        cursor = conn.execute(
            f"UPDATE items SET {assignments}, updated_at = ? WHERE id = ?",
            args + (_now().isoformat(), item_id),
        )
        if cursor.rowcount == 0:
            raise StoreError(f"item not found: {item_id}")

    def create_item(self, item: Item) -> None:
        now = (item.created_at or _now()).isoformat()
        with self._tx("create item") as conn:
            conn.execute(
                f"INSERT INTO items ({ITEM_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    item.id,
                    item.project,
                    ItemType(item.type).value,
                    item.title,
                    item.description,
                    Status(item.status).value,
                    item.priority,
                    item.parent_id,
                    item.template_id,
                    item.template_step,
                    json.dumps(dict(item.template_vars)) if item.template_vars else None,
                    item.template_hash,
                    item.worktree_branch,
                    item.worktree_base,
                    now,
                    (item.updated_at.isoformat() if item.updated_at else now),
                ),
            )
            for label in item.labels:
                conn.execute(
                    "INSERT OR IGNORE INTO item_labels (item_id, project, name) VALUES (?, ?, ?)",
                    (item.id, item.project, label),
                )

    def update_status(self, item_id: str, status: Status, agent: AgentContext) -> None:
        with self._tx("update status") as conn:
            self._touch(
                conn,
                item_id,
                "status = ?, updated_by = ?",
                (Status(status).value, agent.id or None),
            )

    def update_priority(self, item_id: str, priority: int) -> None:
        with self._tx("update priority") as conn:
            self._touch(conn, item_id, "priority = ?", (int(priority),))

    def set_description(self, item_id: str, text: str) -> None:
        with self._tx("set description") as conn:
            self._touch(conn, item_id, "description = ?", (text,))

    def set_template_variable(self, item_id: str, name: str, value: str) -> None:
        with self._tx("set template variable") as conn:
            row = conn.execute("SELECT template_vars FROM items WHERE id = ?", (item_id,)).fetchone()
            if row is None:
                raise StoreError(f"item not found: {item_id}")
            try:
                current = json.loads(row["template_vars"]) if row["template_vars"] else {}
            except json.JSONDecodeError:
                current = {}
            current[name] = value
            self._touch(conn, item_id, "template_vars = ?", (json.dumps(current),))

    def set_parent(self, item_id: str, parent_id: str) -> None:
        with self._tx("set parent") as conn:
            self._require(conn, item_id)
            parent = self._require(conn, parent_id)
            if parent["type"] != ItemType.EPIC.value:
                raise StoreError(f"parent {parent_id} is not an epic")
            if parent_id == item_id:
                raise StoreError("an item cannot be its own parent")
            self._touch(conn, item_id, "parent_id = ?", (parent_id,))

    def add_dependency(self, blocker_id: str, blocked_id: str) -> None:
        if blocker_id == blocked_id:
            raise StoreError("an item cannot depend on itself")
        with self._tx("add dependency") as conn:
            self._require(conn, blocker_id)
            self._require(conn, blocked_id)
            conn.execute(
                "INSERT OR IGNORE INTO deps (item_id, depends_on) VALUES (?, ?)",
                (blocked_id, blocker_id),
            )

    def add_log(self, item_id: str, text: str) -> None:
        with self._tx("add log") as conn:
            self._require(conn, item_id)
            conn.execute(
                "INSERT INTO logs (item_id, message, created_at) VALUES (?, ?, ?)",
                (item_id, text, _now().isoformat()),
            )

    def add_label(self, item_id: str, project: str, name: str) -> None:
        label = name.strip()
        if not label:
            raise StoreError("label name is required")
        with self._tx("add label") as conn:
            self._require(conn, item_id)
            conn.execute(
                "INSERT OR IGNORE INTO item_labels (item_id, project, name) VALUES (?, ?, ?)",
                (item_id, project, label),
            )

    def delete_item(self, item_id: str) -> None:
        with self._tx("delete item") as conn:
            self._require(conn, item_id)
            conn.execute("UPDATE items SET parent_id = NULL WHERE parent_id = ?", (item_id,))
            conn.execute("DELETE FROM items WHERE id = ?", (item_id,))


__all__ = ["SCHEMA", "SqliteStore"]
