"""SQLite storage adapter.

Implements the key-value, pending-lookup and due-notification ports using a
simple SQLite database.
"""

from __future__ import annotations

import sqlite3
from datetime import datetime, timezone
from typing import List, Optional, Set

from core.models import PendingNotification, ResolvedNotification


def _to_pending(row: sqlite3.Row) -> PendingNotification:
    delivered_at = row["delivered_at"]
    return PendingNotification(
        identifier=row["identifier"],
        title=row["title"],
        body=row["body"],
        fire_date=datetime.fromisoformat(row["fire_date"]),
        delivered_at=datetime.fromisoformat(delivered_at) if delivered_at else None,
    )


class SQLiteStorage:
    """Thin SQLite wrapper that satisfies the storage ports."""

    def __init__(self, db_path: str) -> None:
        self._db_path = db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self._db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def init_db(self) -> None:
        """Create tables if they do not exist.

        Tables:
        - app_state: small key/value store (last applied config version)
        - pending_notifications: one row per scheduled notification
        """

        with self._connect() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS app_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                )
                """
            )
            # Fields:
            # - identifier: minted from config version + entry id (PRIMARY KEY)
            # - fire_date: local wall-clock ISO timestamp
            # - delivered_at: NULL while the notification is still pending
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS pending_notifications (
                    identifier TEXT PRIMARY KEY,
                    title TEXT NOT NULL,
                    body TEXT NOT NULL,
                    fire_date TIMESTAMP NOT NULL,
                    created_at TIMESTAMP NOT NULL,
                    delivered_at TIMESTAMP
                )
                """
            )

    def get(self, key: str) -> Optional[str]:
        with self._connect() as conn:
            row = conn.execute(
                "SELECT value FROM app_state WHERE key = ?",
                (key,),
            ).fetchone()
        return row["value"] if row else None

    def set(self, key: str, value: str) -> None:
        """Upsert a key/value pair."""

        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO app_state (key, value)
                VALUES (?, ?)
                ON CONFLICT(key) DO UPDATE SET value = excluded.value
                """,
                (key, value),
            )

    def add_pending(self, notification: ResolvedNotification) -> None:
        """Insert or replace a pending notification with the same identifier."""

        created_at = datetime.now(timezone.utc)
        with self._connect() as conn:
            conn.execute(
                """
                INSERT INTO pending_notifications (
                    identifier,
                    title,
                    body,
                    fire_date,
                    created_at,
                    delivered_at
                ) VALUES (?, ?, ?, ?, ?, NULL)
                ON CONFLICT(identifier) DO UPDATE SET
                    title = excluded.title,
                    body = excluded.body,
                    fire_date = excluded.fire_date,
                    created_at = excluded.created_at,
                    delivered_at = NULL
                """,
                (
                    notification.identifier,
                    notification.title,
                    notification.body,
                    notification.fire_date.isoformat(),
                    created_at.isoformat(),
                ),
            )

    def list_existing_identifiers(self) -> Set[str]:
        """Return every identifier ever scheduled, delivered or not.

        Delivered rows stay in the set so a later pass never schedules the
        same one-shot notification a second time.
        """

        with self._connect() as conn:
            rows = conn.execute("SELECT identifier FROM pending_notifications").fetchall()
        return {row["identifier"] for row in rows}

    def list_due(self, now: datetime) -> List[PendingNotification]:
        """Return undelivered notifications whose fire date has passed."""

        with self._connect() as conn:
            rows = conn.execute(
                """
                SELECT * FROM pending_notifications
                WHERE delivered_at IS NULL AND fire_date <= ?
                ORDER BY fire_date, identifier
                """,
                (now.isoformat(),),
            ).fetchall()
        return [_to_pending(row) for row in rows]

    def mark_delivered(self, identifier: str, delivered_at: datetime) -> None:
        with self._connect() as conn:
            conn.execute(
                "UPDATE pending_notifications SET delivered_at = ? WHERE identifier = ?",
                (delivered_at.isoformat(), identifier),
            )

    def list_pending(self, include_delivered: bool = False) -> List[PendingNotification]:
        """Return stored notifications ordered by fire date."""

        query = "SELECT * FROM pending_notifications"
        if not include_delivered:
            query += " WHERE delivered_at IS NULL"
        query += " ORDER BY fire_date, identifier"
        with self._connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_to_pending(row) for row in rows]
