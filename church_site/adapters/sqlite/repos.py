"""
SQLite repositories.

One connection per call, closed afterwards. Driver errors surface as
StoreError; timestamps are stored as UTC ISO-8601 strings with
microseconds so that text ordering matches time ordering.
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from church_site.components.notifications.models import (
    DeliveryOutcome,
    NotificationReceipt,
)
from church_site.components.subscribers.models import Subscriber
from church_site.core.ports.db import StoreError
from church_site.domain.entities import (
    AdminRecord,
    Draft,
    Post,
    PostState,
    Published,
    Scheduled,
    User,
)

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def to_db_dt(dt: datetime | None) -> str | None:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC).isoformat(timespec="microseconds")


def parse_dt(s: str | None) -> datetime | None:
    if not s:
        return None
    dt = datetime.fromisoformat(s)
    return dt if dt.tzinfo else dt.replace(tzinfo=UTC)


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class SQLiteRepoBase:
    def __init__(self, db_path: str):
        self.db_path = db_path

    def _get_conn(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    @contextmanager
    def _connect(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._get_conn()
        except sqlite3.Error as e:
            raise StoreError(operation, e) from e
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise StoreError(operation, e) from e
        finally:
            conn.close()


# -----------------------------------------------------------------------------
# Login records
# -----------------------------------------------------------------------------


class SQLiteUserRepo(SQLiteRepoBase):
    def get_by_id(self, user_id: UUID) -> User | None:
        with self._connect("users.get_by_id") as conn:
            row = conn.execute("SELECT * FROM users WHERE id = ?", (str(user_id),)).fetchone()
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> User | None:
        with self._connect("users.get_by_email") as conn:
            row = conn.execute(
                "SELECT * FROM users WHERE lower(email) = lower(?)", (email.strip(),)
            ).fetchone()
        return self._map_row(row) if row else None

    def save(self, user: User) -> User:
        with self._connect("users.save") as conn:
            conn.execute(
                """
                INSERT INTO users (
                    id, email, display_name, password_hash, status, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    display_name=excluded.display_name,
                    password_hash=excluded.password_hash,
                    status=excluded.status,
                    updated_at=excluded.updated_at
                """,
                (
                    str(user.id),
                    user.email.strip().lower(),
                    user.display_name,
                    user.password_hash,
                    user.status,
                    to_db_dt(user.created_at),
                    to_db_dt(user.updated_at),
                ),
            )
        return user

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=UUID(row["id"]),
            email=row["email"],
            display_name=row["display_name"],
            password_hash=row["password_hash"],
            status=row["status"],
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )


# -----------------------------------------------------------------------------
# Admin table
# -----------------------------------------------------------------------------


class SQLiteAdminRepo(SQLiteRepoBase):
    def get_by_id(self, admin_id: UUID) -> AdminRecord | None:
        with self._connect("admin_users.get_by_id") as conn:
            row = conn.execute(
                "SELECT * FROM admin_users WHERE id = ?", (str(admin_id),)
            ).fetchone()
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> AdminRecord | None:
        with self._connect("admin_users.get_by_email") as conn:
            row = conn.execute(
                "SELECT * FROM admin_users WHERE email = ? COLLATE NOCASE",
                (email.strip(),),
            ).fetchone()
        return self._map_row(row) if row else None

    def save(self, record: AdminRecord) -> AdminRecord:
        with self._connect("admin_users.save") as conn:
            conn.execute(
                """
                INSERT INTO admin_users (
                    id, user_id, email, name, role, created_at, last_login
                ) VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    user_id=excluded.user_id,
                    email=excluded.email,
                    name=excluded.name,
                    role=excluded.role,
                    last_login=excluded.last_login
                """,
                (
                    str(record.id),
                    str(record.user_id) if record.user_id else None,
                    record.email.strip().lower(),
                    record.name,
                    record.role,
                    to_db_dt(record.created_at),
                    to_db_dt(record.last_login),
                ),
            )
        return record

    def list_all(self) -> list[AdminRecord]:
        with self._connect("admin_users.list_all") as conn:
            rows = conn.execute("SELECT * FROM admin_users ORDER BY created_at").fetchall()
        return [self._map_row(r) for r in rows]

    def delete(self, admin_id: UUID) -> bool:
        with self._connect("admin_users.delete") as conn:
            cursor = conn.execute("DELETE FROM admin_users WHERE id = ?", (str(admin_id),))
            return cursor.rowcount > 0

    def _map_row(self, row: dict[str, Any]) -> AdminRecord:
        return AdminRecord(
            id=UUID(row["id"]),
            user_id=UUID(row["user_id"]) if row["user_id"] else None,
            email=row["email"],
            name=row["name"],
            role=row["role"],
            created_at=parse_dt(row["created_at"]),
            last_login=parse_dt(row["last_login"]),
        )


# -----------------------------------------------------------------------------
# Posts
# -----------------------------------------------------------------------------


class SQLitePostRepo(SQLiteRepoBase):
    def get_by_id(self, post_id: UUID) -> Post | None:
        with self._connect("posts.get_by_id") as conn:
            row = conn.execute("SELECT * FROM posts WHERE id = ?", (str(post_id),)).fetchone()
        return self._map_row(row) if row else None

    def save(self, post: Post) -> Post:
        with self._connect("posts.save") as conn:
            conn.execute(
                """
                INSERT INTO posts (
                    id, title, content, type, category, status,
                    published_at, scheduled_for, author_email, author_name,
                    cover_image_url, attachment_url, attachment_name,
                    excerpt, created_at, updated_at
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    title=excluded.title,
                    content=excluded.content,
                    type=excluded.type,
                    category=excluded.category,
                    status=excluded.status,
                    published_at=excluded.published_at,
                    scheduled_for=excluded.scheduled_for,
                    author_email=excluded.author_email,
                    author_name=excluded.author_name,
                    cover_image_url=excluded.cover_image_url,
                    attachment_url=excluded.attachment_url,
                    attachment_name=excluded.attachment_name,
                    excerpt=excluded.excerpt,
                    updated_at=excluded.updated_at
                """,
                (
                    str(post.id),
                    post.title,
                    post.content,
                    post.type,
                    post.category,
                    post.status,
                    to_db_dt(post.published_at),
                    to_db_dt(post.scheduled_for),
                    post.author_email,
                    post.author_name,
                    post.cover_image_url,
                    post.attachment_url,
                    post.attachment_name,
                    post.excerpt,
                    to_db_dt(post.created_at),
                    to_db_dt(post.updated_at),
                ),
            )
        return post

    def delete(self, post_id: UUID) -> bool:
        with self._connect("posts.delete") as conn:
            cursor = conn.execute("DELETE FROM posts WHERE id = ?", (str(post_id),))
            return cursor.rowcount > 0

    def list_published(
        self,
        post_type: str | None = None,
        category: str | None = None,
        limit: int = 10,
    ) -> list[Post]:
        query = "SELECT * FROM posts WHERE status = 'published'"
        params: list[Any] = []
        if post_type:
            query += " AND type = ?"
            params.append(post_type)
        if category:
            query += " AND category = ?"
            params.append(category)
        query += " ORDER BY published_at DESC LIMIT ?"
        params.append(limit)

        with self._connect("posts.list_published") as conn:
            rows = conn.execute(query, params).fetchall()
        return [self._map_row(r) for r in rows]

    def list_all(self, include_drafts: bool = True) -> list[Post]:
        query = "SELECT * FROM posts"
        if not include_drafts:
            query += " WHERE status != 'draft'"
        query += " ORDER BY created_at DESC"

        with self._connect("posts.list_all") as conn:
            rows = conn.execute(query).fetchall()
        return [self._map_row(r) for r in rows]

    def list_scheduled_due(self, now: datetime) -> list[Post]:
        with self._connect("posts.list_scheduled_due") as conn:
            rows = conn.execute(
                """
                SELECT * FROM posts
                WHERE status = 'scheduled' AND scheduled_for <= ?
                ORDER BY scheduled_for ASC
                """,
                (to_db_dt(now),),
            ).fetchall()
        return [self._map_row(r) for r in rows]

    def search_published(self, query: str, limit: int = 20) -> list[Post]:
        pattern = f"%{_escape_like(query)}%"
        with self._connect("posts.search_published") as conn:
            rows = conn.execute(
                """
                SELECT * FROM posts
                WHERE status = 'published'
                  AND (title LIKE ? ESCAPE '\\' OR content LIKE ? ESCAPE '\\')
                ORDER BY published_at DESC
                LIMIT ?
                """,
                (pattern, pattern, limit),
            ).fetchall()
        return [self._map_row(r) for r in rows]

    def _map_state(self, row: dict[str, Any]) -> PostState:
        if row["status"] == "published":
            return Published(published_at=parse_dt(row["published_at"]))
        if row["status"] == "scheduled":
            return Scheduled(scheduled_for=parse_dt(row["scheduled_for"]))
        return Draft()

    def _map_row(self, row: dict[str, Any]) -> Post:
        return Post(
            id=UUID(row["id"]),
            title=row["title"],
            content=row["content"],
            type=row["type"],
            category=row["category"],
            state=self._map_state(row),
            author_email=row["author_email"],
            author_name=row["author_name"],
            cover_image_url=row["cover_image_url"],
            attachment_url=row["attachment_url"],
            attachment_name=row["attachment_name"],
            excerpt=row["excerpt"],
            created_at=parse_dt(row["created_at"]),
            updated_at=parse_dt(row["updated_at"]),
        )


# -----------------------------------------------------------------------------
# Subscribers
# -----------------------------------------------------------------------------


class SQLiteSubscriberRepo(SQLiteRepoBase):
    def get_by_id(self, subscriber_id: UUID) -> Subscriber | None:
        with self._connect("email_subscribers.get_by_id") as conn:
            row = conn.execute(
                "SELECT * FROM email_subscribers WHERE id = ?", (str(subscriber_id),)
            ).fetchone()
        return self._map_row(row) if row else None

    def get_by_email(self, email: str) -> Subscriber | None:
        with self._connect("email_subscribers.get_by_email") as conn:
            row = conn.execute(
                "SELECT * FROM email_subscribers WHERE email = ?", (email.strip().lower(),)
            ).fetchone()
        return self._map_row(row) if row else None

    def save(self, subscriber: Subscriber) -> Subscriber:
        with self._connect("email_subscribers.save") as conn:
            conn.execute(
                """
                INSERT INTO email_subscribers (
                    id, email, name, is_active, subscribed_at, unsubscribed_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    email=excluded.email,
                    name=excluded.name,
                    is_active=excluded.is_active,
                    subscribed_at=excluded.subscribed_at,
                    unsubscribed_at=excluded.unsubscribed_at
                """,
                (
                    str(subscriber.id),
                    subscriber.email.strip().lower(),
                    subscriber.name,
                    int(subscriber.is_active),
                    to_db_dt(subscriber.subscribed_at),
                    to_db_dt(subscriber.unsubscribed_at),
                ),
            )
        return subscriber

    def add(self, subscriber: Subscriber) -> bool:
        """Insert a new row. False if the email is already taken."""
        with self._connect("email_subscribers.add") as conn:
            cursor = conn.execute(
                """
                INSERT INTO email_subscribers (
                    id, email, name, is_active, subscribed_at, unsubscribed_at
                ) VALUES (?, ?, ?, ?, ?, ?)
                ON CONFLICT(email) DO NOTHING
                """,
                (
                    str(subscriber.id),
                    subscriber.email.strip().lower(),
                    subscriber.name,
                    int(subscriber.is_active),
                    to_db_dt(subscriber.subscribed_at),
                    to_db_dt(subscriber.unsubscribed_at),
                ),
            )
            return cursor.rowcount > 0

    def delete(self, subscriber_id: UUID) -> bool:
        with self._connect("email_subscribers.delete") as conn:
            cursor = conn.execute(
                "DELETE FROM email_subscribers WHERE id = ?", (str(subscriber_id),)
            )
            return cursor.rowcount > 0

    def list_active(self) -> list[Subscriber]:
        with self._connect("email_subscribers.list_active") as conn:
            rows = conn.execute(
                "SELECT * FROM email_subscribers WHERE is_active = 1 ORDER BY subscribed_at"
            ).fetchall()
        return [self._map_row(r) for r in rows]

    def list_filtered(
        self,
        is_active: bool | None = None,
        search: str | None = None,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[list[Subscriber], int]:
        where: list[str] = []
        params: list[Any] = []
        if is_active is not None:
            where.append("is_active = ?")
            params.append(int(is_active))
        if search:
            pattern = f"%{_escape_like(search)}%"
            where.append("(email LIKE ? ESCAPE '\\' OR name LIKE ? ESCAPE '\\')")
            params.extend([pattern, pattern])
        clause = f" WHERE {' AND '.join(where)}" if where else ""

        with self._connect("email_subscribers.list_filtered") as conn:
            total = conn.execute(
                f"SELECT count(*) AS n FROM email_subscribers{clause}", params
            ).fetchone()["n"]
            rows = conn.execute(
                f"SELECT * FROM email_subscribers{clause} "
                "ORDER BY subscribed_at DESC LIMIT ? OFFSET ?",
                [*params, limit, offset],
            ).fetchall()
        return [self._map_row(r) for r in rows], int(total)

    def count(self, is_active: bool | None = None, since: datetime | None = None) -> int:
        where: list[str] = []
        params: list[Any] = []
        if is_active is not None:
            where.append("is_active = ?")
            params.append(int(is_active))
        if since is not None:
            where.append("subscribed_at >= ?")
            params.append(to_db_dt(since))
        clause = f" WHERE {' AND '.join(where)}" if where else ""

        with self._connect("email_subscribers.count") as conn:
            row = conn.execute(f"SELECT count(*) AS n FROM email_subscribers{clause}", params)
            return int(row.fetchone()["n"])

    def _map_row(self, row: dict[str, Any]) -> Subscriber:
        return Subscriber(
            id=UUID(row["id"]),
            email=row["email"],
            name=row["name"],
            is_active=bool(row["is_active"]),
            subscribed_at=parse_dt(row["subscribed_at"]),
            unsubscribed_at=parse_dt(row["unsubscribed_at"]),
        )


# -----------------------------------------------------------------------------
# Notification receipts
# -----------------------------------------------------------------------------


class SQLiteReceiptRepo(SQLiteRepoBase):
    """Append-only: receipts are inserted, never updated."""

    def save(self, receipt: NotificationReceipt) -> NotificationReceipt:
        deliveries = [
            {
                "recipient": d.recipient,
                "status": d.status,
                "message_id": d.message_id,
                "error": d.error,
            }
            for d in receipt.deliveries
        ]
        with self._connect("newsletter_receipts.save") as conn:
            conn.execute(
                """
                INSERT INTO newsletter_receipts (
                    id, title, content, type, published_at, sent_at,
                    recipient_count, recipients_json, delivered_count,
                    failed_count, deliveries_json
                ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(receipt.id),
                    receipt.title,
                    receipt.content,
                    receipt.type,
                    to_db_dt(receipt.published_at),
                    to_db_dt(receipt.sent_at),
                    receipt.recipient_count,
                    json.dumps(receipt.recipients),
                    receipt.delivered_count,
                    receipt.failed_count,
                    json.dumps(deliveries),
                ),
            )
        return receipt

    def list_recent(self, limit: int = 50) -> list[NotificationReceipt]:
        with self._connect("newsletter_receipts.list_recent") as conn:
            rows = conn.execute(
                "SELECT * FROM newsletter_receipts ORDER BY sent_at DESC LIMIT ?", (limit,)
            ).fetchall()
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> NotificationReceipt:
        return NotificationReceipt(
            id=UUID(row["id"]),
            title=row["title"],
            content=row["content"],
            type=row["type"],
            published_at=parse_dt(row["published_at"]),
            sent_at=parse_dt(row["sent_at"]),
            recipient_count=row["recipient_count"],
            recipients=json.loads(row["recipients_json"]),
            delivered_count=row["delivered_count"],
            failed_count=row["failed_count"],
            deliveries=[DeliveryOutcome(**d) for d in json.loads(row["deliveries_json"])],
        )
