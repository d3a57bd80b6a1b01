"""SQLite implementation of the catalog repositories."""

import json
import sqlite3
import threading
from datetime import datetime, timezone

from vidshare.models import User, Video
from vidshare.storage.repository import UserRepository, VideoRepository


def _contains_ci(haystack: str | None, needle: str | None) -> bool:
    """Unicode-aware case-insensitive substring test, registered as a SQL function."""
    if haystack is None or needle is None:
        return False
    return needle.casefold() in haystack.casefold()


def connect(db_path: str) -> sqlite3.Connection:
    """Open a connection shareable across threads.

    Callers must serialize use of the connection; the repositories hold a
    lock around every statement and commit.
    """
    conn = sqlite3.connect(db_path, check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.create_function("contains_ci", 2, _contains_ci, deterministic=True)
    return conn


class _SharedConnection:
    """Statement helpers that serialize access to ``self._conn``."""

    def _write(self, sql: str, params=()) -> sqlite3.Cursor:
        with self._lock:
            cursor = self._conn.execute(sql, params)
            self._conn.commit()
            return cursor

    def _fetchone(self, sql: str, params=()) -> sqlite3.Row | None:
        with self._lock:
            return self._conn.execute(sql, params).fetchone()

    def _fetchall(self, sql: str, params=()) -> list[sqlite3.Row]:
        with self._lock:
            return self._conn.execute(sql, params).fetchall()


class SQLiteVideoRepository(_SharedConnection, VideoRepository):
    """SQLite-backed video storage.

    Implements VideoRepository using stdlib sqlite3. JSON columns for
    likes and tags keep the schema close to the document shape.
    """

    _CREATE_TABLE = """
        CREATE TABLE IF NOT EXISTS videos (
            video_id      TEXT PRIMARY KEY,
            title         TEXT NOT NULL,
            description   TEXT DEFAULT '',
            storage_id    TEXT NOT NULL,
            video_url     TEXT NOT NULL,
            thumbnail_url TEXT NOT NULL,
            duration      REAL DEFAULT 0.0,
            views         INTEGER DEFAULT 0,
            likes         TEXT DEFAULT '[]',
            owner_id      TEXT NOT NULL,
            tags          TEXT DEFAULT '[]',
            is_private    INTEGER DEFAULT 0,
            created_at    TEXT NOT NULL,
            updated_at    TEXT NOT NULL
        )
    """

    _CREATE_INDEXES = (
        "CREATE INDEX IF NOT EXISTS idx_videos_created_at ON videos(created_at)",
        "CREATE INDEX IF NOT EXISTS idx_videos_owner_id ON videos(owner_id)",
    )

    def __init__(self, db_path: str) -> None:
        """Initialize the repository.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for testing.
        """
        self._db_path = db_path
        self._conn = connect(db_path)
        self._lock = threading.RLock()
        self._init_db()

    def _init_db(self) -> None:
        """Create tables if they don't exist."""
        with self._lock:
            self._conn.execute(self._CREATE_TABLE)
            for sql in self._CREATE_INDEXES:
                self._conn.execute(sql)
            self._conn.commit()

    def save(self, video: Video) -> None:
        """Persist a video. Upserts if video_id already exists."""
        sql = """
            INSERT INTO videos (
                video_id, title, description, storage_id, video_url,
                thumbnail_url, duration, views, likes, owner_id, tags,
                is_private, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(video_id) DO UPDATE SET
                title = excluded.title,
                description = excluded.description,
                storage_id = excluded.storage_id,
                video_url = excluded.video_url,
                thumbnail_url = excluded.thumbnail_url,
                duration = excluded.duration,
                views = excluded.views,
                likes = excluded.likes,
                tags = excluded.tags,
                is_private = excluded.is_private,
                updated_at = excluded.updated_at
        """
        # owner_id and created_at are immutable once inserted
        self._write(sql, (
            video.video_id,
            video.title,
            video.description,
            video.storage_id,
            video.video_url,
            video.thumbnail_url,
            video.duration,
            video.views,
            json.dumps(list(dict.fromkeys(video.likes))),
            video.owner_id,
            json.dumps(video.tags),
            int(video.is_private),
            video.created_at.isoformat(),
            video.updated_at.isoformat(),
        ))

    def get(self, video_id: str) -> Video | None:
        """Retrieve a video by ID. Returns None if not found."""
        sql = "SELECT * FROM videos WHERE video_id = ?"
        row = self._fetchone(sql, (video_id,))
        if row is None:
            return None
        return self._row_to_video(row)

    def delete(self, video_id: str) -> None:
        """Remove a video. No-op if video_id does not exist."""
        sql = "DELETE FROM videos WHERE video_id = ?"
        self._write(sql, (video_id,))

    def exists(self, video_id: str) -> bool:
        """Check whether a video with the given ID is stored."""
        sql = "SELECT 1 FROM videos WHERE video_id = ? LIMIT 1"
        return self._fetchone(sql, (video_id,)) is not None

    def query(
        self,
        search: str | None = None,
        page: int = 1,
        limit: int = 12,
        public_only: bool = True,
    ) -> tuple[list[Video], int]:
        """Return one page of videos, newest first, and the total match count."""
        conditions = []
        params: list = []
        if public_only:
            conditions.append("is_private = 0")
        if search:
            conditions.append("""(
                contains_ci(title, ?)
                OR contains_ci(description, ?)
                OR EXISTS (
                    SELECT 1 FROM json_each(videos.tags)
                    WHERE contains_ci(json_each.value, ?)
                )
            )""")
            params.extend([search] * 3)
        where = f" WHERE {' AND '.join(conditions)}" if conditions else ""

        sql = f"SELECT * FROM videos{where} ORDER BY created_at DESC, rowid DESC LIMIT ? OFFSET ?"
        offset = (max(page, 1) - 1) * limit
        with self._lock:
            total = self._fetchone(f"SELECT COUNT(*) FROM videos{where}", params)[0]
            rows = self._fetchall(sql, [*params, limit, offset])
        return [self._row_to_video(row) for row in rows], total

    def list_by_owner(self, owner_id: str) -> list[Video]:
        """All videos owned by a user, newest first."""
        sql = "SELECT * FROM videos WHERE owner_id = ? ORDER BY created_at DESC, rowid DESC"
        rows = self._fetchall(sql, (owner_id,))
        return [self._row_to_video(row) for row in rows]

    def increment_views(self, video_id: str) -> Video | None:
        """Atomically add one view and return the updated video, or None."""
        sql = "UPDATE videos SET views = views + 1, updated_at = ? WHERE video_id = ?"
        now = datetime.now(timezone.utc).isoformat()
        with self._lock:
            cursor = self._write(sql, (now, video_id))
            if cursor.rowcount == 0:
                return None
            return self.get(video_id)

    @staticmethod
    def _row_to_video(row: sqlite3.Row) -> Video:
        """Convert a database row to a Video model."""
        return Video(
            video_id=row["video_id"],
            title=row["title"],
            description=row["description"],
            storage_id=row["storage_id"],
            video_url=row["video_url"],
            thumbnail_url=row["thumbnail_url"],
            duration=row["duration"],
            views=row["views"],
            likes=json.loads(row["likes"]),
            owner_id=row["owner_id"],
            tags=json.loads(row["tags"]),
            is_private=bool(row["is_private"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )


class SQLiteUserRepository(_SharedConnection, UserRepository):
    """SQLite-backed user records (owned-video list and API token)."""

    _CREATE_TABLE = """
        CREATE TABLE IF NOT EXISTS users (
            user_id    TEXT PRIMARY KEY,
            username   TEXT NOT NULL UNIQUE,
            avatar     TEXT DEFAULT '',
            bio        TEXT DEFAULT '',
            videos     TEXT DEFAULT '[]',
            api_token  TEXT NOT NULL UNIQUE
        )
    """

    def __init__(self, db_path: str) -> None:
        """Initialize the repository.

        Args:
            db_path: Path to SQLite database file. Use ":memory:" for testing.
        """
        self._db_path = db_path
        self._conn = connect(db_path)
        self._lock = threading.RLock()
        self._write(self._CREATE_TABLE)

    def save(self, user: User) -> None:
        """Persist a user. Upserts if user_id already exists."""
        sql = """
            INSERT INTO users (user_id, username, avatar, bio, videos, api_token)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT(user_id) DO UPDATE SET
                username = excluded.username,
                avatar = excluded.avatar,
                bio = excluded.bio,
                videos = excluded.videos,
                api_token = excluded.api_token
        """
        self._write(sql, (
            user.user_id,
            user.username,
            user.avatar,
            user.bio,
            json.dumps(user.videos),
            user.api_token,
        ))

    def get(self, user_id: str) -> User | None:
        row = self._fetchone("SELECT * FROM users WHERE user_id = ?", (user_id,))
        return self._row_to_user(row) if row else None

    def get_by_token(self, token: str) -> User | None:
        row = self._fetchone("SELECT * FROM users WHERE api_token = ?", (token,))
        return self._row_to_user(row) if row else None

    def add_video_ref(self, user_id: str, video_id: str) -> None:
        """Append a video to the user's owned list. No-op if already present."""
        sql = """
            UPDATE users SET videos = json_insert(videos, '$[#]', ?)
            WHERE user_id = ?
              AND NOT EXISTS (SELECT 1 FROM json_each(users.videos) WHERE value = ?)
        """
        self._write(sql, (video_id, user_id, video_id))

    def remove_video_ref(self, user_id: str, video_id: str) -> None:
        """Pull a video from the user's owned list. No-op if absent."""
        sql = """
            UPDATE users SET videos = (
                SELECT json_group_array(value) FROM json_each(users.videos)
                WHERE value != ?
            )
            WHERE user_id = ?
        """
        self._write(sql, (video_id, user_id))

    @staticmethod
    def _row_to_user(row: sqlite3.Row) -> User:
        return User(
            user_id=row["user_id"],
            username=row["username"],
            avatar=row["avatar"],
            bio=row["bio"],
            videos=json.loads(row["videos"]),
            api_token=row["api_token"],
        )
