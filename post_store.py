from supabase import create_client, Client
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List
import logging

# --- CONFIGURATION ---
logger = logging.getLogger(__name__)

POSTS_TABLE = "posts"


class StoreError(Exception):
    """Any failure talking to the posts table."""


class StoreReadError(StoreError):
    pass


class StoreWriteError(StoreError):
    pass


def _parse_timestamp(value) -> datetime:
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    # timestamp columns without a zone are stored as UTC
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Post:
    id: str
    title: str
    content: str
    created_at: datetime

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Post':
        """
        Maps one Supabase row onto a Post.
        Raises KeyError / ValueError on a malformed row.
        """
        return cls(
            id=str(row["id"]),
            title=row["title"],
            content=row["content"],
            created_at=_parse_timestamp(row["created_at"]),
        )


@dataclass(frozen=True)
class StoreConfig:
    url: str
    anon_key: str


class PostStore:
    """
    Thin client over the Supabase 'posts' table.
    The client is injected; build one from settings with from_config().
    """

    def __init__(self, client: Client):
        self._client = client

    @classmethod
    def from_config(cls, config: StoreConfig) -> 'PostStore':
        return cls(create_client(config.url, config.anon_key))

    def insert(self, title: str, content: str) -> None:
        """Inserts a post. id and created_at are assigned by the database."""
        try:
            self._client.table(POSTS_TABLE).insert({"title": title, "content": content}).execute()
        except Exception as e:
            logger.error(f"Post Insert Failed: {e}")
            raise StoreWriteError("insert into posts failed") from e

    def list_all(self) -> List[Post]:
        """Returns every post, newest first."""
        try:
            response = (
                self._client.table(POSTS_TABLE)
                .select("*")
                .order("created_at", desc=True)
                .execute()
            )
            return [Post.from_row(row) for row in (response.data or [])]
        except Exception as e:
            logger.error(f"Post List Failed: {e}")
            raise StoreReadError("select from posts failed") from e
