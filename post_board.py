import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from post_store import Post

# --- CONFIGURATION ---
logger = logging.getLogger(__name__)

TITLE_MAX_LENGTH = 100
CONTENT_MAX_LENGTH = 5000
REDIRECT_DELAY = 1.0  # seconds between "posted" and the switch to Read

MSG_FIELDS_REQUIRED = "both fields required"
MSG_TITLE_TOO_LONG = "title too long"
MSG_CONTENT_TOO_LONG = "content too long"
MSG_LOAD_FAILED = "load failed"
MSG_POST_FAILED = "post failed"
MSG_POSTED = "posted"

DRAFT_FIELDS = ("title", "content")


class Section(str, Enum):
    WRITE = "write"
    READ = "read"


class StatusKind(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    SUCCESS = "success"


@dataclass(frozen=True)
class Status:
    kind: StatusKind
    message: Optional[str] = None

    @classmethod
    def idle(cls) -> 'Status':
        return cls(StatusKind.IDLE)

    @classmethod
    def loading(cls) -> 'Status':
        return cls(StatusKind.LOADING)

    @classmethod
    def error(cls, message: str) -> 'Status':
        return cls(StatusKind.ERROR, message)

    @classmethod
    def success(cls, message: str) -> 'Status':
        return cls(StatusKind.SUCCESS, message)

    @property
    def is_loading(self) -> bool:
        return self.kind is StatusKind.LOADING


@dataclass
class Draft:
    title: str = ""
    content: str = ""


@dataclass
class ViewState:
    active_section: Section = Section.WRITE
    draft: Draft = field(default_factory=Draft)
    posts: List[Post] = field(default_factory=list)
    status: Status = field(default_factory=Status.idle)


class ValidationError(Exception):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


def validate_draft(draft: Draft) -> None:
    """
    Client-side checks, first failure wins:
    1. title and content non-blank
    2. title within TITLE_MAX_LENGTH
    3. content within CONTENT_MAX_LENGTH
    Lengths are counted on the values as typed, in Unicode code points
    (an emoji counts once, unlike a browser's UTF-16 .length).
    """
    if not draft.title.strip() or not draft.content.strip():
        raise ValidationError(MSG_FIELDS_REQUIRED)
    if len(draft.title) > TITLE_MAX_LENGTH:
        raise ValidationError(MSG_TITLE_TOO_LONG)
    if len(draft.content) > CONTENT_MAX_LENGTH:
        raise ValidationError(MSG_CONTENT_TOO_LONG)


class PostBoard:
    """
    View controller for the write/read page.

    Owns the ViewState and talks to an injected store exposing
    insert(title, content) and list_all(). Store calls are blocking
    and run in a worker thread so the event loop stays free.

    switch_section() and the post-submit redirect schedule effects as
    tasks on the running loop; settle() waits for all of them.
    """

    def __init__(self, store, redirect_delay: float = REDIRECT_DELAY):
        self._store = store
        self._redirect_delay = redirect_delay
        self._state = ViewState()
        self._load_seq = 0
        self._submitting = False
        self._load_effect: Optional[asyncio.Task] = None
        self._redirect: Optional[asyncio.Task] = None

    @property
    def state(self) -> ViewState:
        return self._state

    @property
    def has_pending_effects(self) -> bool:
        return any(t is not None and not t.done() for t in (self._redirect, self._load_effect))

    # --- SECTION ---

    def switch_section(self, target) -> Optional[asyncio.Task]:
        """
        Must be called from the event loop. Entering Read schedules a
        fresh load and returns its task; leaving Read cancels it.
        """
        target = Section(target)
        self._state.active_section = target
        self._cancel_load_effect()
        if target is Section.READ:
            self._load_effect = asyncio.get_running_loop().create_task(self.load_posts())
            return self._load_effect
        return None

    def _cancel_load_effect(self):
        if self._load_effect is not None and not self._load_effect.done():
            logger.debug("Cancelling pending post load")
            self._load_effect.cancel()
        self._load_effect = None

    # --- DRAFT ---

    def update_draft(self, field_name: str, value: str) -> None:
        if field_name not in DRAFT_FIELDS:
            raise ValueError(f"Unknown draft field: {field_name}")
        setattr(self._state.draft, field_name, value)

    def clear_draft(self) -> None:
        self._state.draft = Draft()
        self._state.status = Status.idle()

    # --- REMOTE CALLS ---

    async def load_posts(self) -> Status:
        self._load_seq += 1
        seq = self._load_seq
        self._state.status = Status.loading()

        try:
            posts = await asyncio.to_thread(self._store.list_all)
            posts = sorted(posts, key=lambda p: p.created_at, reverse=True)
        except asyncio.CancelledError:
            if seq == self._load_seq and self._state.status.is_loading:
                self._state.status = Status.idle()
            raise
        except Exception as e:
            if seq != self._load_seq:
                logger.debug(f"Discarding stale load failure (request {seq}, latest {self._load_seq})")
                return self._state.status
            logger.warning(f"Post Load Failed: {e}")
            self._state.status = Status.error(MSG_LOAD_FAILED)
            return self._state.status

        if seq != self._load_seq:
            logger.debug(f"Discarding stale post list (request {seq}, latest {self._load_seq})")
            return self._state.status

        self._state.posts = posts
        self._state.status = Status.idle()
        logger.info(f"Loaded {len(self._state.posts)} posts")
        return self._state.status

    async def submit_post(self) -> Status:
        if self._submitting:
            logger.debug("Submit already in flight, ignoring")
            return self._state.status

        draft = self._state.draft
        try:
            validate_draft(draft)
        except ValidationError as e:
            logger.info(f"Post rejected: {e.message}")
            self._state.status = Status.error(e.message)
            return self._state.status

        title, content = draft.title, draft.content
        self._submitting = True
        self._state.status = Status.loading()
        try:
            await asyncio.to_thread(self._store.insert, title, content)
        except Exception as e:
            logger.warning(f"Post Submit Failed: {e}")
            self._state.status = Status.error(MSG_POST_FAILED)
            return self._state.status
        finally:
            self._submitting = False

        logger.info("Post submitted")
        self._state.draft = Draft()
        self._state.status = Status.success(MSG_POSTED)
        self._schedule_redirect()
        return self._state.status

    # --- EFFECTS ---

    def _schedule_redirect(self):
        if self._redirect is not None and not self._redirect.done():
            self._redirect.cancel()
        self._redirect = asyncio.get_running_loop().create_task(self._redirect_to_read())

    async def _redirect_to_read(self):
        await asyncio.sleep(self._redirect_delay)
        self._state.status = Status.idle()
        self.switch_section(Section.READ)

    async def settle(self) -> None:
        """Waits until no redirect or load effect is pending."""
        while True:
            pending = [t for t in (self._redirect, self._load_effect) if t is not None and not t.done()]
            if not pending:
                return
            await asyncio.wait(pending)
