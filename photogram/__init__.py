from __future__ import annotations

from .conditions import Condition, condition_for_code
from .config import config_sha256, load_config, resolve_runtime_secrets
from .config_schema import AppConfig
from .errors import ConfigError, EntryError, FetchError, SessionError
from .feed import FeedSession, FeedState, FeedStatus
from .post import Comment, ContentType, Post
from .session import SessionIdentity, SessionScope, register
from .sheets_client import SheetsFetcher

__all__ = [
    "AppConfig",
    "Comment",
    "Condition",
    "ConfigError",
    "ContentType",
    "EntryError",
    "FeedSession",
    "FeedState",
    "FeedStatus",
    "FetchError",
    "Post",
    "SessionError",
    "SessionIdentity",
    "SessionScope",
    "SheetsFetcher",
    "condition_for_code",
    "config_sha256",
    "load_config",
    "register",
    "resolve_runtime_secrets",
]
