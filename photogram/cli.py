from __future__ import annotations

import argparse
import asyncio
import json
import random
import sys
from pathlib import Path
from typing import Any, Sequence

from .conditions import condition_for_code, tables_for
from .config import config_sha256, load_config, resolve_runtime_secrets
from .errors import ConfigError, EntryError, FetchError
from .feed import FeedSession, FeedStatus
from .media import MediaUrls
from .post import Comment, Post
from .run_log import RunLogger
from .session import SessionScope
from .sheets_client import SheetsFetcher
from .timestamps import format_relative


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="photogram")

    subparsers = parser.add_subparsers(dest="command", required=True)

    feed = subparsers.add_parser(
        "feed",
        help="Register a participant, load their condition's feed and print it as JSON.",
    )
    feed.add_argument("--config", required=True, help="Path to YAML config file.")
    feed.add_argument("--username", required=True, help="Participant username.")
    feed.add_argument("--code", required=True, help="Entry code selecting the condition.")
    feed.add_argument("--out", required=True, help="Output directory for the session log.")
    feed.add_argument("--search", default=None, help="Only print posts matching this keyword.")
    feed.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Shuffle seed; overrides feed.shuffle_seed from the config.",
    )
    feed.add_argument(
        "--offline",
        action="store_true",
        help="Serve canned tables instead of calling the spreadsheet.",
    )
    feed.set_defaults(_handler=_cmd_feed)

    check = subparsers.add_parser("check-code", help="Show which condition an entry code selects.")
    check.add_argument("code")
    check.set_defaults(_handler=_cmd_check_code)

    return parser


def _eprint(message: str) -> None:
    print(message, file=sys.stderr)


def _comment_payload(comment: Comment) -> dict[str, Any]:
    return {
        "id": comment.id,
        "username": comment.username,
        "text": comment.text,
        "timestamp": comment.timestamp,
        "age": format_relative(comment.timestamp),
    }


def _post_payload(post: Post) -> dict[str, Any]:
    return {
        "id": post.id,
        "username": post.username,
        "user_avatar": post.user_avatar,
        "content_type": post.content_type.value,
        "content_url": post.content_url,
        "thumbnail_url": post.thumbnail_url,
        "caption": post.caption,
        "likes": post.likes,
        "location": post.location,
        "timestamp": post.timestamp,
        "age": format_relative(post.timestamp),
        "comments": [_comment_payload(c) for c in post.comments],
    }


def _cmd_check_code(args: argparse.Namespace) -> int:
    condition = condition_for_code(args.code)
    tables = tables_for(condition)
    print(f"condition={condition.value}")
    print(f"posts_table={tables.posts}")
    print(f"comments_table={tables.comments}")
    return 0


def _cmd_feed(args: argparse.Namespace) -> int:
    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    log_path = out_dir / "session.log"
    with RunLogger.open(log_path) as log:
        log.info(
            "feed_command_started",
            config_path=str(args.config),
            out_dir=str(out_dir),
            offline=bool(args.offline),
        )

        try:
            cfg = load_config(args.config)

            transport = None
            if args.offline:
                from .offline import OFFLINE_SHEET_ID, OfflineSheetTransport

                sheet_id = OFFLINE_SHEET_ID
                transport = OfflineSheetTransport()
            else:
                sheet_id = resolve_runtime_secrets(cfg).sheet_id

            log.info(
                "config_loaded",
                config_sha256=config_sha256(cfg),
                sheet_id_env=cfg.sheet.sheet_id_env,
            )

            with SessionScope() as scope:
                identity = scope.begin(args.username, args.code)
                log.bind_condition(identity.condition.value)
                log.info("session_started", username=identity.username)

                fetcher = SheetsFetcher(
                    sheet_id,
                    url_template=cfg.sheet.url_template,
                    timeout_seconds=cfg.sheet.timeout_seconds,
                    media=MediaUrls.from_config(cfg.media),
                    transport=transport,
                    logger=log,
                )
                seed = args.seed if args.seed is not None else cfg.feed.shuffle_seed
                feed = FeedSession(
                    scope,
                    fetcher,
                    rng=random.Random(seed),
                    shuffle=cfg.feed.shuffle,
                    logger=log,
                )

                state = asyncio.run(feed.load())
                if state.status is not FeedStatus.READY:
                    _eprint(state.error or "Feed did not load")
                    return 3

                posts = feed.search(args.search) if args.search else feed.posts
                payload = {
                    "username": identity.username,
                    "condition": identity.condition.value,
                    "posts": [_post_payload(p) for p in posts],
                }
                print(json.dumps(payload, indent=2, ensure_ascii=False))

                feed.end()

            print(f"session_log={log_path}", file=sys.stderr)
            return 0
        except Exception as e:
            log.exception("feed_command_failed", exc=e)
            raise


def main(argv: Sequence[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)

    try:
        handler = getattr(args, "_handler")
        return int(handler(args))
    except ConfigError as e:
        _eprint(str(e))
        return 2
    except FetchError as e:
        _eprint(str(e))
        return 3
    except EntryError as e:
        _eprint(str(e))
        return 4
    except KeyboardInterrupt:
        _eprint("Interrupted")
        return 130
    except Exception as e:
        _eprint(f"Unexpected error: {e}")
        return 1
