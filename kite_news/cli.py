"""
Command-line interface for the Kite news cache.

Usage:
    kite-news sync [--yes]
    kite-news status
    kite-news categories
    kite-news follow tech.json world.json
    kite-news follow --all
    kite-news clear
"""

import argparse
import logging
import signal
import sys
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from pydantic import ValidationError

from kite_news.config import load_config
from kite_news.Caching.news_cache import NewsCache
from kite_news.Caching.followed_filter import filter_categories
from kite_news.Caching.sync_orchestrator import SyncOrchestrator
from kite_news.database.kite_client import KiteClient
from kite_news.models.news_models import CategoryIndex
from kite_news.models.sync_models import SyncOutcome, SyncProgress

logger = logging.getLogger(__name__)


def _format_timestamp(timestamp: Optional[int]) -> str:
    if timestamp is None:
        return "never"
    return datetime.fromtimestamp(timestamp).strftime("%Y-%m-%d %H:%M")


def _format_next_update(seconds: Optional[float]) -> str:
    if seconds is None:
        return ""
    if seconds <= 0:
        return " (Update available)"
    hours, remainder = divmod(int(seconds), 3600)
    return f" (Next in {hours}h {remainder // 60}m)"


def _confirm(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N] ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


class _InterruptFlag:
    """Turns Ctrl-C into a cancel decision at the next progress report."""

    def __init__(self):
        self.requested = False

    def __call__(self, signum, frame):
        if self.requested:
            raise KeyboardInterrupt
        print("\nCancelling after the current download...")
        self.requested = True


def cmd_sync(cache: NewsCache, client: KiteClient, args: argparse.Namespace) -> int:
    orchestrator = SyncOrchestrator(cache, client)
    interrupt = _InterruptFlag()

    def on_progress(progress: SyncProgress) -> bool:
        print(progress.message)
        return not interrupt.requested

    def on_confirm() -> bool:
        return args.yes or _confirm("Are you sure you want to download the latest news?")

    previous_handler = signal.signal(signal.SIGINT, interrupt)
    try:
        report = orchestrator.run_sync(progress_callback=on_progress, confirm_callback=on_confirm)
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if report.outcome == SyncOutcome.FAILED:
        print(f"Could not fetch categories:\n{report.error or 'Unknown error'}")
        return 1
    if report.outcome == SyncOutcome.FIRST_RUN:
        print("Category list updated. You can now select categories with 'kite-news follow'.")
    elif report.outcome == SyncOutcome.DECLINED:
        print("Sync not started.")
    elif report.outcome == SyncOutcome.CANCELLED:
        print("Sync cancelled.")
    elif report.total == 0:
        print("No categories selected. Choose some with 'kite-news follow'.")
    else:
        print(f"Sync complete.\n{report.succeeded}/{report.total} downloaded, "
              f"{report.images_downloaded} images.")
    return 0


def cmd_status(cache: NewsCache, args: argparse.Namespace) -> int:
    last_sync = cache.last_sync_timestamp()
    print(f"Updated: {_format_timestamp(last_sync)}{_format_next_update(cache.next_update_in())}")

    followed = cache.get_followed_categories()
    print(f"Followed categories: {', '.join(followed) if followed else 'all'}")

    stats = cache.get_cache_statistics()
    print(f"Cache directory: {stats['cache_dir']}")
    for namespace, values in stats["namespaces"].items():
        print(f"  {namespace}: {values['entries']} entries, {values['size_bytes']} bytes")
    return 0


def cmd_categories(cache: NewsCache, args: argparse.Namespace) -> int:
    data = cache.load_index()
    if not data:
        print("Sync news first to load categories.")
        return 0

    try:
        index = CategoryIndex.model_validate(data)
    except ValidationError:
        print("Cached category list is unreadable. Sync news again.")
        return 1
    categories = filter_categories(index.categories, cache.get_followed_categories())
    if not categories:
        print("No followed categories.")
        return 0

    for category in categories:
        count = cache.cached_article_count(category.file)
        suffix = f" ({count})" if count is not None else ""
        print(f"{category.file:30} {category.display_name}{suffix}")
    return 0


def cmd_follow(cache: NewsCache, args: argparse.Namespace) -> int:
    if not cache.has_index():
        print("Sync news first to load categories.")
        return 1

    selected: Optional[List[str]] = None if args.all else args.categories
    known = set(cache.known_category_files())
    for category_file in selected or []:
        if category_file not in known:
            logger.warning(f"Unknown category {category_file}, it will be skipped during sync")

    stored = cache.save_followed_categories(selected)
    print(f"Following: {', '.join(stored) if stored else 'all categories'}")
    return 0


def cmd_clear(cache: NewsCache, args: argparse.Namespace) -> int:
    errors = cache.clear_cache()
    if errors:
        print(f"Cache cleared with {len(errors)} error(s):")
        for path, message in errors:
            print(f"  {path}: {message}")
        return 1
    print("Cache cleared.")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Offline cache for the Kagi Kite news feed')
    parser.add_argument('--env-file', type=str, default=None, help='Path to a .env file')
    parser.add_argument('--data-dir', type=str, default=None, help='Override the cache directory')
    subparsers = parser.add_subparsers(dest='command', required=True)

    sync_parser = subparsers.add_parser('sync', help='Download the latest news')
    sync_parser.add_argument('--yes', action='store_true', help='Do not ask for confirmation')

    subparsers.add_parser('status', help='Show last sync and cache usage')
    subparsers.add_parser('categories', help='List followed categories')

    follow_parser = subparsers.add_parser('follow', help='Choose the categories to sync')
    follow_parser.add_argument('categories', nargs='*', help='Category identifiers, e.g. tech.json')
    follow_parser.add_argument('--all', action='store_true', help='Follow every category')

    subparsers.add_parser('clear', help='Delete cached news (keeps settings)')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command-line interface."""
    args = build_parser().parse_args(argv)
    config = load_config(args.env_file)
    if args.data_dir:
        config = replace(config, data_dir=args.data_dir)

    # Configure logging
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    cache = NewsCache(config.data_dir)
    if args.command == 'sync':
        return cmd_sync(cache, KiteClient.from_config(config), args)

    handlers = {
        'status': cmd_status,
        'categories': cmd_categories,
        'follow': cmd_follow,
        'clear': cmd_clear,
    }
    return handlers[args.command](cache, args)


if __name__ == "__main__":
    sys.exit(main())
