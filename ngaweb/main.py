"""Main entry point with CLI."""
import argparse
import asyncio
import logging
import sys

from ngaweb.config import Config, config
from ngaweb.errors import FetchError
from ngaweb.logging_conf import setup_logging
from ngaweb.parse.models import ThreadPage
from ngaweb.repository import ThreadRepository

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Fetch and parse one NGA thread page")
    parser.add_argument(
        "--tid",
        type=str,
        required=True,
        help="Thread id (read.php?tid=...)",
    )
    parser.add_argument(
        "--page",
        type=int,
        default=1,
        help="Page number (default: 1)",
    )
    parser.add_argument(
        "--referer",
        type=str,
        default=None,
        help="Optional Referer, e.g. the forum listing the thread",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the parsed page as JSON",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        help=f"Log level (default: {config.LOG_LEVEL})",
    )
    return parser.parse_args(argv)


def format_page(page: ThreadPage) -> str:
    """Human-readable one-line-per-post summary."""
    lines = [f"tid={page.tid} page={page.page} posts={len(page.posts)} has_next={page.has_next}"]
    for post in page.posts:
        floor = f"#{post.floor}" if post.floor is not None else "#?"
        lines.append(
            f"  {floor:>6} pid={post.pid or '-'} {post.author} "
            f"[{post.time_text or '-'}] {len(post.html)} chars"
        )
    return "\n".join(lines)


async def run(args: argparse.Namespace) -> ThreadPage:
    async with ThreadRepository() as repository:
        page = await repository.load_thread_page(args.tid, args.page, referer=args.referer)
        repository.stats.report()
        return page


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    setup_logging(args.log_level)

    try:
        Config.validate()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    try:
        page = asyncio.run(run(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except FetchError as e:
        logger.error(f"Failed to load tid={args.tid} page={args.page}: {type(e).__name__}: {e}")
        sys.exit(1)

    if args.json:
        print(page.model_dump_json(indent=2))
    else:
        print(format_page(page))


if __name__ == "__main__":
    main()
