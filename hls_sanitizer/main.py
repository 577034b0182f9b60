from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys

from dotenv import load_dotenv
from pydantic import ValidationError

from .models import LoadResult, SanitizerSettings
from .models.settings_models import DEFAULT_USER_AGENT
from .playlist import PlaylistPublisher, PlaylistSanitizer
from .playlist.sanitizer import DEFAULT_MAX_DEPTH
from .server import run_server
from .utils.http_client import PlaylistFetcher

load_dotenv()

ENV_PREFIX = "HLS_SANITIZER_"


def _env_str(name: str) -> str | None:
    value = os.getenv(ENV_PREFIX + name)
    if value is None or value == "":
        return None
    return value


def _env_int(name: str) -> int | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def _env_float(name: str) -> float | None:
    value = _env_str(name)
    if value is None:
        return None
    try:
        return float(value)
    except ValueError:
        return None


def _env_bool(name: str) -> bool:
    value = _env_str(name)
    if value is None:
        return False
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _or_default(value, default):
    return default if value is None else value


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Strip spliced-in ads from an HLS playlist.")
    parser.add_argument("url", nargs="?", help="Playlist URL (master or media) to sanitize")
    parser.add_argument("--output", "-o", default=_env_str("OUTPUT"), help="Write the sanitized playlist here instead of stdout")
    parser.add_argument("--serve", action="store_true", default=_env_bool("SERVE"), help="Run the HTTP service instead of a one-shot sanitize")
    parser.add_argument("--host", default=_env_str("HOST") or "127.0.0.1", help="Address for --serve")
    parser.add_argument("--port", type=int, default=_or_default(_env_int("PORT"), 8765), help="Port for --serve")
    parser.add_argument(
        "--timeout",
        type=float,
        default=_or_default(_env_float("TIMEOUT"), 10.0),
        help="Total timeout in seconds for each playlist request",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=_or_default(_env_int("MAX_DEPTH"), DEFAULT_MAX_DEPTH),
        help="How many master playlists may be followed before giving up",
    )
    parser.add_argument("--user-agent", default=_env_str("USER_AGENT") or DEFAULT_USER_AGENT, help="User-Agent sent to origins")
    parser.add_argument("--verbose", "-v", action="store_true", default=_env_bool("VERBOSE"), help="Enable debug logging")
    return parser.parse_args(argv)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        stream=sys.stderr,
    )


def build_settings(args: argparse.Namespace) -> SanitizerSettings:
    return SanitizerSettings(
        timeout=args.timeout,
        max_depth=args.max_depth,
        user_agent=args.user_agent,
        host=args.host,
        port=args.port,
    )


async def sanitize_once(settings: SanitizerSettings, url: str) -> tuple[LoadResult, str | None]:
    """Load ``url`` once and return the result with the sanitized text, if any."""

    async with PlaylistFetcher(timeout=settings.timeout, user_agent=settings.user_agent) as fetcher:
        sanitizer = PlaylistSanitizer(
            fetcher,
            publisher=PlaylistPublisher(base_url=settings.public_base_url),
            max_depth=settings.max_depth,
        )
        result = await sanitizer.load(url)
        text = None
        if result.ok and result.handle is not None and result.handle.owned:
            text = sanitizer.publisher.open(result.handle).text
        sanitizer.release()
    return result, text


def write_output(path: str | None, text: str) -> None:
    if not path:
        sys.stdout.write(text)
        sys.stdout.flush()
        return
    os.makedirs(os.path.dirname(os.path.abspath(path)) or ".", exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as handle:
        handle.write(text)
    logging.info("Saved sanitized playlist to %s", path)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(args.verbose)

    try:
        settings = build_settings(args)
    except ValidationError as exc:
        logging.error("Invalid configuration: %s", exc)
        return 2

    if args.serve:
        run_server(settings)
        return 0

    if not args.url:
        logging.error("A playlist URL is required unless --serve is given.")
        return 2

    result, text = asyncio.run(sanitize_once(settings, args.url))
    if not result.ok:
        error = result.error
        logging.error("Sanitizing %s failed: %s", args.url, error.message if error else result.status.value)
        return 1
    if text is None:
        logging.error("%s is not an HLS playlist URL; nothing to sanitize.", args.url)
        return 2

    write_output(args.output, text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
