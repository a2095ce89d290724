from __future__ import annotations

import argparse
import json
from dataclasses import asdict

from backend.app.config import load_settings
from backend.app.dependencies import build_search_service
from backend.app.services.record_extractor import VideoResult


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Run a one-off video search against the live results page.",
    )
    parser.add_argument("query", help="Free-text search terms.")
    parser.add_argument(
        "--max",
        type=float,
        default=None,
        help="Requested result count, clamped to the configured bounds.",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print results as a JSON array instead of a table.",
    )
    return parser.parse_args(argv)


def _print_table(videos: list[VideoResult]) -> None:
    if not videos:
        print("No videos found.")
        return

    print("id\tduration\tviews\tpublished\tchannel\ttitle")
    for video in videos:
        print(
            "\t".join(
                [
                    video.id,
                    video.duration,
                    video.views,
                    video.published_at,
                    video.channel_title or "-",
                    video.title,
                ]
            )
        )


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    query = args.query.strip()
    if not query:
        print("A non-empty query is required.")
        return 2

    settings = load_settings()
    service = build_search_service(settings)
    videos = service.search(query, settings.clamp_result_count(args.max))

    if args.json:
        print(json.dumps([asdict(video) for video in videos], ensure_ascii=False, indent=2))
    else:
        _print_table(videos)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
