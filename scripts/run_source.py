"""Manual source runner for testing and debugging sources.

This script runs a registered source against the live site and prints
the listing it returns, optionally drilling into the first result.

Usage:
    python scripts/run_source.py --source xinmeitulu
    python scripts/run_source.py --source xinmeitulu --query cosplay --page 2
    python scripts/run_source.py --source xinmeitulu --details --limit 5
"""

import asyncio
import argparse
import os
import sys

# Add repository root to path so the package imports without installation
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from mangasources.core.exceptions import SourceException
from mangasources.core.logging import configure_logging
from mangasources.sources.factory import get_source_factory
from mangasources.sources.register_sources import register_all_sources


async def run_source(key: str, query: str = "", page: int = 1, limit: int = 10, details: bool = False):
    """Run a source listing and display the results.

    Args:
        key: Registered source key (e.g., "xinmeitulu")
        query: Optional search query; empty lists popular series
        page: Listing page number
        limit: Maximum number of series to display
        details: Also fetch details, chapters and pages of the first result
    """
    factory = get_source_factory()
    if not factory.has_source(key):
        print(f"\nError: Unknown source '{key}'")
        print("\nAvailable sources:")
        for name in sorted(factory.get_registered_sources()):
            print(f"   - {name}")
        return

    source = factory.create_source(key)
    print(f"\n{'='*70}")
    print(f"  Running {source.name} (id {source.id})")
    print(f"{'='*70}\n")

    try:
        if query:
            result = await source.fetch_search_series(page, query, source.get_filter_list())
        else:
            result = await source.fetch_popular_series(page)

        if not result.series:
            print("No series found.\n")
            return

        print(f"Found {len(result.series)} series (next page: {result.has_next_page})\n")
        for i, series in enumerate(result.series[:limit], 1):
            print(f"[{i}] {series.title}")
            print(f"    URL: {series.url}")
            if series.thumbnail_url:
                print(f"    Thumbnail: {series.thumbnail_url}")
            if series.genres():
                print(f"    Genres: {', '.join(series.genres())}")
            print()

        if details:
            first = result.series[0]
            info = await source.fetch_series_details(first)
            info.url = info.url or first.url
            print(f"{'='*70}")
            print(f"  {info.title}")
            print(f"{'='*70}")
            if info.author:
                print(f"  Author: {info.author}")
            if info.description:
                print(f"  {info.description}")

            chapters = await source.fetch_chapter_list(info)
            for chapter in chapters:
                pages = await source.fetch_page_list(chapter)
                print(f"\n  {chapter.name}: {len(pages)} pages")
                for p in pages[:limit]:
                    print(f"    [{p.index}] {p.image_url or p.url}")
            print()

    except SourceException as e:
        print(f"\nError while running {source.name}:")
        print(f"   {type(e).__name__}: {e.message}\n")

    finally:
        await source.aclose()


def main():
    """Parse arguments and run the source."""
    parser = argparse.ArgumentParser(
        description="Run a source against its live site",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python scripts/run_source.py --source xinmeitulu
  python scripts/run_source.py --source xinmeitulu --query cosplay
  python scripts/run_source.py --source xinmeitulu --details
        """,
    )

    parser.add_argument("--source", required=True, help="Source key (e.g., 'xinmeitulu')")
    parser.add_argument("--query", default="", help="Search query (default: popular listing)")
    parser.add_argument("--page", type=int, default=1, help="Listing page (default: 1)")
    parser.add_argument(
        "--limit",
        type=int,
        default=10,
        help="Maximum number of entries to display (default: 10)",
    )
    parser.add_argument(
        "--details",
        action="store_true",
        help="Fetch details, chapters and pages of the first result",
    )
    parser.add_argument("--log-level", default=None, help="Log level (default: settings.LOG_LEVEL)")

    args = parser.parse_args()

    configure_logging(args.log_level)
    register_all_sources()
    asyncio.run(run_source(args.source, args.query, args.page, args.limit, args.details))


if __name__ == "__main__":
    main()
