#!/usr/bin/env python3
"""
Founder Tag Backfill

Tags legacy articles about the founder with the explicit founder theme
type, so founder coverage no longer depends on matching titles.

Only articles without a theme_type are touched. Keywords come from
FOUNDER_TITLE_KEYWORDS (a JSON list in .env) unless given
on the command line.

Usage:
    # See how many articles would be tagged:
    python scripts/backfill_founder_tags.py --dry-run

    # Tag them and drop cached coverage results:
    python scripts/backfill_founder_tags.py

    # Custom keywords:
    python scripts/backfill_founder_tags.py --keyword "Williams Jullin" --keyword fondateur
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def run_backfill(keywords=None, dry_run: bool = False) -> int:
    """Tag founder articles; returns the number of articles matched."""
    from coverage_engine.cache import CacheEvent
    from coverage_engine.database import CoverageRepository, get_db_context
    from coverage_engine.services import CoverageService
    from coverage_engine.utils.config import get_settings

    settings = get_settings()
    keywords = keywords or settings.FOUNDER_TITLE_KEYWORDS
    logger.info(f"Founder backfill keywords: {keywords}")

    with get_db_context() as db:
        count = CoverageRepository(db).backfill_founder_classification(keywords, dry_run=dry_run)

        if count and not dry_run:
            result = CoverageService(db, settings=settings).handle_content_event(
                CacheEvent.TAXONOMY_CHANGED
            )
            logger.info(f"Dropped {result.keys_invalidated} cached coverage results")

    return count


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Tag founder articles with the founder theme type")
    parser.add_argument("--dry-run", action="store_true", help="Count matches without writing")
    parser.add_argument(
        "--keyword",
        action="append",
        dest="keywords",
        help="Title keyword (repeatable, default: FOUNDER_TITLE_KEYWORDS)",
    )
    args = parser.parse_args(argv)

    load_dotenv()

    count = run_backfill(args.keywords, dry_run=args.dry_run)
    verb = "would be tagged" if args.dry_run else "tagged"
    print(f"{count} articles {verb}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
