"""
Guidance bundle check script.

Prints the guidance metadata and verifies that every document referenced
by the topic registry exists under the guidance directory.

Usage:
    python api/scripts/check_guidance.py --guidance-dir ./public
"""

import argparse
import logging
import sys

from wa_guidance.services.guidance_loader import (
    find_missing_documents,
    get_guidance_metadata,
    resolve_reference,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Check the WA guidance document bundle.")
    parser.add_argument(
        "--guidance-dir",
        required=True,
        help="Root directory holding the wa-guidance/ tree",
    )
    args = parser.parse_args()

    metadata = get_guidance_metadata(args.guidance_dir)
    logger.info(
        "Guidance version: %s (last checked: %s)",
        metadata.version,
        metadata.last_checked,
    )

    missing = find_missing_documents(args.guidance_dir)
    for entry in missing:
        logger.error(
            "Missing: %s -> %s",
            entry.label,
            resolve_reference(entry, args.guidance_dir),
        )

    if missing:
        logger.error("%d guidance document(s) missing.", len(missing))
        return 1
    logger.info("All guidance documents present.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
