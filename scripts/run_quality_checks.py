#!/usr/bin/env python
"""
Run Data Quality Checks

This script runs the silver detection queries and the gold release-gate
checks. It exits with a non-zero code when the release gate fails.

Usage:
    python scripts/run_quality_checks.py [--date YYYY-MM-DD] [--warehouse-root URI] [--bucket-name BUCKET_NAME]
"""

import logging
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from etl.common.etl_utils import build_argument_parser, resolve_warehouse_root
from etl.quality.runner import main as quality_main
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format=LOG_FORMAT
)
logger = logging.getLogger(__name__)


if __name__ == "__main__":
    args = build_argument_parser("Run Data Quality Checks").parse_args()
    logger.info(f"Running data quality checks for date: {args.date}")
    exit_code = quality_main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    logger.info(f"Data quality checks completed with exit code: {exit_code}")
    sys.exit(exit_code)
