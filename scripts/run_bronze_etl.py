#!/usr/bin/env python
"""
Run Bronze Layer ETL

This script loads all six CRM and ERP source extracts into the Bronze layer.

Usage:
    python scripts/run_bronze_etl.py [--date YYYY-MM-DD] [--warehouse-root URI] [--bucket-name BUCKET_NAME] [--source-root PATH]
"""

import logging
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from etl.bronze.sources_etl import main as bronze_main
from etl.common.etl_utils import build_argument_parser, resolve_warehouse_root
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format=LOG_FORMAT
)
logger = logging.getLogger(__name__)


if __name__ == "__main__":
    parser = build_argument_parser("Run Bronze Layer ETL")
    parser.add_argument(
        "--source-root",
        type=str,
        default=None,
        help="Local directory with source_crm/ and source_erp/ (default: raw zone)"
    )
    args = parser.parse_args()
    logger.info(f"Running Bronze layer ETL for date: {args.date}")
    exit_code = bronze_main(
        args.date,
        resolve_warehouse_root(args.warehouse_root, args.bucket_name),
        args.source_root
    )
    logger.info(f"Bronze layer ETL completed with exit code: {exit_code}")
    sys.exit(exit_code)
