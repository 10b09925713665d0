#!/usr/bin/env python
"""
Run All Silver Layer ETL Processes

This script rebuilds all six Silver tables from Bronze on one Spark session,
running the per-table passes concurrently.

Usage:
    python scripts/run_silver_etl.py [--date YYYY-MM-DD] [--warehouse-root URI] [--bucket-name BUCKET_NAME] [--max-workers N]
"""

import logging
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from etl.common.spark_session import create_spark_session
from etl.common.etl_utils import (
    build_argument_parser,
    parse_processing_date,
    resolve_warehouse_root,
)
from etl.silver.silver_layer import run_silver_layer
from config import LOG_LEVEL, LOG_FORMAT, SILVER_MAX_WORKERS

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format=LOG_FORMAT
)
logger = logging.getLogger(__name__)


def main(date: str, warehouse_root: str, max_workers: int = SILVER_MAX_WORKERS) -> int:
    """
    Main function to run all Silver layer ETL processes.

    Args:
        date: Processing date (YYYY-MM-DD)
        warehouse_root: Warehouse root URI or local path
        max_workers: Number of tables rebuilt at the same time

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    logger.info(f"Starting all Silver layer ETL processes for date: {date}")

    try:
        spark = create_spark_session(app_name=f"silver_layer_etl_{date}")

        row_counts = run_silver_layer(
            spark, parse_processing_date(date), warehouse_root, max_workers
        )

        spark.stop()

        for table_name, row_count in sorted(row_counts.items()):
            logger.info(f"silver.{table_name}: {row_count} rows")
        logger.info("All Silver layer ETL processes completed successfully")
        return 0
    except Exception as e:
        logger.error(f"Error in Silver layer ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    parser = build_argument_parser("Run All Silver Layer ETL Processes")
    parser.add_argument(
        "--max-workers",
        type=int,
        default=SILVER_MAX_WORKERS,
        help=f"Number of tables rebuilt concurrently (default: {SILVER_MAX_WORKERS})"
    )
    args = parser.parse_args()
    logger.info(f"Running all Silver layer ETL processes for date: {args.date}")
    exit_code = main(
        args.date,
        resolve_warehouse_root(args.warehouse_root, args.bucket_name),
        args.max_workers
    )
    logger.info(f"All Silver layer ETL processes completed with exit code: {exit_code}")
    sys.exit(exit_code)
