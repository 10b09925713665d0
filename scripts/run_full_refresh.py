#!/usr/bin/env python
"""
Run a Full Warehouse Refresh

This script refreshes the whole warehouse on one Spark session. When catalog
registration is enabled it first creates the bronze, silver and gold databases.
Then it runs:
1. Bronze: load the CRM and ERP source extracts
2. Silver: rebuild the six cleaned tables (concurrently)
3. Gold: materialize the star schema
4. Quality: run the detection queries and the release-gate checks

Each stage starts only after the previous one completed. The exit code is
non-zero when any stage fails or when the release gate finds a violation.

Usage:
    python scripts/run_full_refresh.py [--date YYYY-MM-DD] [--warehouse-root URI] [--bucket-name BUCKET_NAME] [--source-root PATH]
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from pyspark.sql import SparkSession

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from etl.common.spark_session import create_spark_session
from etl.common.etl_utils import (
    build_argument_parser,
    parse_processing_date,
    resolve_warehouse_root,
)
from etl.bronze.sources_etl import run_bronze_layer
from etl.silver.silver_layer import run_silver_layer
from etl.gold.gold_layer import run_gold_layer
from etl.quality.runner import run_quality_checks
from etl.common.glue_catalog import create_all_databases
from config import (
    LOG_LEVEL,
    LOG_FORMAT,
    REGISTER_CATALOG,
    SILVER_MAX_WORKERS,
    get_all_settings,
)

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format=LOG_FORMAT
)
logger = logging.getLogger(__name__)


def run_full_refresh(
    spark: SparkSession,
    processing_date: date,
    warehouse_root: str,
    source_root: Optional[str] = None,
    max_workers: int = SILVER_MAX_WORKERS,
) -> Dict[str, Any]:
    """
    Run every stage of the refresh in order.

    Returns:
        Dict[str, Any]: Row counts per stage and the quality report
    """
    logger.debug(f"Refresh settings: {get_all_settings()}")

    if REGISTER_CATALOG and not create_all_databases():
        raise RuntimeError("Failed to create the Glue Data Catalog databases")

    logger.info("Stage 1/4: Bronze")
    bronze_counts = run_bronze_layer(spark, warehouse_root, source_root)

    logger.info("Stage 2/4: Silver")
    silver_counts = run_silver_layer(spark, processing_date, warehouse_root, max_workers)

    logger.info("Stage 3/4: Gold")
    gold_counts = run_gold_layer(spark, warehouse_root)

    logger.info("Stage 4/4: Quality")
    quality_report = run_quality_checks(spark, processing_date, warehouse_root)

    return {
        "bronze": bronze_counts,
        "silver": silver_counts,
        "gold": gold_counts,
        "quality": quality_report,
    }


def main(
    date: str,
    warehouse_root: str,
    source_root: Optional[str] = None,
    max_workers: int = SILVER_MAX_WORKERS,
) -> int:
    """
    Main function to run a full refresh.

    Args:
        date: Processing date (YYYY-MM-DD)
        warehouse_root: Warehouse root URI or local path
        source_root: Directory holding the CSV extracts. If None, reads from the raw zone.
        max_workers: Number of silver tables rebuilt at the same time

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    logger.info(f"Starting full warehouse refresh for date: {date}")

    try:
        spark = create_spark_session(app_name=f"full_refresh_{date}")

        result = run_full_refresh(
            spark, parse_processing_date(date), warehouse_root, source_root, max_workers
        )

        spark.stop()

        if not result["quality"]["passed"]:
            logger.error(f"Full refresh for date {date} failed the release gate")
            return 1

        logger.info(f"Full warehouse refresh completed successfully for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in full warehouse refresh: {str(e)}")
        return 1


if __name__ == "__main__":
    parser = build_argument_parser("Run a Full Warehouse Refresh")
    parser.add_argument(
        "--source-root",
        type=str,
        default=None,
        help="Local directory with source_crm/ and source_erp/ (default: raw zone)"
    )
    parser.add_argument(
        "--max-workers",
        type=int,
        default=SILVER_MAX_WORKERS,
        help=f"Number of silver tables rebuilt concurrently (default: {SILVER_MAX_WORKERS})"
    )
    args = parser.parse_args()
    logger.info(f"Running full warehouse refresh for date: {args.date}")
    exit_code = main(
        args.date,
        resolve_warehouse_root(args.warehouse_root, args.bucket_name),
        args.source_root,
        args.max_workers
    )
    logger.info(f"Full warehouse refresh completed with exit code: {exit_code}")
    sys.exit(exit_code)
