#!/usr/bin/env python
"""
Data Quality Checks

This script validates a refreshed warehouse.
It performs the following operations:
1. Runs the silver detection queries and logs their counts as warnings
2. Runs the gold release-gate checks on the materialized star schema
3. Exits with a non-zero code when any gold check finds a violation

Usage:
    python -m etl.quality.runner [--date YYYY-MM-DD]
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from pyspark.sql import DataFrame, SparkSession

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[2]))

from etl.common.spark_session import create_spark_session
from etl.common.etl_utils import (
    build_argument_parser,
    parse_processing_date,
    read_layer_table,
    resolve_warehouse_root,
)
from etl.quality.gold_checks import run_gold_checks
from etl.quality.silver_checks import run_silver_checks
from config import LOG_LEVEL, LOG_FORMAT, SOURCE_FILES

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

BRONZE_CHECKED_TABLES = ["crm_cust_info", "crm_sales_details"]
GOLD_TABLES = ["dim_customers", "dim_products", "fact_sales"]


def count_findings(checks: Dict[str, DataFrame]) -> Dict[str, int]:
    """Count the rows returned by each check."""
    return {name: df.count() for name, df in checks.items()}


def run_quality_checks(
    spark: SparkSession, processing_date: date, base_uri: Optional[str] = None
) -> Dict[str, Any]:
    """
    Run every quality check against the warehouse.

    Args:
        spark: Spark session
        processing_date: Processing date of the run
        base_uri: Warehouse root. If None, uses the default from config.

    Returns:
        Dict[str, Any]: Report with per-check counts for silver and gold and
            a passed flag that is True only when every gold check is empty
    """
    logger.info(f"Running data quality checks for {processing_date}")

    bronze_tables = {
        name: read_layer_table(spark, "bronze", name, base_uri) for name in BRONZE_CHECKED_TABLES
    }
    silver_tables = {
        name: read_layer_table(spark, "silver", name, base_uri) for name in SOURCE_FILES
    }
    gold_tables = {name: read_layer_table(spark, "gold", name, base_uri) for name in GOLD_TABLES}

    silver_counts = count_findings(run_silver_checks(bronze_tables, silver_tables, processing_date))
    for name, findings in silver_counts.items():
        if findings > 0:
            logger.warning(f"Silver check {name}: {findings} rows")
        else:
            logger.info(f"Silver check {name}: no findings")

    gold_counts = count_findings(
        run_gold_checks(
            gold_tables["dim_customers"], gold_tables["dim_products"], gold_tables["fact_sales"]
        )
    )
    for name, violations in gold_counts.items():
        if violations > 0:
            logger.error(f"Gold check {name} failed: {violations} rows")
        else:
            logger.info(f"Gold check {name} passed")

    passed = all(violations == 0 for violations in gold_counts.values())
    logger.info(f"Data quality checks {'passed' if passed else 'failed'}")

    return {
        "processing_date": processing_date.isoformat(),
        "silver": silver_counts,
        "gold": gold_counts,
        "passed": passed,
    }


def main(date: str, warehouse_root: str) -> int:
    """
    Main function to run the quality checks.

    Args:
        date: Processing date (YYYY-MM-DD)
        warehouse_root: Warehouse root URI or local path

    Returns:
        int: Exit code (0 when every gold check passed, 1 otherwise)
    """
    logger.info(f"Starting Data Quality Checks for date: {date}")

    try:
        spark = create_spark_session(app_name=f"data_quality_checks_{date}")

        report = run_quality_checks(spark, parse_processing_date(date), warehouse_root)

        spark.stop()

        if not report["passed"]:
            logger.error(f"Data Quality Checks failed for date: {date}")
            return 1

        logger.info(f"Successfully completed Data Quality Checks for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in Data Quality Checks: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Run the warehouse data quality checks").parse_args()
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    sys.exit(exit_code)
