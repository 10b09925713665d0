#!/usr/bin/env python
"""
Run All Gold Layer ETL Processes

This script materializes the Gold star schema from the Silver layer:
1. Customer dimension
2. Product dimension
3. Sales fact

Usage:
    python scripts/run_gold_etl.py [--date YYYY-MM-DD] [--warehouse-root URI] [--bucket-name BUCKET_NAME]
"""

import logging
import sys
from pathlib import Path

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from etl.common.spark_session import create_spark_session
from etl.common.etl_utils import build_argument_parser, resolve_warehouse_root
from etl.gold.gold_layer import run_gold_layer
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format=LOG_FORMAT
)
logger = logging.getLogger(__name__)


def main(date: str, warehouse_root: str) -> int:
    """
    Main function to run all Gold layer ETL processes.

    Args:
        date: Processing date (YYYY-MM-DD)
        warehouse_root: Warehouse root URI or local path

    Returns:
        int: Exit code (0 for success, non-zero for failure)
    """
    logger.info(f"Starting all Gold layer ETL processes for date: {date}")

    try:
        spark = create_spark_session(app_name=f"gold_layer_etl_{date}")

        run_gold_layer(spark, warehouse_root)

        spark.stop()

        logger.info("All Gold layer ETL processes completed successfully")
        return 0
    except Exception as e:
        logger.error(f"Error in Gold layer ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Run All Gold Layer ETL Processes").parse_args()
    logger.info(f"Running all Gold layer ETL processes for date: {args.date}")
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    logger.info(f"All Gold layer ETL processes completed with exit code: {exit_code}")
    sys.exit(exit_code)
