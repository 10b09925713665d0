#!/usr/bin/env python
"""
Silver ERP Categories ETL

This script copies the ERP product category reference data (PX_CAT_G1V2) from
the bronze layer into the silver layer. The data is already clean; untrimmed
values are only reported by the silver quality checks.

Usage:
    python -m etl.silver.erp_categories_etl [--date YYYY-MM-DD]
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from pyspark.sql import DataFrame, SparkSession

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[2]))

from etl.common.spark_session import create_spark_session
from etl.common.etl_utils import (
    add_processing_date,
    build_argument_parser,
    conform_to_schema,
    parse_processing_date,
    read_layer_table,
    register_layer_table,
    resolve_warehouse_root,
    write_layer_table,
)
from etl.common.schemas import SILVER_ERP_PX_CAT_G1V2_SCHEMA
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

TABLE_NAME = "erp_px_cat_g1v2"


def transform_erp_categories(df: DataFrame, processing_date: date) -> DataFrame:
    """Pass the category reference data through to the silver schema."""
    logger.info("Transforming ERP categories for silver layer")

    result_df = df.select("id", "cat", "subcat", "maintenance")
    return conform_to_schema(
        add_processing_date(result_df, processing_date), SILVER_ERP_PX_CAT_G1V2_SCHEMA
    )


def build_silver_erp_categories(
    spark: SparkSession, processing_date: date, base_uri: Optional[str] = None
) -> int:
    """
    Rebuild silver.erp_px_cat_g1v2 from bronze.

    Returns:
        int: Number of rows written
    """
    try:
        bronze_df = read_layer_table(spark, "bronze", TABLE_NAME, base_uri)
        silver_df = transform_erp_categories(bronze_df, processing_date)

        write_layer_table(silver_df, "silver", TABLE_NAME, base_uri)
        register_layer_table(
            spark,
            "silver",
            TABLE_NAME,
            description="Silver layer ERP product categories",
            base_uri=base_uri,
        )

        row_count = silver_df.count()
        logger.info(f"Wrote {row_count} rows to silver.{TABLE_NAME}")
        return row_count
    except Exception as e:
        logger.error(f"Error building silver ERP categories: {str(e)}")
        raise


def main(date: str, warehouse_root: str) -> int:
    """
    Main function to run the ETL process.

    Args:
        date: Processing date (YYYY-MM-DD)
        warehouse_root: Warehouse root URI or local path

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    logger.info(f"Starting Silver ERP Categories ETL for date: {date}")

    try:
        spark = create_spark_session(app_name=f"silver_erp_categories_etl_{date}")

        build_silver_erp_categories(spark, parse_processing_date(date), warehouse_root)

        spark.stop()

        logger.info(f"Successfully completed Silver ERP Categories ETL for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in Silver ERP Categories ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Copy ERP product categories into the silver layer").parse_args()
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    sys.exit(exit_code)
