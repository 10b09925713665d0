#!/usr/bin/env python
"""
Silver ERP Locations ETL

This script cleans ERP customer locations (LOC_A101) from the bronze layer into
the silver layer. It performs the following operations:
1. Removes hyphens from customer ids so they match the CRM customer key
2. Standardizes country codes to country names
3. Writes to the Silver Delta table

Usage:
    python -m etl.silver.erp_locations_etl [--date YYYY-MM-DD]
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.functions import col, lit, regexp_replace, trim, when

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
from etl.common.schemas import SILVER_ERP_LOC_A101_SCHEMA
from etl.common.transformations import NOT_AVAILABLE, map_codes
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

TABLE_NAME = "erp_loc_a101"

COUNTRY_CODES = {
    "DE": "Germany",
    "US": "United States",
    "USA": "United States",
}


def standardize_country(column):
    """Map country codes to names in any case; blanks become 'n/a', other values are trimmed."""
    trimmed = trim(column)
    fallback = when(trimmed.isNull() | (trimmed == ""), lit(NOT_AVAILABLE)).otherwise(
        trimmed
    )
    return map_codes(column, COUNTRY_CODES, default=fallback)


def transform_erp_locations(df: DataFrame, processing_date: date) -> DataFrame:
    """
    Clean bronze ERP customer locations.

    Args:
        df: Bronze erp_loc_a101 rows
        processing_date: Processing date of the run

    Returns:
        DataFrame: Silver erp_loc_a101 rows
    """
    logger.info("Transforming ERP locations for silver layer")

    result_df = df.select(
        regexp_replace(col("cid"), "-", "").alias("cid"),
        standardize_country(col("cntry")).alias("cntry"),
    )

    return conform_to_schema(
        add_processing_date(result_df, processing_date), SILVER_ERP_LOC_A101_SCHEMA
    )


def build_silver_erp_locations(
    spark: SparkSession, processing_date: date, base_uri: Optional[str] = None
) -> int:
    """
    Rebuild silver.erp_loc_a101 from bronze.

    Returns:
        int: Number of rows written
    """
    try:
        bronze_df = read_layer_table(spark, "bronze", TABLE_NAME, base_uri)
        silver_df = transform_erp_locations(bronze_df, processing_date)

        write_layer_table(silver_df, "silver", TABLE_NAME, base_uri)
        register_layer_table(
            spark,
            "silver",
            TABLE_NAME,
            description="Silver layer ERP customer locations",
            base_uri=base_uri,
        )

        row_count = silver_df.count()
        logger.info(f"Wrote {row_count} rows to silver.{TABLE_NAME}")
        return row_count
    except Exception as e:
        logger.error(f"Error building silver ERP locations: {str(e)}")
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
    logger.info(f"Starting Silver ERP Locations ETL for date: {date}")

    try:
        spark = create_spark_session(app_name=f"silver_erp_locations_etl_{date}")

        build_silver_erp_locations(spark, parse_processing_date(date), warehouse_root)

        spark.stop()

        logger.info(f"Successfully completed Silver ERP Locations ETL for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in Silver ERP Locations ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Clean ERP customer locations into the silver layer").parse_args()
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    sys.exit(exit_code)
