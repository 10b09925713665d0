#!/usr/bin/env python
"""
Silver CRM Products ETL

This script cleans CRM product data from the bronze layer into the silver layer.
It performs the following operations:
1. Splits the raw product key into a category id and the product key used by sales
2. Defaults missing costs to 0
3. Standardizes product line codes
4. Rebuilds each product version's end date from the next version's start date
5. Writes to the Silver Delta table

Usage:
    python -m etl.silver.crm_products_etl [--date YYYY-MM-DD]
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.functions import (
    coalesce,
    col,
    date_sub,
    first,
    length,
    lit,
    regexp_replace,
    substring,
)
from pyspark.sql.window import Window

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
from etl.common.schemas import SILVER_CRM_PRD_INFO_SCHEMA
from etl.common.transformations import map_codes
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

TABLE_NAME = "crm_prd_info"

# Raw keys look like AC-HE-HL-U509-R: a 5 character category prefix, a hyphen,
# then the product key used by sales transactions
CATEGORY_PREFIX_LENGTH = 5
PRODUCT_KEY_START = 7

PRODUCT_LINE_CODES = {
    "M": "Mountain",
    "R": "Road",
    "S": "Other Sales",
    "T": "Touring",
}


def split_product_key(df: DataFrame) -> DataFrame:
    """
    Derive cat_id and the sales-facing prd_key from the raw product key.

    The raw key is kept as raw_prd_key for the end date calculation.
    """
    raw_key = col("prd_key")
    return (
        df.withColumn("raw_prd_key", raw_key)
        .withColumn(
            "cat_id",
            regexp_replace(substring(raw_key, 1, CATEGORY_PREFIX_LENGTH), "-", "_"),
        )
        .withColumn("prd_key", raw_key.substr(lit(PRODUCT_KEY_START), length(raw_key)))
    )


def derive_end_dates(df: DataFrame) -> DataFrame:
    """
    Rebuild the validity range of each product version.

    Versions sharing a raw product key are ordered by start date, undated
    versions first; each one ends the day before the next dated version starts
    and the latest version stays open (null).
    """
    following = (
        Window.partitionBy("raw_prd_key")
        .orderBy(col("prd_start_dt").asc_nulls_first(), col("prd_id").asc_nulls_first())
        .rowsBetween(1, Window.unboundedFollowing)
    )
    next_start = first(col("prd_start_dt"), ignorenulls=True).over(following)
    return df.withColumn("prd_end_dt", date_sub(next_start, 1))


def transform_products(df: DataFrame, processing_date: date) -> DataFrame:
    """
    Clean bronze CRM products.

    Negative costs pass through unchanged; they are reported by the silver
    quality checks.

    Args:
        df: Bronze crm_prd_info rows
        processing_date: Processing date of the run

    Returns:
        DataFrame: Silver crm_prd_info rows
    """
    logger.info("Transforming CRM products for silver layer")

    result_df = derive_end_dates(split_product_key(df)).select(
        col("prd_id"),
        col("cat_id"),
        col("prd_key"),
        col("prd_nm"),
        coalesce(col("prd_cost"), lit(0)).alias("prd_cost"),
        map_codes(col("prd_line"), PRODUCT_LINE_CODES).alias("prd_line"),
        col("prd_start_dt"),
        col("prd_end_dt"),
    )

    return conform_to_schema(
        add_processing_date(result_df, processing_date), SILVER_CRM_PRD_INFO_SCHEMA
    )


def build_silver_products(
    spark: SparkSession, processing_date: date, base_uri: Optional[str] = None
) -> int:
    """
    Rebuild silver.crm_prd_info from bronze.

    Returns:
        int: Number of rows written
    """
    try:
        bronze_df = read_layer_table(spark, "bronze", TABLE_NAME, base_uri)
        silver_df = transform_products(bronze_df, processing_date)

        write_layer_table(silver_df, "silver", TABLE_NAME, base_uri, z_order_by="prd_key")
        register_layer_table(
            spark,
            "silver",
            TABLE_NAME,
            description="Silver layer CRM products with rebuilt validity ranges",
            base_uri=base_uri,
        )

        row_count = silver_df.count()
        logger.info(f"Wrote {row_count} rows to silver.{TABLE_NAME}")
        return row_count
    except Exception as e:
        logger.error(f"Error building silver CRM products: {str(e)}")
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
    logger.info(f"Starting Silver CRM Products ETL for date: {date}")

    try:
        spark = create_spark_session(app_name=f"silver_crm_products_etl_{date}")

        build_silver_products(spark, parse_processing_date(date), warehouse_root)

        spark.stop()

        logger.info(f"Successfully completed Silver CRM Products ETL for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in Silver CRM Products ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Clean CRM products into the silver layer").parse_args()
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    sys.exit(exit_code)
