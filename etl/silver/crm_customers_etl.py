#!/usr/bin/env python
"""
Silver CRM Customers ETL

This script cleans CRM customer data from the bronze layer into the silver layer.
It performs the following operations:
1. Drops rows without a customer id
2. Keeps the most recently created row per customer id
3. Trims first and last names
4. Standardizes marital status and gender codes
5. Writes to the Silver Delta table

Usage:
    python -m etl.silver.crm_customers_etl [--date YYYY-MM-DD]
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.functions import col, row_number, trim
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
from etl.common.schemas import SILVER_CRM_CUST_INFO_SCHEMA
from etl.common.transformations import map_codes
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

TABLE_NAME = "crm_cust_info"

MARITAL_STATUS_CODES = {"S": "Single", "M": "Married"}
GENDER_CODES = {"F": "Female", "M": "Male"}


def deduplicate_customers(df: DataFrame) -> DataFrame:
    """
    Keep one row per customer id: the one with the latest creation date.

    The whole row is kept, values are never merged across duplicates. Ties on
    the creation date are broken by customer key, then first and last name.
    """
    latest_first = Window.partitionBy("cst_id").orderBy(
        col("cst_create_date").desc_nulls_last(),
        col("cst_key").asc_nulls_last(),
        col("cst_firstname").asc_nulls_last(),
        col("cst_lastname").asc_nulls_last(),
    )

    return (
        df.filter(col("cst_id").isNotNull())
        .withColumn("flag_last", row_number().over(latest_first))
        .filter(col("flag_last") == 1)
        .drop("flag_last")
    )


def transform_customers(df: DataFrame, processing_date: date) -> DataFrame:
    """
    Clean bronze CRM customers.

    Args:
        df: Bronze crm_cust_info rows
        processing_date: Processing date of the run

    Returns:
        DataFrame: Silver crm_cust_info rows
    """
    logger.info("Transforming CRM customers for silver layer")

    result_df = deduplicate_customers(df).select(
        col("cst_id"),
        col("cst_key"),
        trim(col("cst_firstname")).alias("cst_firstname"),
        trim(col("cst_lastname")).alias("cst_lastname"),
        map_codes(col("cst_marital_status"), MARITAL_STATUS_CODES).alias(
            "cst_marital_status"
        ),
        map_codes(col("cst_gndr"), GENDER_CODES).alias("cst_gndr"),
        col("cst_create_date"),
    )

    return conform_to_schema(
        add_processing_date(result_df, processing_date), SILVER_CRM_CUST_INFO_SCHEMA
    )


def build_silver_customers(
    spark: SparkSession, processing_date: date, base_uri: Optional[str] = None
) -> int:
    """
    Rebuild silver.crm_cust_info from bronze.

    Returns:
        int: Number of rows written
    """
    try:
        bronze_df = read_layer_table(spark, "bronze", TABLE_NAME, base_uri)
        silver_df = transform_customers(bronze_df, processing_date)

        write_layer_table(silver_df, "silver", TABLE_NAME, base_uri, z_order_by="cst_id")
        register_layer_table(
            spark,
            "silver",
            TABLE_NAME,
            description="Silver layer CRM customers, one row per customer id",
            base_uri=base_uri,
        )

        row_count = silver_df.count()
        logger.info(f"Wrote {row_count} rows to silver.{TABLE_NAME}")
        return row_count
    except Exception as e:
        logger.error(f"Error building silver CRM customers: {str(e)}")
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
    logger.info(f"Starting Silver CRM Customers ETL for date: {date}")

    try:
        spark = create_spark_session(app_name=f"silver_crm_customers_etl_{date}")

        build_silver_customers(spark, parse_processing_date(date), warehouse_root)

        spark.stop()

        logger.info(f"Successfully completed Silver CRM Customers ETL for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in Silver CRM Customers ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Clean CRM customers into the silver layer").parse_args()
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    sys.exit(exit_code)
