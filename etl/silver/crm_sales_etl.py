#!/usr/bin/env python
"""
Silver CRM Sales ETL

This script cleans CRM sales transaction lines from the bronze layer into the silver layer.
It performs the following operations:
1. Converts YYYYMMDD integer dates to calendar dates, nulling invalid encodings
2. Recomputes sales amounts that are missing, non-positive or inconsistent
3. Derives missing or non-positive prices from the corrected sales amount
4. Writes to the Silver Delta table

Usage:
    python -m etl.silver.crm_sales_etl [--date YYYY-MM-DD]
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional, Tuple

from pyspark.sql import Column, DataFrame, SparkSession
from pyspark.sql.functions import abs, col, length, lit, to_date, when

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
from etl.common.schemas import SILVER_CRM_SALES_DETAILS_SCHEMA
from config import LOG_LEVEL, LOG_FORMAT, SALES_DATE_MIN, SALES_DATE_MAX

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

TABLE_NAME = "crm_sales_details"

DATE_COLUMNS = ["sls_order_dt", "sls_ship_dt", "sls_due_dt"]


def is_invalid_sales_date(column: Column) -> Column:
    """True when an integer date is 0, not 8 digits long, or out of range."""
    return (
        (column == 0)
        | (length(column.cast("string")) != 8)
        | (column < SALES_DATE_MIN)
        | (column > SALES_DATE_MAX)
    )


def parse_sales_date(column: Column) -> Column:
    """
    Convert a YYYYMMDD integer to a date.

    Invalid encodings and impossible calendar dates (e.g. 20230231) become null.
    """
    return when(is_invalid_sales_date(column), lit(None).cast("date")).otherwise(
        to_date(column.cast("string"), "yyyyMMdd")
    )


def correct_sales_measures(
    sales: Column, quantity: Column, price: Column
) -> Tuple[Column, Column]:
    """
    Correct the (sales, quantity, price) triple of a transaction line.

    Sales is corrected first: when it is null, non-positive or differs from
    quantity * |price| it becomes quantity * |price|. Price is corrected second:
    when it is null or non-positive it becomes corrected sales / quantity
    (integer division, null when quantity is null or 0). Quantity is never changed.

    Args:
        sales: Raw sales amount
        quantity: Raw quantity
        price: Raw unit price

    Returns:
        Tuple[Column, Column]: Corrected sales amount and corrected price
    """
    expected_sales = quantity * abs(price)

    corrected_sales = when(
        sales.isNull() | (sales <= 0) | (sales != expected_sales), expected_sales
    ).otherwise(sales)

    derived_price = when(quantity != 0, corrected_sales / quantity).cast("int")
    corrected_price = when(price.isNull() | (price <= 0), derived_price).otherwise(price)

    return corrected_sales.cast("int"), corrected_price.cast("int")


def transform_sales(df: DataFrame, processing_date: date) -> DataFrame:
    """
    Clean bronze CRM sales transaction lines.

    Args:
        df: Bronze crm_sales_details rows
        processing_date: Processing date of the run

    Returns:
        DataFrame: Silver crm_sales_details rows
    """
    logger.info("Transforming CRM sales for silver layer")

    sales_amount, price = correct_sales_measures(
        col("sls_sales"), col("sls_quantity"), col("sls_price")
    )

    result_df = df.select(
        col("sls_ord_num"),
        col("sls_prd_key"),
        col("sls_cust_id"),
        *[parse_sales_date(col(name)).alias(name) for name in DATE_COLUMNS],
        sales_amount.alias("sls_sales"),
        col("sls_quantity"),
        price.alias("sls_price"),
    )

    return conform_to_schema(
        add_processing_date(result_df, processing_date),
        SILVER_CRM_SALES_DETAILS_SCHEMA,
    )


def build_silver_sales(
    spark: SparkSession, processing_date: date, base_uri: Optional[str] = None
) -> int:
    """
    Rebuild silver.crm_sales_details from bronze.

    Returns:
        int: Number of rows written
    """
    try:
        bronze_df = read_layer_table(spark, "bronze", TABLE_NAME, base_uri)
        silver_df = transform_sales(bronze_df, processing_date)

        write_layer_table(silver_df, "silver", TABLE_NAME, base_uri)
        register_layer_table(
            spark,
            "silver",
            TABLE_NAME,
            description="Silver layer CRM sales lines with corrected dates and measures",
            base_uri=base_uri,
        )

        row_count = silver_df.count()
        logger.info(f"Wrote {row_count} rows to silver.{TABLE_NAME}")
        return row_count
    except Exception as e:
        logger.error(f"Error building silver CRM sales: {str(e)}")
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
    logger.info(f"Starting Silver CRM Sales ETL for date: {date}")

    try:
        spark = create_spark_session(app_name=f"silver_crm_sales_etl_{date}")

        build_silver_sales(spark, parse_processing_date(date), warehouse_root)

        spark.stop()

        logger.info(f"Successfully completed Silver CRM Sales ETL for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in Silver CRM Sales ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Clean CRM sales lines into the silver layer").parse_args()
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    sys.exit(exit_code)
