#!/usr/bin/env python
"""
Silver ERP Customers ETL

This script cleans ERP customer demographics (CUST_AZ12) from the bronze layer
into the silver layer. It performs the following operations:
1. Strips the 'NAS' prefix so ids match the CRM customer key
2. Nulls birthdates later than the processing date
3. Standardizes gender values
4. Writes to the Silver Delta table

Birthdates before the configured floor are left untouched; they are reported
by the silver quality checks.

Usage:
    python -m etl.silver.erp_customers_etl [--date YYYY-MM-DD]
"""

import logging
import sys
from datetime import date
from pathlib import Path
from typing import Optional

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.functions import col, expr, lit, when

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
from etl.common.schemas import SILVER_ERP_CUST_AZ12_SCHEMA
from etl.common.transformations import map_codes
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

TABLE_NAME = "erp_cust_az12"

CID_PREFIX = "NAS"

GENDER_CODES = {
    "F": "Female",
    "FEMALE": "Female",
    "M": "Male",
    "MALE": "Male",
}


def transform_erp_customers(df: DataFrame, processing_date: date) -> DataFrame:
    """
    Clean bronze ERP customer demographics.

    Args:
        df: Bronze erp_cust_az12 rows
        processing_date: Processing date; later birthdates are nulled

    Returns:
        DataFrame: Silver erp_cust_az12 rows
    """
    logger.info("Transforming ERP customers for silver layer")

    result_df = df.select(
        when(
            col("cid").startswith(CID_PREFIX),
            expr(f"substring(cid, {len(CID_PREFIX) + 1})"),
        )
        .otherwise(col("cid"))
        .alias("cid"),
        when(col("bdate") > lit(processing_date), lit(None).cast("date"))
        .otherwise(col("bdate"))
        .alias("bdate"),
        map_codes(col("gen"), GENDER_CODES).alias("gen"),
    )

    return conform_to_schema(
        add_processing_date(result_df, processing_date), SILVER_ERP_CUST_AZ12_SCHEMA
    )


def build_silver_erp_customers(
    spark: SparkSession, processing_date: date, base_uri: Optional[str] = None
) -> int:
    """
    Rebuild silver.erp_cust_az12 from bronze.

    Returns:
        int: Number of rows written
    """
    try:
        bronze_df = read_layer_table(spark, "bronze", TABLE_NAME, base_uri)
        silver_df = transform_erp_customers(bronze_df, processing_date)

        write_layer_table(silver_df, "silver", TABLE_NAME, base_uri)
        register_layer_table(
            spark,
            "silver",
            TABLE_NAME,
            description="Silver layer ERP customer demographics",
            base_uri=base_uri,
        )

        row_count = silver_df.count()
        logger.info(f"Wrote {row_count} rows to silver.{TABLE_NAME}")
        return row_count
    except Exception as e:
        logger.error(f"Error building silver ERP customers: {str(e)}")
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
    logger.info(f"Starting Silver ERP Customers ETL for date: {date}")

    try:
        spark = create_spark_session(app_name=f"silver_erp_customers_etl_{date}")

        build_silver_erp_customers(spark, parse_processing_date(date), warehouse_root)

        spark.stop()

        logger.info(f"Successfully completed Silver ERP Customers ETL for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in Silver ERP Customers ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Clean ERP customer demographics into the silver layer").parse_args()
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    sys.exit(exit_code)
