#!/usr/bin/env python
"""
Gold Customer Dimension ETL

This script builds the customer dimension of the star schema.
It performs the following operations:
1. Reads CRM customers, ERP demographics and ERP locations from the silver layer
2. Left joins the ERP data on the customer key
3. Resolves gender, preferring the CRM value
4. Assigns the customer_key surrogate key ordered by customer id
5. Writes to the Gold Delta table

Usage:
    python -m etl.gold.dim_customers_etl [--date YYYY-MM-DD]
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.functions import coalesce, col, lit, row_number, when
from pyspark.sql.window import Window

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[2]))

from etl.common.spark_session import create_spark_session
from etl.common.etl_utils import (
    build_argument_parser,
    conform_to_schema,
    read_layer_table,
    register_layer_table,
    resolve_warehouse_root,
    write_layer_table,
)
from etl.common.schemas import GOLD_COLUMN_DESCRIPTIONS, GOLD_DIM_CUSTOMERS_SCHEMA
from etl.common.transformations import NOT_AVAILABLE
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

TABLE_NAME = "dim_customers"


def read_silver_customer_sources(
    spark: SparkSession, base_uri: Optional[str] = None
) -> Tuple[DataFrame, DataFrame, DataFrame]:
    """
    Read the silver tables feeding the customer dimension.

    Returns:
        Tuple[DataFrame, DataFrame, DataFrame]: CRM customers, ERP demographics, ERP locations
    """
    logger.info("Reading customer sources from silver layer")

    try:
        customers_df = read_layer_table(spark, "silver", "crm_cust_info", base_uri)
        erp_customers_df = read_layer_table(spark, "silver", "erp_cust_az12", base_uri)
        locations_df = read_layer_table(spark, "silver", "erp_loc_a101", base_uri)
        return customers_df, erp_customers_df, locations_df
    except Exception as e:
        logger.error(f"Error reading customer sources from silver layer: {str(e)}")
        raise


def build_dim_customers(
    customers_df: DataFrame, erp_customers_df: DataFrame, locations_df: DataFrame
) -> DataFrame:
    """
    Build the customer dimension from silver customers and ERP data.

    Every CRM customer yields a row, with or without matching ERP data.
    customer_key runs from 1 in ascending customer_id order.

    Args:
        customers_df: Silver crm_cust_info
        erp_customers_df: Silver erp_cust_az12
        locations_df: Silver erp_loc_a101

    Returns:
        DataFrame: Customer dimension rows
    """
    logger.info("Building customer dimension")

    ci = customers_df.alias("ci")
    ca = erp_customers_df.alias("ca")
    la = locations_df.alias("la")

    joined_df = ci.join(ca, col("ci.cst_key") == col("ca.cid"), "left").join(
        la, col("ci.cst_key") == col("la.cid"), "left"
    )

    gender = when(col("ci.cst_gndr") != NOT_AVAILABLE, col("ci.cst_gndr")).otherwise(
        coalesce(col("ca.gen"), lit(NOT_AVAILABLE))
    )

    result_df = joined_df.select(
        col("ci.cst_id").alias("customer_id"),
        col("ci.cst_key").alias("customer_number"),
        col("ci.cst_firstname").alias("first_name"),
        col("ci.cst_lastname").alias("last_name"),
        col("la.cntry").alias("country"),
        col("ci.cst_marital_status").alias("marital_status"),
        gender.alias("gender"),
        col("ca.bdate").alias("birthdate"),
        col("ci.cst_create_date").alias("create_date"),
    )

    # ERP key collisions can repeat a customer; the extra columns keep numbering stable
    key_order = Window.orderBy(
        col("customer_id"),
        col("birthdate").asc_nulls_first(),
        col("country").asc_nulls_first(),
        col("gender"),
    )
    result_df = result_df.withColumn("customer_key", row_number().over(key_order))

    return conform_to_schema(result_df, GOLD_DIM_CUSTOMERS_SCHEMA)


def write_gold_dim_customers(df: DataFrame, base_uri: Optional[str] = None) -> None:
    """Replace gold.dim_customers with the given rows."""
    try:
        write_layer_table(df, "gold", TABLE_NAME, base_uri, z_order_by="customer_key")
    except Exception as e:
        logger.error(f"Error writing customer dimension to gold layer: {str(e)}")
        raise


def register_gold_dim_customers(spark: SparkSession, base_uri: Optional[str] = None) -> bool:
    """Register gold.dim_customers in the data catalog."""
    return register_layer_table(
        spark,
        "gold",
        TABLE_NAME,
        description="Customer dimension of the sales star schema",
        base_uri=base_uri,
        columns_description=GOLD_COLUMN_DESCRIPTIONS[TABLE_NAME],
    )


def main(date: str, warehouse_root: str) -> int:
    """
    Main function to run the ETL process.

    Args:
        date: Processing date (YYYY-MM-DD)
        warehouse_root: Warehouse root URI or local path

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    logger.info(f"Starting Gold Customer Dimension ETL for date: {date}")

    try:
        spark = create_spark_session(app_name=f"gold_dim_customers_etl_{date}")

        customers_df, erp_customers_df, locations_df = read_silver_customer_sources(
            spark, warehouse_root
        )
        dim_df = build_dim_customers(customers_df, erp_customers_df, locations_df)
        write_gold_dim_customers(dim_df, warehouse_root)
        register_gold_dim_customers(spark, warehouse_root)

        spark.stop()

        logger.info(f"Successfully completed Gold Customer Dimension ETL for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in Gold Customer Dimension ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Build the gold customer dimension").parse_args()
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    sys.exit(exit_code)
