#!/usr/bin/env python
"""
Gold Sales Fact ETL

This script builds the sales fact table of the star schema.
It performs the following operations:
1. Reads cleaned sales transactions from the silver layer
2. Reads the customer and product dimensions from the gold layer
3. Resolves product_key and customer_key with left joins
4. Writes to the Gold Delta table

Sales lines without a matching dimension row are kept with a null key, so
the fact table always holds every silver sales line.

Usage:
    python -m etl.gold.fact_sales_etl [--date YYYY-MM-DD]
"""

import logging
import sys
from pathlib import Path
from typing import Optional

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.functions import col

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
from etl.common.schemas import GOLD_COLUMN_DESCRIPTIONS, GOLD_FACT_SALES_SCHEMA
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

TABLE_NAME = "fact_sales"


def build_fact_sales(
    sales_df: DataFrame, dim_products_df: DataFrame, dim_customers_df: DataFrame
) -> DataFrame:
    """
    Build the sales fact table from silver sales and the gold dimensions.

    Args:
        sales_df: Silver crm_sales_details
        dim_products_df: Gold dim_products
        dim_customers_df: Gold dim_customers

    Returns:
        DataFrame: One fact row per silver sales line
    """
    logger.info("Building sales fact table")

    sd = sales_df.alias("sd")
    pr = dim_products_df.select("product_key", "product_number").alias("pr")
    cu = dim_customers_df.select("customer_key", "customer_id").alias("cu")

    result_df = (
        sd.join(pr, col("sd.sls_prd_key") == col("pr.product_number"), "left")
        .join(cu, col("sd.sls_cust_id") == col("cu.customer_id"), "left")
        .select(
            col("sd.sls_ord_num").alias("order_number"),
            col("pr.product_key").alias("product_key"),
            col("cu.customer_key").alias("customer_key"),
            col("sd.sls_order_dt").alias("order_date"),
            col("sd.sls_ship_dt").alias("shipping_date"),
            col("sd.sls_due_dt").alias("due_date"),
            col("sd.sls_sales").alias("sales_amount"),
            col("sd.sls_quantity").alias("quantity"),
            col("sd.sls_price").alias("price"),
        )
    )

    return conform_to_schema(result_df, GOLD_FACT_SALES_SCHEMA)


def write_gold_fact_sales(df: DataFrame, base_uri: Optional[str] = None) -> None:
    """Replace gold.fact_sales with the given rows."""
    try:
        write_layer_table(df, "gold", TABLE_NAME, base_uri, z_order_by="order_date")
    except Exception as e:
        logger.error(f"Error writing sales fact table to gold layer: {str(e)}")
        raise


def register_gold_fact_sales(spark: SparkSession, base_uri: Optional[str] = None) -> bool:
    """Register gold.fact_sales in the data catalog."""
    return register_layer_table(
        spark,
        "gold",
        TABLE_NAME,
        description="Sales fact table of the sales star schema",
        base_uri=base_uri,
        columns_description=GOLD_COLUMN_DESCRIPTIONS[TABLE_NAME],
    )


def main(date: str, warehouse_root: str) -> int:
    """
    Main function to run the ETL process.

    The gold dimensions must already be materialized for this date.

    Args:
        date: Processing date (YYYY-MM-DD)
        warehouse_root: Warehouse root URI or local path

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    logger.info(f"Starting Gold Sales Fact ETL for date: {date}")

    try:
        spark = create_spark_session(app_name=f"gold_fact_sales_etl_{date}")

        sales_df = read_layer_table(spark, "silver", "crm_sales_details", warehouse_root)
        dim_products_df = read_layer_table(spark, "gold", "dim_products", warehouse_root)
        dim_customers_df = read_layer_table(spark, "gold", "dim_customers", warehouse_root)

        fact_df = build_fact_sales(sales_df, dim_products_df, dim_customers_df)
        write_gold_fact_sales(fact_df, warehouse_root)
        register_gold_fact_sales(spark, warehouse_root)

        spark.stop()

        logger.info(f"Successfully completed Gold Sales Fact ETL for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in Gold Sales Fact ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Build the gold sales fact table").parse_args()
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    sys.exit(exit_code)
