#!/usr/bin/env python
"""
Gold Product Dimension ETL

This script builds the product dimension of the star schema.
It performs the following operations:
1. Reads CRM products and ERP categories from the silver layer
2. Keeps only the current version of each product (open end date)
3. Left joins the ERP category on the category id
4. Assigns the product_key surrogate key ordered by start date and product number
5. Writes to the Gold Delta table

Usage:
    python -m etl.gold.dim_products_etl [--date YYYY-MM-DD]
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Tuple

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql.functions import col, row_number
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
from etl.common.schemas import GOLD_COLUMN_DESCRIPTIONS, GOLD_DIM_PRODUCTS_SCHEMA
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

TABLE_NAME = "dim_products"


def read_silver_product_sources(
    spark: SparkSession, base_uri: Optional[str] = None
) -> Tuple[DataFrame, DataFrame]:
    """
    Read the silver tables feeding the product dimension.

    Returns:
        Tuple[DataFrame, DataFrame]: CRM products and ERP categories
    """
    logger.info("Reading product sources from silver layer")

    try:
        products_df = read_layer_table(spark, "silver", "crm_prd_info", base_uri)
        categories_df = read_layer_table(spark, "silver", "erp_px_cat_g1v2", base_uri)
        return products_df, categories_df
    except Exception as e:
        logger.error(f"Error reading product sources from silver layer: {str(e)}")
        raise


def build_dim_products(products_df: DataFrame, categories_df: DataFrame) -> DataFrame:
    """
    Build the product dimension from silver products and ERP categories.

    Historical versions (those with an end date) are excluded. product_key runs
    from 1 ordered by start_date, then product_number, then product_id.

    Args:
        products_df: Silver crm_prd_info
        categories_df: Silver erp_px_cat_g1v2

    Returns:
        DataFrame: Product dimension rows
    """
    logger.info("Building product dimension")

    pn = products_df.filter(col("prd_end_dt").isNull()).alias("pn")
    pc = categories_df.alias("pc")

    result_df = pn.join(pc, col("pn.cat_id") == col("pc.id"), "left").select(
        col("pn.prd_id").alias("product_id"),
        col("pn.prd_key").alias("product_number"),
        col("pn.prd_nm").alias("product_name"),
        col("pn.cat_id").alias("category_id"),
        col("pc.cat").alias("category"),
        col("pc.subcat").alias("subcategory"),
        col("pc.maintenance").alias("maintenance"),
        col("pn.prd_cost").alias("cost"),
        col("pn.prd_line").alias("product_line"),
        col("pn.prd_start_dt").alias("start_date"),
    )

    key_order = Window.orderBy(
        col("start_date").asc_nulls_last(),
        col("product_number").asc_nulls_last(),
        col("product_id").asc_nulls_last(),
    )
    result_df = result_df.withColumn("product_key", row_number().over(key_order))

    return conform_to_schema(result_df, GOLD_DIM_PRODUCTS_SCHEMA)


def write_gold_dim_products(df: DataFrame, base_uri: Optional[str] = None) -> None:
    """Replace gold.dim_products with the given rows."""
    try:
        write_layer_table(df, "gold", TABLE_NAME, base_uri, z_order_by="product_key")
    except Exception as e:
        logger.error(f"Error writing product dimension to gold layer: {str(e)}")
        raise


def register_gold_dim_products(spark: SparkSession, base_uri: Optional[str] = None) -> bool:
    """Register gold.dim_products in the data catalog."""
    return register_layer_table(
        spark,
        "gold",
        TABLE_NAME,
        description="Product dimension of the sales star schema (current products only)",
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
    logger.info(f"Starting Gold Product Dimension ETL for date: {date}")

    try:
        spark = create_spark_session(app_name=f"gold_dim_products_etl_{date}")

        products_df, categories_df = read_silver_product_sources(spark, warehouse_root)
        dim_df = build_dim_products(products_df, categories_df)
        write_gold_dim_products(dim_df, warehouse_root)
        register_gold_dim_products(spark, warehouse_root)

        spark.stop()

        logger.info(f"Successfully completed Gold Product Dimension ETL for date: {date}")
        return 0
    except Exception as e:
        logger.error(f"Error in Gold Product Dimension ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    args = build_argument_parser("Build the gold product dimension").parse_args()
    exit_code = main(args.date, resolve_warehouse_root(args.warehouse_root, args.bucket_name))
    sys.exit(exit_code)
