"""
Gold layer runner.

The star schema is defined over the silver tables: build_gold_layer returns
lazy DataFrames that are recomputed from silver whenever they are read.
run_gold_layer materializes them, dimensions first, once silver is complete.
"""

import logging
from typing import Dict, Optional

from pyspark.sql import DataFrame, SparkSession

from etl.gold.dim_customers_etl import (
    build_dim_customers,
    read_silver_customer_sources,
    register_gold_dim_customers,
    write_gold_dim_customers,
)
from etl.gold.dim_products_etl import (
    build_dim_products,
    read_silver_product_sources,
    register_gold_dim_products,
    write_gold_dim_products,
)
from etl.gold.fact_sales_etl import (
    build_fact_sales,
    register_gold_fact_sales,
    write_gold_fact_sales,
)
from etl.common.etl_utils import read_layer_table
from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def build_gold_layer(spark: SparkSession, base_uri: Optional[str] = None) -> Dict[str, DataFrame]:
    """
    Define the three gold tables over the current silver tables.

    Args:
        spark: Spark session
        base_uri: Warehouse root. If None, uses the default from config.

    Returns:
        Dict[str, DataFrame]: dim_customers, dim_products and fact_sales
    """
    customers_df, erp_customers_df, locations_df = read_silver_customer_sources(spark, base_uri)
    products_df, categories_df = read_silver_product_sources(spark, base_uri)
    sales_df = read_layer_table(spark, "silver", "crm_sales_details", base_uri)

    dim_customers_df = build_dim_customers(customers_df, erp_customers_df, locations_df)
    dim_products_df = build_dim_products(products_df, categories_df)
    fact_sales_df = build_fact_sales(sales_df, dim_products_df, dim_customers_df)

    return {
        "dim_customers": dim_customers_df,
        "dim_products": dim_products_df,
        "fact_sales": fact_sales_df,
    }


def run_gold_layer(spark: SparkSession, base_uri: Optional[str] = None) -> Dict[str, int]:
    """
    Materialize the gold tables and register them in the catalog.

    Returns:
        Dict[str, int]: Rows written per gold table
    """
    logger.info("Materializing gold layer")

    gold_tables = build_gold_layer(spark, base_uri)

    write_gold_dim_customers(gold_tables["dim_customers"], base_uri)
    register_gold_dim_customers(spark, base_uri)

    write_gold_dim_products(gold_tables["dim_products"], base_uri)
    register_gold_dim_products(spark, base_uri)

    write_gold_fact_sales(gold_tables["fact_sales"], base_uri)
    register_gold_fact_sales(spark, base_uri)

    row_counts = {name: df.count() for name, df in gold_tables.items()}
    for name, row_count in row_counts.items():
        logger.info(f"Wrote {row_count} rows to gold.{name}")

    return row_counts
