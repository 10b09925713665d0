"""
Release-gate checks for the gold star schema.

Each check returns a DataFrame of violations; an empty result means the check
passed. A refresh whose gold checks are not all empty must not be published.
"""

import logging
from typing import Dict

from pyspark.sql import DataFrame
from pyspark.sql.functions import col, count

from config import LOG_LEVEL, LOG_FORMAT

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def find_duplicate_surrogate_keys(dim_df: DataFrame, key_column: str) -> DataFrame:
    """
    Find surrogate key values that occur more than once in a dimension.

    Args:
        dim_df: Dimension table
        key_column: Surrogate key column (customer_key or product_key)

    Returns:
        DataFrame: (key_column, duplicate_count) for every duplicated key
    """
    return (
        dim_df.groupBy(key_column)
        .agg(count("*").alias("duplicate_count"))
        .filter(col("duplicate_count") > 1)
    )


def find_orphaned_facts(fact_df: DataFrame, dim_df: DataFrame, key_column: str) -> DataFrame:
    """
    Find fact rows whose foreign key does not resolve to a dimension row.

    A null key never matches, so fact rows whose business key found no
    dimension row during the gold build are reported as well.

    Args:
        fact_df: Fact table
        dim_df: Dimension table referenced by key_column
        key_column: Surrogate key column shared by fact and dimension

    Returns:
        DataFrame: The orphaned fact rows
    """
    dim_keys = dim_df.select(key_column).distinct()
    return fact_df.join(dim_keys, on=key_column, how="left_anti")


def run_gold_checks(
    dim_customers_df: DataFrame, dim_products_df: DataFrame, fact_sales_df: DataFrame
) -> Dict[str, DataFrame]:
    """
    Build every gold check.

    Returns:
        Dict[str, DataFrame]: Check name to violations
    """
    logger.info("Running gold release-gate checks")

    return {
        "dim_customers_duplicate_keys": find_duplicate_surrogate_keys(
            dim_customers_df, "customer_key"
        ),
        "dim_products_duplicate_keys": find_duplicate_surrogate_keys(
            dim_products_df, "product_key"
        ),
        "fact_sales_orphaned_customers": find_orphaned_facts(
            fact_sales_df, dim_customers_df, "customer_key"
        ),
        "fact_sales_orphaned_products": find_orphaned_facts(
            fact_sales_df, dim_products_df, "product_key"
        ),
    }
