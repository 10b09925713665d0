"""
Silver layer runner.

The six silver tables depend only on their own bronze table, so they are
rebuilt concurrently on a shared Spark session. The layer is complete only
when every table has been rewritten.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from datetime import date
from typing import Callable, Dict, Optional

from pyspark.sql import SparkSession

from etl.silver.crm_customers_etl import build_silver_customers
from etl.silver.crm_products_etl import build_silver_products
from etl.silver.crm_sales_etl import build_silver_sales
from etl.silver.erp_customers_etl import build_silver_erp_customers
from etl.silver.erp_locations_etl import build_silver_erp_locations
from etl.silver.erp_categories_etl import build_silver_erp_categories
from config import LOG_LEVEL, LOG_FORMAT, SILVER_MAX_WORKERS

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

SilverBuilder = Callable[[SparkSession, date, Optional[str]], int]

SILVER_BUILDERS: Dict[str, SilverBuilder] = {
    "crm_cust_info": build_silver_customers,
    "crm_prd_info": build_silver_products,
    "crm_sales_details": build_silver_sales,
    "erp_cust_az12": build_silver_erp_customers,
    "erp_loc_a101": build_silver_erp_locations,
    "erp_px_cat_g1v2": build_silver_erp_categories,
}


def run_silver_layer(
    spark: SparkSession,
    processing_date: date,
    base_uri: Optional[str] = None,
    max_workers: int = SILVER_MAX_WORKERS,
) -> Dict[str, int]:
    """
    Rebuild every silver table from bronze.

    Args:
        spark: Spark session shared by the worker threads
        processing_date: Processing date of the run
        base_uri: Warehouse root. If None, uses the default from config.
        max_workers: Number of tables rebuilt at the same time

    Returns:
        Dict[str, int]: Rows written per silver table

    Raises:
        RuntimeError: If any table failed to rebuild
    """
    logger.info(f"Rebuilding {len(SILVER_BUILDERS)} silver tables ({max_workers} workers)")

    row_counts = {}
    failures = {}

    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        futures = {
            executor.submit(builder, spark, processing_date, base_uri): table_name
            for table_name, builder in SILVER_BUILDERS.items()
        }
        for future in as_completed(futures):
            table_name = futures[future]
            try:
                row_counts[table_name] = future.result()
            except Exception as e:
                failures[table_name] = str(e)

    if failures:
        for table_name, error in failures.items():
            logger.error(f"Silver table {table_name} failed: {error}")
        raise RuntimeError(f"Silver layer failed for: {', '.join(sorted(failures))}")

    logger.info("Silver layer rebuilt successfully")
    return row_counts
