"""
Detection queries for source and silver data issues.

These checks report problems that the silver cleaning rules either repair or
deliberately leave alone. They never block a refresh and never modify data;
the runner logs their counts as warnings.
"""

import logging
from datetime import date
from functools import reduce
from typing import Dict, List

from pyspark.sql import DataFrame
from pyspark.sql.functions import col, count, lit, trim

from etl.silver.crm_sales_etl import DATE_COLUMNS, is_invalid_sales_date
from config import LOG_LEVEL, LOG_FORMAT, BIRTHDATE_FLOOR

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def find_customer_id_issues(df: DataFrame) -> DataFrame:
    """
    Find customer ids that are null or shared by several rows.

    Returns:
        DataFrame: (cst_id, row_count) per offending id
    """
    return (
        df.groupBy("cst_id")
        .agg(count("*").alias("row_count"))
        .filter((col("row_count") > 1) | col("cst_id").isNull())
    )


def find_untrimmed_values(df: DataFrame, columns: List[str]) -> DataFrame:
    """Find rows where any of the given columns has leading or trailing spaces."""
    condition = reduce(
        lambda acc, name: acc | (col(name) != trim(col(name))),
        columns,
        lit(False),
    )
    return df.filter(condition)


def find_invalid_product_costs(df: DataFrame) -> DataFrame:
    """Find products with a null or negative cost."""
    return df.filter(col("prd_cost").isNull() | (col("prd_cost") < 0))


def find_invalid_product_date_ranges(df: DataFrame) -> DataFrame:
    """Find product versions that end before they start."""
    return df.filter(col("prd_end_dt") < col("prd_start_dt"))


def find_unknown_categories(products_df: DataFrame, categories_df: DataFrame) -> DataFrame:
    """Find products whose category id has no ERP category."""
    category_ids = categories_df.select(col("id").alias("cat_id")).distinct()
    return products_df.join(category_ids, on="cat_id", how="left_anti")


def find_invalid_sales_dates(df: DataFrame) -> DataFrame:
    """
    Find bronze sales lines with an invalid YYYYMMDD date encoding.

    A line is reported when any of its order, ship or due dates is zero,
    negative, not 8 digits long or outside the accepted range.
    """
    condition = reduce(
        lambda acc, name: acc | (col(name) <= 0) | is_invalid_sales_date(col(name)),
        DATE_COLUMNS,
        lit(False),
    )
    return df.filter(condition)


def find_invalid_order_date_sequence(df: DataFrame) -> DataFrame:
    """Find sales lines ordered after they were shipped or due."""
    return df.filter(
        (col("sls_order_dt") > col("sls_ship_dt")) | (col("sls_order_dt") > col("sls_due_dt"))
    )


def find_inconsistent_sales_measures(df: DataFrame) -> DataFrame:
    """
    Find sales lines where sales != quantity * price, or where any of the
    three measures is null or non-positive.
    """
    measures = ["sls_sales", "sls_quantity", "sls_price"]
    condition = reduce(
        lambda acc, name: acc | col(name).isNull() | (col(name) <= 0),
        measures,
        col("sls_sales") != col("sls_quantity") * col("sls_price"),
    )
    return df.filter(condition)


def find_duplicate_keys(df: DataFrame, key_column: str) -> DataFrame:
    """
    Find key values shared by several rows.

    Used on the normalized ERP customer ids, where different raw spellings can
    collapse to one CRM customer key and fan out the customer dimension.
    """
    return (
        df.groupBy(key_column)
        .agg(count("*").alias("row_count"))
        .filter(col("row_count") > 1)
    )


def find_out_of_range_birthdates(df: DataFrame, processing_date: date) -> DataFrame:
    """Find birthdates before the plausibility floor or after the processing date."""
    return df.filter(
        (col("bdate") < lit(BIRTHDATE_FLOOR)) | (col("bdate") > lit(processing_date))
    )


def run_silver_checks(
    bronze_tables: Dict[str, DataFrame],
    silver_tables: Dict[str, DataFrame],
    processing_date: date,
) -> Dict[str, DataFrame]:
    """
    Build every detection query.

    Customer and sales date checks look at bronze, where the raw values still
    exist. The remaining checks look at silver.

    Args:
        bronze_tables: Bronze tables by name (crm_cust_info, crm_sales_details)
        silver_tables: Silver tables by name
        processing_date: Processing date of the run

    Returns:
        Dict[str, DataFrame]: Check name to findings
    """
    logger.info("Running silver detection checks")

    bronze_customers = bronze_tables["crm_cust_info"]
    products = silver_tables["crm_prd_info"]
    sales = silver_tables["crm_sales_details"]

    return {
        "crm_cust_info_id_issues": find_customer_id_issues(bronze_customers),
        "crm_cust_info_untrimmed_names": find_untrimmed_values(
            bronze_customers, ["cst_firstname", "cst_lastname"]
        ),
        "crm_prd_info_invalid_costs": find_invalid_product_costs(products),
        "crm_prd_info_invalid_date_ranges": find_invalid_product_date_ranges(products),
        "crm_prd_info_unknown_categories": find_unknown_categories(
            products, silver_tables["erp_px_cat_g1v2"]
        ),
        "crm_sales_details_invalid_dates": find_invalid_sales_dates(
            bronze_tables["crm_sales_details"]
        ),
        "crm_sales_details_invalid_date_sequence": find_invalid_order_date_sequence(sales),
        "crm_sales_details_inconsistent_measures": find_inconsistent_sales_measures(sales),
        "erp_cust_az12_out_of_range_birthdates": find_out_of_range_birthdates(
            silver_tables["erp_cust_az12"], processing_date
        ),
        "erp_cust_az12_duplicate_ids": find_duplicate_keys(
            silver_tables["erp_cust_az12"], "cid"
        ),
        "erp_loc_a101_duplicate_ids": find_duplicate_keys(
            silver_tables["erp_loc_a101"], "cid"
        ),
        "erp_px_cat_g1v2_untrimmed_values": find_untrimmed_values(
            silver_tables["erp_px_cat_g1v2"], ["cat", "subcat", "maintenance"]
        ),
    }
