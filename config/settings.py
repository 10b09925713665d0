"""
Configuration settings for the sales data warehouse.

This module contains all configuration settings for the warehouse, including:
- AWS settings (region, bucket name, warehouse root)
- Data layer settings (raw sources, bronze, silver, gold)
- Business rule constants used by the cleaning layer
- Processing and logging settings

All settings can be overridden by environment variables with the same name prefixed with 'DWH_'.
For example, AWS_REGION can be overridden by setting the DWH_AWS_REGION environment variable.
"""

import os
from datetime import date
from typing import Dict, Any, Optional

# AWS Settings
AWS_REGION = os.environ.get("DWH_AWS_REGION", "eu-west-1")
S3_BUCKET_NAME = os.environ.get("DWH_S3_BUCKET_NAME", "sales-data-warehouse")

# Root URI under which all layer prefixes live (s3a://bucket or a local path)
WAREHOUSE_ROOT = os.environ.get("DWH_WAREHOUSE_ROOT", f"s3a://{S3_BUCKET_NAME}")

# Prefix structure per layer
S3_PREFIX_STRUCTURE = {
    # Raw landing zone for the source extracts
    "raw": {
        "base": "raw/",
        "source_crm": "raw/source_crm/",
        "source_erp": "raw/source_erp/",
    },
    # Bronze layer
    "bronze": {
        "base": "bronze/",
        "crm_cust_info": "bronze/crm_cust_info/",
        "crm_prd_info": "bronze/crm_prd_info/",
        "crm_sales_details": "bronze/crm_sales_details/",
        "erp_cust_az12": "bronze/erp_cust_az12/",
        "erp_loc_a101": "bronze/erp_loc_a101/",
        "erp_px_cat_g1v2": "bronze/erp_px_cat_g1v2/",
    },
    # Silver layer
    "silver": {
        "base": "silver/",
        "crm_cust_info": "silver/crm_cust_info/",
        "crm_prd_info": "silver/crm_prd_info/",
        "crm_sales_details": "silver/crm_sales_details/",
        "erp_cust_az12": "silver/erp_cust_az12/",
        "erp_loc_a101": "silver/erp_loc_a101/",
        "erp_px_cat_g1v2": "silver/erp_px_cat_g1v2/",
    },
    # Gold layer
    "gold": {
        "base": "gold/",
        "dim_customers": "gold/dim_customers/",
        "dim_products": "gold/dim_products/",
        "fact_sales": "gold/fact_sales/",
    },
}

# Source extract mappings (bronze table -> raw file)
SOURCE_FILES = {
    "crm_cust_info": {
        "system": "source_crm",
        "file_name": "cust_info.csv",
    },
    "crm_prd_info": {
        "system": "source_crm",
        "file_name": "prd_info.csv",
    },
    "crm_sales_details": {
        "system": "source_crm",
        "file_name": "sales_details.csv",
    },
    "erp_cust_az12": {
        "system": "source_erp",
        "file_name": "CUST_AZ12.csv",
    },
    "erp_loc_a101": {
        "system": "source_erp",
        "file_name": "LOC_A101.csv",
    },
    "erp_px_cat_g1v2": {
        "system": "source_erp",
        "file_name": "PX_CAT_G1V2.csv",
    },
}

# Business rule constants
SALES_DATE_MIN = int(os.environ.get("DWH_SALES_DATE_MIN", "19000101"))
SALES_DATE_MAX = int(os.environ.get("DWH_SALES_DATE_MAX", "20500101"))
BIRTHDATE_FLOOR = date.fromisoformat(
    os.environ.get("DWH_BIRTHDATE_FLOOR", "1924-01-01")
)

# Processing settings
SILVER_MAX_WORKERS = int(os.environ.get("DWH_SILVER_MAX_WORKERS", "3"))

# Logging settings
LOG_LEVEL = os.environ.get("DWH_LOG_LEVEL", "INFO")
LOG_FORMAT = os.environ.get(
    "DWH_LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# Glue Data Catalog settings
GLUE_DATABASE_PREFIX = os.environ.get("DWH_GLUE_DATABASE_PREFIX", "sales_dwh")
GLUE_DATABASES = {
    "bronze": f"{GLUE_DATABASE_PREFIX}_bronze",
    "silver": f"{GLUE_DATABASE_PREFIX}_silver",
    "gold": f"{GLUE_DATABASE_PREFIX}_gold",
}
REGISTER_CATALOG = os.environ.get("DWH_REGISTER_CATALOG", "false").lower() == "true"

# Delta Lake settings
DELTA_TABLE_PROPERTIES = {
    "delta.autoOptimize.optimizeWrite": "true",
    "delta.autoOptimize.autoCompact": "true",
}

# Schema settings
SCHEMA_VALIDATION = os.environ.get("DWH_SCHEMA_VALIDATION", "true").lower() == "true"


def get_prefix(layer: str, table: str) -> str:
    """
    Get a specific prefix from the prefix structure.

    Args:
        layer: The data layer (raw, bronze, silver, gold)
        table: The table (or category) within the layer

    Returns:
        str: The prefix

    Raises:
        KeyError: If the layer or table does not exist
    """
    return S3_PREFIX_STRUCTURE[layer][table]


def get_table_uri(layer: str, table: str, base_uri: Optional[str] = None) -> str:
    """
    Get the full URI of a table (or raw category) in the warehouse.

    Args:
        layer: The data layer (raw, bronze, silver, gold)
        table: The table within the layer
        base_uri: Warehouse root. If None, uses WAREHOUSE_ROOT.

    Returns:
        str: The full URI, e.g. s3a://bucket/silver/crm_cust_info/
    """
    if base_uri is None:
        base_uri = WAREHOUSE_ROOT
    return f"{base_uri.rstrip('/')}/{get_prefix(layer, table)}"


def get_all_settings() -> Dict[str, Any]:
    """
    Get all settings as a dictionary.

    Returns:
        Dict[str, Any]: All settings
    """
    return {
        "AWS_REGION": AWS_REGION,
        "S3_BUCKET_NAME": S3_BUCKET_NAME,
        "WAREHOUSE_ROOT": WAREHOUSE_ROOT,
        "S3_PREFIX_STRUCTURE": S3_PREFIX_STRUCTURE,
        "SOURCE_FILES": SOURCE_FILES,
        "SALES_DATE_MIN": SALES_DATE_MIN,
        "SALES_DATE_MAX": SALES_DATE_MAX,
        "BIRTHDATE_FLOOR": BIRTHDATE_FLOOR,
        "SILVER_MAX_WORKERS": SILVER_MAX_WORKERS,
        "LOG_LEVEL": LOG_LEVEL,
        "LOG_FORMAT": LOG_FORMAT,
        "GLUE_DATABASE_PREFIX": GLUE_DATABASE_PREFIX,
        "GLUE_DATABASES": GLUE_DATABASES,
        "REGISTER_CATALOG": REGISTER_CATALOG,
        "DELTA_TABLE_PROPERTIES": DELTA_TABLE_PROPERTIES,
        "SCHEMA_VALIDATION": SCHEMA_VALIDATION,
    }
