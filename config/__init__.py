"""
Configuration package for the sales data warehouse.

This package contains configuration settings for the bronze, silver and gold layers.
"""

from config.settings import (
    AWS_REGION,
    S3_BUCKET_NAME,
    WAREHOUSE_ROOT,
    S3_PREFIX_STRUCTURE,
    SOURCE_FILES,
    SALES_DATE_MIN,
    SALES_DATE_MAX,
    BIRTHDATE_FLOOR,
    SILVER_MAX_WORKERS,
    LOG_LEVEL,
    LOG_FORMAT,
    GLUE_DATABASE_PREFIX,
    GLUE_DATABASES,
    REGISTER_CATALOG,
    DELTA_TABLE_PROPERTIES,
    SCHEMA_VALIDATION,
    get_prefix,
    get_table_uri,
    get_all_settings,
)

__all__ = [
    "AWS_REGION",
    "S3_BUCKET_NAME",
    "WAREHOUSE_ROOT",
    "S3_PREFIX_STRUCTURE",
    "SOURCE_FILES",
    "SALES_DATE_MIN",
    "SALES_DATE_MAX",
    "BIRTHDATE_FLOOR",
    "SILVER_MAX_WORKERS",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "GLUE_DATABASE_PREFIX",
    "GLUE_DATABASES",
    "REGISTER_CATALOG",
    "DELTA_TABLE_PROPERTIES",
    "SCHEMA_VALIDATION",
    "get_prefix",
    "get_table_uri",
    "get_all_settings",
]
