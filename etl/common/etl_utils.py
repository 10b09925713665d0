"""
ETL utilities for the sales data warehouse.

This module provides common utilities for ETL operations, including:
- Metadata columns for bronze and silver tables
- Schema validation
- Reading, writing and registering layer tables by name
- Processing date handling
"""

import argparse
import logging
from datetime import date, datetime
from typing import Dict, Optional, Tuple

from pyspark.sql import SparkSession, DataFrame
from pyspark.sql.functions import col, lit, current_timestamp, input_file_name
from pyspark.sql.types import StructType

from etl.common.spark_session import read_delta_table, write_delta_table
from etl.common.glue_catalog import register_delta_table
from config import (
    LOG_LEVEL,
    LOG_FORMAT,
    REGISTER_CATALOG,
    SCHEMA_VALIDATION,
    WAREHOUSE_ROOT,
    get_table_uri,
)

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)


class SchemaValidationError(ValueError):
    """Raised when a DataFrame does not match the schema declared for its table."""


def parse_processing_date(value: str) -> date:
    """
    Parse a processing date given as YYYY-MM-DD.

    Raises:
        ValueError: If the value is not a valid date
    """
    return datetime.strptime(value, "%Y-%m-%d").date()


def add_metadata_columns(
    df: DataFrame,
    layer: str = "bronze",
    source_file_column: bool = True,
    ingestion_timestamp_column: bool = True,
    processing_timestamp_column: bool = True,
    layer_column: bool = True,
) -> DataFrame:
    """
    Add ingestion metadata columns to a DataFrame.

    Args:
        df: Spark DataFrame
        layer: Data layer (bronze, silver, gold)
        source_file_column: Whether to add source_file column
        ingestion_timestamp_column: Whether to add ingestion_timestamp column
        processing_timestamp_column: Whether to add processing_timestamp column
        layer_column: Whether to add layer column

    Returns:
        DataFrame: DataFrame with metadata columns added
    """
    result_df = df

    if source_file_column:
        result_df = result_df.withColumn("source_file", input_file_name())

    now = current_timestamp()

    if ingestion_timestamp_column:
        result_df = result_df.withColumn("ingestion_timestamp", now)

    if processing_timestamp_column:
        result_df = result_df.withColumn("processing_timestamp", now)

    if layer_column:
        result_df = result_df.withColumn("layer", lit(layer))

    return result_df


def add_processing_date(df: DataFrame, processing_date: date) -> DataFrame:
    """Stamp a silver DataFrame with the run's processing date."""
    return df.withColumn("dwh_processing_date", lit(processing_date))


def validate_schema(
    df: DataFrame,
    expected_schema: StructType,
    strict: bool = False,
) -> Tuple[bool, Optional[str], DataFrame]:
    """
    Validate the schema of a DataFrame against an expected schema.

    Args:
        df: Spark DataFrame to validate
        expected_schema: Expected schema
        strict: Whether to require exact schema match (True) or allow additional columns (False)

    Returns:
        Tuple[bool, Optional[str], DataFrame]:
            - Success flag
            - Error message (if any)
            - DataFrame with the expected schema (if successful) or original DataFrame (if failed)
    """
    if not SCHEMA_VALIDATION:
        return True, None, df

    actual_fields = {field.name: field for field in df.schema.fields}
    expected_fields = {field.name: field for field in expected_schema.fields}

    missing_fields = [name for name in expected_fields if name not in actual_fields]
    if missing_fields:
        error_msg = f"Missing fields in schema: {', '.join(missing_fields)}"
        logger.error(error_msg)
        return False, error_msg, df

    extra_fields = [name for name in actual_fields if name not in expected_fields]
    if strict and extra_fields:
        error_msg = f"Extra fields in schema: {', '.join(extra_fields)}"
        logger.error(error_msg)
        return False, error_msg, df

    type_mismatches = []
    for field_name, expected_field in expected_fields.items():
        actual_field = actual_fields[field_name]
        if actual_field.dataType != expected_field.dataType:
            type_mismatches.append(
                f"{field_name}: expected {expected_field.dataType}, got {actual_field.dataType}"
            )

    if type_mismatches:
        error_msg = f"Schema type mismatches: {', '.join(type_mismatches)}"
        logger.error(error_msg)
        return False, error_msg, df

    # Strict mode also fixes the column order
    if strict:
        return True, None, df.select(*[col(f.name) for f in expected_schema.fields])

    return True, None, df


def conform_to_schema(df: DataFrame, expected_schema: StructType) -> DataFrame:
    """
    Validate a built DataFrame strictly and return it in schema column order.

    The column order is applied even when schema validation is disabled.

    Raises:
        SchemaValidationError: If the DataFrame does not match the schema
    """
    success, error_msg, validated_df = validate_schema(df, expected_schema, strict=True)
    if not success:
        raise SchemaValidationError(f"Schema validation failed: {error_msg}")
    return validated_df.select(*[col(f.name) for f in expected_schema.fields])


def read_layer_table(
    spark: SparkSession,
    layer: str,
    table_name: str,
    base_uri: Optional[str] = None,
) -> DataFrame:
    """
    Read a bronze, silver or gold table by name.

    Args:
        spark: Spark session
        layer: Data layer (bronze, silver, gold)
        table_name: Table name within the layer
        base_uri: Warehouse root. If None, uses the default from config.

    Returns:
        DataFrame: The table contents
    """
    table_uri = get_table_uri(layer, table_name, base_uri)
    logger.info(f"Reading {layer}.{table_name} from {table_uri}")
    return read_delta_table(spark, table_uri)


def write_layer_table(
    df: DataFrame,
    layer: str,
    table_name: str,
    base_uri: Optional[str] = None,
    z_order_by: Optional[str] = None,
) -> None:
    """
    Replace a bronze, silver or gold table with the contents of a DataFrame.

    Args:
        df: DataFrame to write
        layer: Data layer (bronze, silver, gold)
        table_name: Table name within the layer
        base_uri: Warehouse root. If None, uses the default from config.
        z_order_by: Optional column to Z-order by after the write

    Returns:
        None
    """
    table_uri = get_table_uri(layer, table_name, base_uri)
    logger.info(f"Writing {layer}.{table_name} to {table_uri}")
    write_delta_table(
        df=df,
        table_uri=table_uri,
        mode="overwrite",
        partition_by=None,
        z_order_by=z_order_by,
    )


def register_layer_table(
    spark: SparkSession,
    layer: str,
    table_name: str,
    description: str,
    base_uri: Optional[str] = None,
    columns_description: Optional[Dict[str, str]] = None,
) -> bool:
    """
    Register a layer table in the Glue Data Catalog when catalog registration is enabled.

    Returns:
        bool: True if the table was registered or registration is disabled
    """
    if not REGISTER_CATALOG:
        logger.info(f"Catalog registration disabled, skipping {layer}.{table_name}")
        return True

    success = register_delta_table(
        spark=spark,
        table_name=table_name,
        table_uri=get_table_uri(layer, table_name, base_uri),
        database_name=None,
        description=description,
        layer=layer,
        columns_description=columns_description,
    )
    if not success:
        logger.error(f"Failed to register {layer}.{table_name} in Glue Data Catalog")
    return success


def build_argument_parser(description: str) -> argparse.ArgumentParser:
    """
    Build the command line parser shared by all ETL entry points.

    Args:
        description: Description shown in --help

    Returns:
        argparse.ArgumentParser: Parser with --date, --warehouse-root and --bucket-name
    """
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--date",
        type=str,
        default=datetime.now().strftime("%Y-%m-%d"),
        help="Processing date (YYYY-MM-DD)",
    )
    parser.add_argument(
        "--warehouse-root",
        type=str,
        default=None,
        help=f"Warehouse root URI or local path (default: {WAREHOUSE_ROOT})",
    )
    parser.add_argument(
        "--bucket-name",
        type=str,
        default=None,
        help="S3 bucket name; shorthand for --warehouse-root s3a://BUCKET",
    )
    return parser


def resolve_warehouse_root(
    warehouse_root: Optional[str] = None, bucket_name: Optional[str] = None
) -> str:
    """Pick the warehouse root from --warehouse-root, then --bucket-name, then config."""
    if warehouse_root:
        return warehouse_root
    if bucket_name:
        return f"s3a://{bucket_name}"
    return WAREHOUSE_ROOT
