#!/usr/bin/env python
"""
Bronze Sources ETL

This script ingests the six CRM and ERP source extracts from the raw zone into
Delta tables in the bronze layer. For each source it:
1. Reads the CSV extract with its declared raw schema
2. Adds metadata columns (source_file, ingestion_timestamp, ...)
3. Replaces the Bronze Delta table
4. Optionally registers the table in the Glue Data Catalog

Values that do not parse against the raw schema are read as null.

Usage:
    python -m etl.bronze.sources_etl [--date YYYY-MM-DD] [--source-root PATH]
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

from pyspark.sql import DataFrame, SparkSession

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[2]))

from etl.common.spark_session import create_spark_session
from etl.common.etl_utils import (
    add_metadata_columns,
    build_argument_parser,
    conform_to_schema,
    register_layer_table,
    resolve_warehouse_root,
    write_layer_table,
)
from etl.common.schemas import BRONZE_SCHEMAS, RAW_SCHEMAS
from config import LOG_LEVEL, LOG_FORMAT, SOURCE_FILES, get_table_uri

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def get_source_path(
    table_name: str,
    base_uri: Optional[str] = None,
    source_root: Optional[str] = None,
) -> str:
    """
    Get the location of the CSV extract feeding a bronze table.

    Args:
        table_name: Bronze table name (e.g. crm_cust_info)
        base_uri: Warehouse root, used when source_root is not given
        source_root: Directory holding source_crm/ and source_erp/ folders

    Returns:
        str: Path or URI of the CSV file
    """
    source = SOURCE_FILES[table_name]
    if source_root:
        return f"{source_root.rstrip('/')}/{source['system']}/{source['file_name']}"
    return f"{get_table_uri('raw', source['system'], base_uri)}{source['file_name']}"


def read_source_data(spark: SparkSession, table_name: str, source_path: str) -> DataFrame:
    """
    Read a CSV extract with the raw schema of its bronze table.

    Args:
        spark: Spark session
        table_name: Bronze table name
        source_path: Path or URI of the CSV file

    Returns:
        DataFrame: Raw source rows
    """
    logger.info(f"Reading {table_name} source data from {source_path}")

    try:
        df = (
            spark.read.format("csv")
            .option("header", "true")
            .option("inferSchema", "false")
            .option("mode", "PERMISSIVE")
            .option("dateFormat", "yyyy-MM-dd")
            .schema(RAW_SCHEMAS[table_name])
            .load(source_path)
        )
        return df
    except Exception as e:
        logger.error(f"Error reading {table_name} source data: {str(e)}")
        raise


def transform_source_data(df: DataFrame, table_name: str) -> DataFrame:
    """
    Add ingestion metadata and conform rows to the bronze schema.

    Args:
        df: Raw source rows
        table_name: Bronze table name

    Returns:
        DataFrame: Bronze rows
    """
    result_df = add_metadata_columns(
        df,
        layer="bronze",
        source_file_column=True,
        ingestion_timestamp_column=True,
        processing_timestamp_column=True,
        layer_column=True,
    )
    return conform_to_schema(result_df, BRONZE_SCHEMAS[table_name])


def ingest_source(
    spark: SparkSession,
    table_name: str,
    base_uri: Optional[str] = None,
    source_root: Optional[str] = None,
) -> int:
    """
    Load one source extract into its bronze table.

    Returns:
        int: Number of rows loaded
    """
    source_path = get_source_path(table_name, base_uri, source_root)
    bronze_df = transform_source_data(
        read_source_data(spark, table_name, source_path), table_name
    )

    write_layer_table(bronze_df, "bronze", table_name, base_uri)
    row_count = bronze_df.count()
    logger.info(f"Loaded {row_count} rows into bronze.{table_name}")

    register_layer_table(
        spark,
        "bronze",
        table_name,
        description=f"Bronze layer mirror of {SOURCE_FILES[table_name]['file_name']}",
        base_uri=base_uri,
    )
    return row_count


def run_bronze_layer(
    spark: SparkSession,
    base_uri: Optional[str] = None,
    source_root: Optional[str] = None,
) -> Dict[str, int]:
    """
    Load every source extract into the bronze layer.

    Returns:
        Dict[str, int]: Rows loaded per bronze table
    """
    row_counts = {}
    for table_name in SOURCE_FILES:
        row_counts[table_name] = ingest_source(spark, table_name, base_uri, source_root)
    return row_counts


def main(date: str, warehouse_root: str, source_root: Optional[str] = None) -> int:
    """
    Main function to run the ETL process.

    Args:
        date: Processing date (YYYY-MM-DD)
        warehouse_root: Warehouse root URI or local path
        source_root: Directory holding the CSV extracts. If None, reads from the raw zone.

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    logger.info(f"Starting Bronze Sources ETL for date: {date}")

    try:
        spark = create_spark_session(app_name=f"bronze_sources_etl_{date}")

        row_counts = run_bronze_layer(spark, warehouse_root, source_root)

        spark.stop()

        logger.info(
            f"Successfully completed Bronze Sources ETL for date: {date} "
            f"({sum(row_counts.values())} rows)"
        )
        return 0
    except Exception as e:
        logger.error(f"Error in Bronze Sources ETL: {str(e)}")
        return 1


if __name__ == "__main__":
    parser = build_argument_parser("Ingest CRM and ERP extracts into the bronze layer")
    parser.add_argument(
        "--source-root",
        type=str,
        default=None,
        help="Local directory with source_crm/ and source_erp/ (default: raw zone)",
    )
    args = parser.parse_args()
    exit_code = main(
        args.date,
        resolve_warehouse_root(args.warehouse_root, args.bucket_name),
        args.source_root,
    )
    sys.exit(exit_code)
