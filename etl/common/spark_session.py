"""
Spark session utility for the sales data warehouse.

This module provides functions to create and configure Spark sessions with Delta Lake
for the warehouse. It includes:
- Creating a Spark session with appropriate configurations
- Setting up Delta Lake integration
- Reading and writing Delta tables by URI
"""

import logging
from typing import Dict, List, Optional, Union

from pyspark.sql import DataFrame, SparkSession

from config import (
    AWS_REGION,
    DELTA_TABLE_PROPERTIES,
    LOG_LEVEL,
    LOG_FORMAT,
)

# Configure logging
logging.basicConfig(level=getattr(logging, LOG_LEVEL), format=LOG_FORMAT)
logger = logging.getLogger(__name__)


def create_spark_session(
    app_name: str = "Sales Data Warehouse",
    master: str = "local[*]",
    config_props: Optional[Dict[str, str]] = None,
    enable_hive_support: bool = False,
    enable_delta: bool = True,
    log_level: str = "WARN",
) -> SparkSession:
    """
    Create and configure a Spark session with Delta Lake support.

    Args:
        app_name: Name of the Spark application
        master: Spark master URL (local[*] for local mode, yarn for YARN cluster)
        config_props: Additional configuration properties for Spark
        enable_hive_support: Whether to enable Hive support
        enable_delta: Whether to enable Delta Lake support
        log_level: Log level for Spark (WARN, INFO, DEBUG, etc.)

    Returns:
        SparkSession: Configured Spark session
    """
    builder = SparkSession.builder.appName(app_name).master(master)

    default_configs = {
        # Cleaning rules rely on null-on-failure casts and date parsing
        "spark.sql.ansi.enabled": "false",
        "spark.sql.legacy.timeParserPolicy": "CORRECTED",
        "spark.sql.session.timeZone": "UTC",
        "spark.sql.adaptive.enabled": "true",
        "spark.sql.adaptive.coalescePartitions.enabled": "true",
        # AWS configs
        "spark.hadoop.fs.s3a.impl": "org.apache.hadoop.fs.s3a.S3AFileSystem",
        "spark.hadoop.fs.s3a.aws.credentials.provider": "com.amazonaws.auth.DefaultAWSCredentialsProviderChain",
        "spark.hadoop.fs.s3a.endpoint": f"s3.{AWS_REGION}.amazonaws.com",
        "spark.hadoop.fs.s3a.path.style.access": "false",
        "spark.hadoop.fs.s3a.connection.ssl.enabled": "true",
    }

    if enable_delta:
        default_configs.update(
            {
                "spark.sql.extensions": "io.delta.sql.DeltaSparkSessionExtension",
                "spark.sql.catalog.spark_catalog": "org.apache.spark.sql.delta.catalog.DeltaCatalog",
                "spark.databricks.delta.schema.autoMerge.enabled": "false",
            }
        )

    # Add user-provided configs, overriding defaults if needed
    if config_props:
        default_configs.update(config_props)

    for key, value in default_configs.items():
        builder = builder.config(key, value)

    if enable_hive_support:
        builder = builder.enableHiveSupport()

    if enable_delta:
        from delta import configure_spark_with_delta_pip

        builder = configure_spark_with_delta_pip(builder)
        logger.info("Delta Lake support enabled")

    spark = builder.getOrCreate()
    spark.sparkContext.setLogLevel(log_level)

    logger.info(f"Created Spark session with app name: {app_name}")
    return spark


def read_delta_table(spark: SparkSession, table_uri: str) -> DataFrame:
    """
    Read a Delta table.

    Args:
        spark: Spark session
        table_uri: Full URI of the Delta table (s3a://... or a local path)

    Returns:
        DataFrame: Spark DataFrame containing the Delta table data
    """
    try:
        df = spark.read.format("delta").load(table_uri)
        logger.info(f"Successfully read Delta table from {table_uri}")
        return df
    except Exception as e:
        logger.error(f"Failed to read Delta table from {table_uri}: {str(e)}")
        raise


def write_delta_table(
    df: DataFrame,
    table_uri: str,
    mode: str = "overwrite",
    partition_by: Optional[Union[str, List[str]]] = None,
    z_order_by: Optional[Union[str, List[str]]] = None,
    table_properties: Optional[Dict[str, str]] = None,
) -> None:
    """
    Write a DataFrame to a Delta table.

    An overwrite is a single Delta commit, so readers see either the previous
    snapshot or the new one.

    Args:
        df: Spark DataFrame to write
        table_uri: Full URI of the Delta table
        mode: Write mode (overwrite, append, etc.)
        partition_by: Column(s) to partition by
        z_order_by: Column(s) to Z-order by (for optimization)
        table_properties: Additional Delta table properties

    Returns:
        None
    """
    if table_properties is None:
        table_properties = DELTA_TABLE_PROPERTIES

    try:
        writer = (
            df.write.format("delta")
            .mode(mode)
            .option("overwriteSchema", "true")
        )

        if partition_by:
            if isinstance(partition_by, str):
                partition_by = [partition_by]
            writer = writer.partitionBy(*partition_by)

        for key, value in table_properties.items():
            writer = writer.option(key, value)

        writer.save(table_uri)

        if z_order_by:
            if isinstance(z_order_by, str):
                z_order_by = [z_order_by]
            z_order_cols = ", ".join(z_order_by)
            df.sparkSession.sql(
                f"OPTIMIZE delta.`{table_uri}` ZORDER BY ({z_order_cols})"
            )

        logger.info(f"Successfully wrote Delta table to {table_uri}")
    except Exception as e:
        logger.error(f"Failed to write Delta table to {table_uri}: {str(e)}")
        raise
