"""
Tests for Silver CRM Sales ETL.

This module contains tests for the Silver CRM Sales ETL process, covering
date repair and the sales measure correction.
"""

import sys
import unittest
from datetime import date
from pathlib import Path
from unittest.mock import patch, MagicMock

from pyspark.sql import SparkSession
from pyspark.sql.functions import col
from pyspark.sql.types import IntegerType, StructField, StructType

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from etl.silver.crm_sales_etl import (
    parse_sales_date,
    correct_sales_measures,
    transform_sales,
    build_silver_sales,
    main,
)
from etl.common.schemas import (
    RAW_CRM_SALES_DETAILS_SCHEMA,
    SILVER_CRM_SALES_DETAILS_SCHEMA,
)

PROCESSING_DATE = date(2024, 1, 15)

MEASURES_SCHEMA = StructType(
    [
        StructField("sales", IntegerType(), True),
        StructField("quantity", IntegerType(), True),
        StructField("price", IntegerType(), True),
    ]
)


class TestSilverCrmSalesETL(unittest.TestCase):
    """Test cases for Silver CRM Sales ETL."""

    @classmethod
    def setUpClass(cls):
        """Set up test fixtures."""
        cls.spark = (
            SparkSession.builder.appName("test_silver_crm_sales_etl")
            .master("local[1]")
            .config("spark.sql.ansi.enabled", "false")
            .config("spark.sql.legacy.timeParserPolicy", "CORRECTED")
            .config("spark.sql.session.timeZone", "UTC")
            .getOrCreate()
        )

        data = [
            ("SO43697", "BK-R93R-62", 21768, 20101229, 20110105, 20110110, 3578, 1, 3578),
            ("SO43698", "BK-M82S-44", 28389, 0, 20110105, 20110110, None, 3, -10),
            ("SO43699", "BK-M82S-44", 25863, 2010122, 20110105, 20110110, 90, 2, 50),
        ]
        cls.bronze_df = cls.spark.createDataFrame(data, RAW_CRM_SALES_DETAILS_SCHEMA)

    def _correct(self, sales, quantity, price):
        df = self.spark.createDataFrame([(sales, quantity, price)], MEASURES_SCHEMA)
        corrected_sales, corrected_price = correct_sales_measures(
            col("sales"), col("quantity"), col("price")
        )
        row = df.select(
            corrected_sales.alias("sales"), col("quantity"), corrected_price.alias("price")
        ).first()
        return row["sales"], row["quantity"], row["price"]

    def test_parse_sales_date(self):
        """Test converting YYYYMMDD integers to dates."""
        schema = StructType([StructField("value", IntegerType(), True)])
        values = [20101229, 0, 2010122, 20230231, 20600101, 18991231, None]
        df = self.spark.createDataFrame([(v,) for v in values], schema)

        parsed = [row["parsed"] for row in df.select(parse_sales_date(col("value")).alias("parsed")).collect()]

        self.assertEqual(parsed[0], date(2010, 12, 29))
        self.assertEqual(parsed[1:], [None] * 6)

    def test_correct_missing_sales_and_negative_price(self):
        """Test that sales is recomputed first and price derived from it."""
        self.assertEqual(self._correct(None, 3, -10), (30, 3, 10))

    def test_consistent_measures_unchanged(self):
        """Test that a consistent line is left alone."""
        self.assertEqual(self._correct(100, 2, 50), (100, 2, 50))

    def test_inconsistent_sales_recomputed(self):
        """Test that sales != quantity * price is recomputed from the price."""
        self.assertEqual(self._correct(90, 2, 50), (100, 2, 50))

    def test_missing_price_derived_from_sales(self):
        """Test that a missing price is derived with integer division."""
        self.assertEqual(self._correct(40, 2, None), (40, 2, 20))
        self.assertEqual(self._correct(25, 2, None), (25, 2, 12))

    def test_unrecoverable_measures_stay_null(self):
        """Test that non-positive sales without a price cannot be repaired."""
        self.assertEqual(self._correct(-40, 2, None), (None, 2, None))

    def test_transform_sales(self):
        """Test the full transform against the silver schema."""
        result_df = transform_sales(self.bronze_df, PROCESSING_DATE)
        rows = {row["sls_ord_num"]: row for row in result_df.collect()}

        self.assertEqual(
            result_df.dtypes,
            [(f.name, f.dataType.simpleString()) for f in SILVER_CRM_SALES_DETAILS_SCHEMA],
        )

        self.assertEqual(rows["SO43697"]["sls_order_dt"], date(2010, 12, 29))
        self.assertEqual(rows["SO43697"]["sls_ship_dt"], date(2011, 1, 5))
        self.assertEqual(rows["SO43697"]["sls_sales"], 3578)

        self.assertIsNone(rows["SO43698"]["sls_order_dt"])
        self.assertEqual(rows["SO43698"]["sls_sales"], 30)
        self.assertEqual(rows["SO43698"]["sls_quantity"], 3)
        self.assertEqual(rows["SO43698"]["sls_price"], 10)

        self.assertIsNone(rows["SO43699"]["sls_order_dt"])
        self.assertEqual(rows["SO43699"]["sls_sales"], 100)

        self.assertEqual(rows["SO43699"]["dwh_processing_date"], PROCESSING_DATE)

    def test_transform_sales_invariant(self):
        """Test sales == quantity * price for every repaired line."""
        result_df = transform_sales(self.bronze_df, PROCESSING_DATE)

        for row in result_df.collect():
            self.assertEqual(row["sls_sales"], row["sls_quantity"] * row["sls_price"])
            self.assertGreater(row["sls_price"], 0)

    @patch("etl.silver.crm_sales_etl.register_layer_table")
    @patch("etl.silver.crm_sales_etl.write_layer_table")
    @patch("etl.silver.crm_sales_etl.read_layer_table")
    def test_build_silver_sales(self, mock_read, mock_write, mock_register):
        """Test rebuilding the silver table from bronze."""
        mock_read.return_value = self.bronze_df
        mock_register.return_value = True

        row_count = build_silver_sales(self.spark, PROCESSING_DATE, "/tmp/warehouse")

        self.assertEqual(row_count, 3)
        mock_read.assert_called_once_with(
            self.spark, "bronze", "crm_sales_details", "/tmp/warehouse"
        )
        mock_write.assert_called_once()

    @patch("etl.silver.crm_sales_etl.create_spark_session")
    @patch("etl.silver.crm_sales_etl.build_silver_sales")
    def test_main_success(self, mock_build, mock_create_spark):
        """Test main function success case."""
        mock_spark = MagicMock()
        mock_create_spark.return_value = mock_spark

        self.assertEqual(main("2024-01-15", "/tmp/warehouse"), 0)
        mock_build.assert_called_once_with(mock_spark, PROCESSING_DATE, "/tmp/warehouse")

    @patch("etl.silver.crm_sales_etl.create_spark_session")
    @patch("etl.silver.crm_sales_etl.build_silver_sales")
    def test_main_failure(self, mock_build, mock_create_spark):
        """Test main function failure case."""
        mock_create_spark.return_value = MagicMock()
        mock_build.side_effect = Exception("Test error")

        self.assertEqual(main("2024-01-15", "/tmp/warehouse"), 1)


if __name__ == "__main__":
    unittest.main()
