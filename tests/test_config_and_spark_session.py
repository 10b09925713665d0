"""
Tests for the configuration settings and the Spark session utilities.
"""

import sys
import unittest
from datetime import date
from pathlib import Path
from unittest.mock import MagicMock, patch

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from config import (
    BIRTHDATE_FLOOR,
    S3_PREFIX_STRUCTURE,
    SALES_DATE_MAX,
    SALES_DATE_MIN,
    SOURCE_FILES,
    get_all_settings,
    get_prefix,
    get_table_uri,
)
from etl.common.spark_session import read_delta_table, write_delta_table


class TestSettings(unittest.TestCase):
    """Test cases for config/settings.py."""

    def test_business_constants(self):
        """Test the default business rule constants."""
        self.assertEqual(SALES_DATE_MIN, 19000101)
        self.assertEqual(SALES_DATE_MAX, 20500101)
        self.assertEqual(BIRTHDATE_FLOOR, date(1924, 1, 1))

    def test_every_source_has_bronze_and_silver_tables(self):
        """Test that the six sources map onto bronze and silver prefixes."""
        self.assertEqual(len(SOURCE_FILES), 6)
        for table_name, source in SOURCE_FILES.items():
            self.assertIn(source["system"], S3_PREFIX_STRUCTURE["raw"])
            self.assertIn(table_name, S3_PREFIX_STRUCTURE["bronze"])
            self.assertIn(table_name, S3_PREFIX_STRUCTURE["silver"])

    def test_get_prefix(self):
        """Test prefix lookup."""
        self.assertEqual(get_prefix("gold", "fact_sales"), "gold/fact_sales/")
        with self.assertRaises(KeyError):
            get_prefix("gold", "unknown")

    def test_get_table_uri(self):
        """Test table URI construction."""
        self.assertEqual(
            get_table_uri("silver", "erp_loc_a101", "/tmp/warehouse/"),
            "/tmp/warehouse/silver/erp_loc_a101/",
        )

    def test_get_all_settings(self):
        """Test that all settings are exposed."""
        settings = get_all_settings()
        self.assertIn("WAREHOUSE_ROOT", settings)
        self.assertIn("REGISTER_CATALOG", settings)


class TestSparkSession(unittest.TestCase):
    """Test cases for etl/common/spark_session.py Delta helpers."""

    def test_read_delta_table(self):
        """Test reading a Delta table by URI."""
        spark = MagicMock()

        read_delta_table(spark, "/tmp/warehouse/gold/fact_sales/")

        spark.read.format.assert_called_once_with("delta")
        spark.read.format.return_value.load.assert_called_once_with(
            "/tmp/warehouse/gold/fact_sales/"
        )

    def test_write_delta_table_overwrite_and_zorder(self):
        """Test an overwrite followed by Z-ordering."""
        df = MagicMock()
        writer = df.write.format.return_value.mode.return_value.option.return_value
        writer.option.return_value = writer

        write_delta_table(df, "/tmp/t", z_order_by="customer_key", table_properties={})

        df.write.format.assert_called_once_with("delta")
        df.write.format.return_value.mode.assert_called_once_with("overwrite")
        writer.save.assert_called_once_with("/tmp/t")
        df.sparkSession.sql.assert_called_once_with(
            "OPTIMIZE delta.`/tmp/t` ZORDER BY (customer_key)"
        )

    def test_write_delta_table_failure(self):
        """Test that write errors propagate."""
        df = MagicMock()
        df.write.format.side_effect = Exception("Test error")

        with self.assertRaises(Exception):
            write_delta_table(df, "/tmp/t")

    @patch("etl.common.spark_session.SparkSession")
    def test_create_spark_session_without_delta(self, mock_spark_session):
        """Test the SQL settings applied to every session."""
        from etl.common.spark_session import create_spark_session

        builder = mock_spark_session.builder.appName.return_value.master.return_value
        builder.config.return_value = builder

        create_spark_session("test_app", enable_delta=False)

        configs = {args[0]: args[1] for args, _ in builder.config.call_args_list}
        self.assertEqual(configs["spark.sql.ansi.enabled"], "false")
        self.assertEqual(configs["spark.sql.session.timeZone"], "UTC")
        self.assertNotIn("spark.sql.extensions", configs)
        builder.getOrCreate.assert_called_once()


if __name__ == "__main__":
    unittest.main()
