"""
Tests for the data quality runner.
"""

import sys
import unittest
from datetime import date
from pathlib import Path
from unittest.mock import patch, MagicMock

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from etl.quality.runner import count_findings, run_quality_checks, main

PD = date(2024, 1, 15)


def _check(rows):
    df = MagicMock()
    df.count.return_value = rows
    return df


class TestQualityRunner(unittest.TestCase):
    """Test cases for the data quality runner."""

    def test_count_findings(self):
        """Test counting the rows of each check."""
        self.assertEqual(count_findings({"a": _check(0), "b": _check(4)}), {"a": 0, "b": 4})

    @patch("etl.quality.runner.run_gold_checks")
    @patch("etl.quality.runner.run_silver_checks")
    @patch("etl.quality.runner.read_layer_table")
    def test_run_quality_checks_passed(self, mock_read, mock_silver, mock_gold):
        """Test that silver findings do not fail the release gate."""
        spark = MagicMock()
        mock_silver.return_value = {"erp_cust_az12_out_of_range_birthdates": _check(17)}
        mock_gold.return_value = {"dim_customers_duplicate_keys": _check(0)}

        report = run_quality_checks(spark, PD, "/tmp/warehouse")

        self.assertTrue(report["passed"])
        self.assertEqual(report["silver"], {"erp_cust_az12_out_of_range_birthdates": 17})
        self.assertEqual(report["gold"], {"dim_customers_duplicate_keys": 0})
        self.assertEqual(report["processing_date"], "2024-01-15")

        layers = {args[1] for args, _ in mock_read.call_args_list}
        self.assertEqual(layers, {"bronze", "silver", "gold"})
        # 2 bronze + 6 silver + 3 gold tables
        self.assertEqual(mock_read.call_count, 11)

    @patch("etl.quality.runner.run_gold_checks")
    @patch("etl.quality.runner.run_silver_checks")
    @patch("etl.quality.runner.read_layer_table")
    def test_run_quality_checks_failed(self, mock_read, mock_silver, mock_gold):
        """Test that any gold violation fails the release gate."""
        mock_silver.return_value = {}
        mock_gold.return_value = {
            "dim_customers_duplicate_keys": _check(0),
            "fact_sales_orphaned_products": _check(2),
        }

        report = run_quality_checks(MagicMock(), PD, "/tmp/warehouse")

        self.assertFalse(report["passed"])

    @patch("etl.quality.runner.create_spark_session")
    @patch("etl.quality.runner.run_quality_checks")
    def test_main_exit_codes(self, mock_run, mock_create_spark):
        """Test main function exit codes for passed, failed and broken runs."""
        mock_create_spark.return_value = MagicMock()

        mock_run.return_value = {"passed": True}
        self.assertEqual(main("2024-01-15", "/tmp/warehouse"), 0)

        mock_run.return_value = {"passed": False}
        self.assertEqual(main("2024-01-15", "/tmp/warehouse"), 1)

        mock_run.side_effect = Exception("Test error")
        self.assertEqual(main("2024-01-15", "/tmp/warehouse"), 1)


if __name__ == "__main__":
    unittest.main()
