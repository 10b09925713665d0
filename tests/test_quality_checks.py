"""
Unit tests for the gold release-gate checks and the silver detection queries.
Each check is run on small local DataFrames through the spark_session fixture.
"""

import sys
from datetime import date
from pathlib import Path

import pytest
from pyspark.sql.types import IntegerType, StringType, StructField, StructType

# Add the project root to the Python path
sys.path.append(str(Path(__file__).resolve().parents[1]))

from etl.quality.gold_checks import (
    find_duplicate_surrogate_keys,
    find_orphaned_facts,
    run_gold_checks,
)
from etl.quality.silver_checks import (
    find_customer_id_issues,
    find_untrimmed_values,
    find_invalid_product_costs,
    find_invalid_product_date_ranges,
    find_unknown_categories,
    find_invalid_sales_dates,
    find_invalid_order_date_sequence,
    find_inconsistent_sales_measures,
    find_out_of_range_birthdates,
    find_duplicate_keys,
)
from etl.silver.erp_customers_etl import transform_erp_customers
from etl.silver.erp_locations_etl import transform_erp_locations
from etl.common.schemas import (
    RAW_CRM_CUST_INFO_SCHEMA,
    RAW_CRM_SALES_DETAILS_SCHEMA,
    RAW_ERP_CUST_AZ12_SCHEMA,
    RAW_ERP_LOC_A101_SCHEMA,
    SILVER_CRM_PRD_INFO_SCHEMA,
    SILVER_CRM_SALES_DETAILS_SCHEMA,
    SILVER_ERP_CUST_AZ12_SCHEMA,
    SILVER_ERP_PX_CAT_G1V2_SCHEMA,
)

PD = date(2024, 1, 15)

KEY_SCHEMA = StructType([StructField("customer_key", IntegerType(), True)])
FACT_SCHEMA = StructType(
    [
        StructField("order_number", StringType(), True),
        StructField("customer_key", IntegerType(), True),
    ]
)


@pytest.fixture
def dim_customers(spark_session):
    return spark_session.createDataFrame([(1,), (2,), (3,)], KEY_SCHEMA)


# --- Gold checks ---

def test_no_duplicate_surrogate_keys(dim_customers):
    assert find_duplicate_surrogate_keys(dim_customers, "customer_key").count() == 0


def test_duplicate_surrogate_keys_reported(spark_session):
    dim_df = spark_session.createDataFrame([(1,), (2,), (2,), (2,)], KEY_SCHEMA)

    rows = find_duplicate_surrogate_keys(dim_df, "customer_key").collect()

    assert len(rows) == 1
    assert rows[0]["customer_key"] == 2
    assert rows[0]["duplicate_count"] == 3


def test_orphaned_facts_include_unknown_and_null_keys(spark_session, dim_customers):
    fact_df = spark_session.createDataFrame(
        [("SO1", 1), ("SO2", 3), ("SO3", 7), ("SO4", None)], FACT_SCHEMA
    )

    orphans = sorted(row["order_number"] for row in find_orphaned_facts(fact_df, dim_customers, "customer_key").collect())

    assert orphans == ["SO3", "SO4"]


def test_run_gold_checks_names(spark_session, dim_customers):
    dim_products = spark_session.createDataFrame(
        [(1,)], StructType([StructField("product_key", IntegerType(), True)])
    )
    fact_df = spark_session.createDataFrame(
        [("SO1", 1, 1)],
        StructType(
            [
                StructField("order_number", StringType(), True),
                StructField("customer_key", IntegerType(), True),
                StructField("product_key", IntegerType(), True),
            ]
        ),
    )

    checks = run_gold_checks(dim_customers, dim_products, fact_df)

    assert sorted(checks) == [
        "dim_customers_duplicate_keys",
        "dim_products_duplicate_keys",
        "fact_sales_orphaned_customers",
        "fact_sales_orphaned_products",
    ]
    assert all(df.count() == 0 for df in checks.values())


# --- Silver checks ---

def test_find_customer_id_issues(spark_session):
    df = spark_session.createDataFrame(
        [
            (101, "AW101", "A", "B", "S", "M", date(2020, 1, 1)),
            (101, "AW101", "A", "B", "S", "M", date(2021, 1, 1)),
            (102, "AW102", "A", "B", "S", "M", date(2021, 1, 1)),
            (None, "AW103", "A", "B", "S", "M", date(2021, 1, 1)),
        ],
        RAW_CRM_CUST_INFO_SCHEMA,
    )

    ids = sorted(find_customer_id_issues(df).collect(), key=lambda r: r["cst_id"] or 0)

    assert [row["cst_id"] for row in ids] == [None, 101]


def test_find_untrimmed_values(spark_session):
    df = spark_session.createDataFrame(
        [("AC_BR", "Accessories", "Bike Racks", "Yes", PD), ("AC_HE", "Accessories ", "Helmets", "Yes", PD)],
        SILVER_ERP_PX_CAT_G1V2_SCHEMA,
    )

    rows = find_untrimmed_values(df, ["cat", "subcat", "maintenance"]).collect()

    assert [row["id"] for row in rows] == ["AC_HE"]


def test_product_checks(spark_session):
    products = spark_session.createDataFrame(
        [
            (1, "AC_HE", "HL-1", "Helmet", -3, "Road", date(2012, 1, 1), None, PD),
            (2, "AC_HE", "HL-2", "Helmet", 5, "Road", date(2012, 1, 1), date(2011, 1, 1), PD),
            (3, "XX_YY", "HL-3", "Helmet", 5, "Road", date(2012, 1, 1), None, PD),
        ],
        SILVER_CRM_PRD_INFO_SCHEMA,
    )
    categories = spark_session.createDataFrame(
        [("AC_HE", "Accessories", "Helmets", "No", PD)], SILVER_ERP_PX_CAT_G1V2_SCHEMA
    )

    assert [r["prd_id"] for r in find_invalid_product_costs(products).collect()] == [1]
    assert [r["prd_id"] for r in find_invalid_product_date_ranges(products).collect()] == [2]
    assert [r["prd_id"] for r in find_unknown_categories(products, categories).collect()] == [3]


def test_find_invalid_sales_dates(spark_session):
    df = spark_session.createDataFrame(
        [
            ("SO1", "P", 1, 20101229, 20110105, 20110110, 10, 1, 10),
            ("SO2", "P", 1, 0, 20110105, 20110110, 10, 1, 10),
            ("SO3", "P", 1, 20101229, 2011010, 20110110, 10, 1, 10),
            ("SO4", "P", 1, 20101229, 20110105, 20600110, 10, 1, 10),
            ("SO5", "P", 1, 20101229, 20110105, -5, 10, 1, 10),
        ],
        RAW_CRM_SALES_DETAILS_SCHEMA,
    )

    rows = sorted(row["sls_ord_num"] for row in find_invalid_sales_dates(df).collect())

    assert rows == ["SO2", "SO3", "SO4", "SO5"]


def test_sales_checks(spark_session):
    df = spark_session.createDataFrame(
        [
            ("SO1", "P", 1, date(2011, 1, 1), date(2011, 1, 8), date(2011, 1, 13), 20, 2, 10, PD),
            ("SO2", "P", 1, date(2011, 1, 9), date(2011, 1, 8), date(2011, 1, 13), 20, 2, 10, PD),
            ("SO3", "P", 1, date(2011, 1, 1), date(2011, 1, 8), date(2011, 1, 13), 25, 2, 10, PD),
            ("SO4", "P", 1, date(2011, 1, 1), date(2011, 1, 8), date(2011, 1, 13), None, 2, 10, PD),
        ],
        SILVER_CRM_SALES_DETAILS_SCHEMA,
    )

    sequence = [r["sls_ord_num"] for r in find_invalid_order_date_sequence(df).collect()]
    measures = sorted(r["sls_ord_num"] for r in find_inconsistent_sales_measures(df).collect())

    assert sequence == ["SO2"]
    assert measures == ["SO3", "SO4"]


def test_find_out_of_range_birthdates(spark_session):
    df = spark_session.createDataFrame(
        [
            ("AW1", date(1923, 12, 31), "Male", PD),
            ("AW2", date(1924, 1, 1), "Male", PD),
            ("AW3", date(2024, 1, 16), "Male", PD),
            ("AW4", None, "Male", PD),
        ],
        SILVER_ERP_CUST_AZ12_SCHEMA,
    )

    rows = sorted(row["cid"] for row in find_out_of_range_birthdates(df, PD).collect())

    assert rows == ["AW1", "AW3"]


def test_find_duplicate_keys_after_normalization(spark_session):
    customers = spark_session.createDataFrame(
        [
            ("NASAW00011000", date(1971, 10, 6), "Male"),
            ("AW00011000", date(1971, 10, 6), "Male"),
            ("AW00011001", date(1976, 5, 10), "Female"),
        ],
        RAW_ERP_CUST_AZ12_SCHEMA,
    )
    locations = spark_session.createDataFrame(
        [("AW-00011000", "Australia"), ("AW00011000", "Australia"), ("AW-00011001", "DE")],
        RAW_ERP_LOC_A101_SCHEMA,
    )

    customer_dups = find_duplicate_keys(transform_erp_customers(customers, PD), "cid").collect()
    location_dups = find_duplicate_keys(transform_erp_locations(locations, PD), "cid").collect()

    assert [(r["cid"], r["row_count"]) for r in customer_dups] == [("AW00011000", 2)]
    assert [(r["cid"], r["row_count"]) for r in location_dups] == [("AW00011000", 2)]


def test_find_duplicate_keys_none(spark_session):
    df = spark_session.createDataFrame(
        [("AW1", None, "Male", PD), ("AW2", None, "Female", PD)], SILVER_ERP_CUST_AZ12_SCHEMA
    )

    assert find_duplicate_keys(df, "cid").count() == 0
