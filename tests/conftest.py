# tests/conftest.py
import pytest
from pyspark.sql import SparkSession


@pytest.fixture(scope="session")
def spark_session(tmp_path_factory):
    """
    Creates a standard SparkSession configured for local testing,
    without Delta Lake specific configurations.

    The SQL settings match the ones create_spark_session applies, so the
    cleaning rules behave the same way as in the pipeline.
    """
    # Using tmp_path_factory ensures the warehouse dir is cleaned up after the test session
    warehouse_dir = tmp_path_factory.mktemp("spark_warehouse")
    print(f"Creating SparkSession for unit tests (Warehouse: {warehouse_dir})")

    spark = (
        SparkSession.builder
        .appName("pytest-local-spark-unit-tests")
        .master("local[*]")
        # --- Standard Configurations for Testing ---
        .config("spark.sql.shuffle.partitions", "2")  # Keep low for local testing
        .config("spark.sql.warehouse.dir", str(warehouse_dir))
        .config("spark.driver.memory", "1g")
        .config("spark.ui.showConsoleProgress", "false")
        # --- Same SQL semantics as the pipeline session ---
        .config("spark.sql.ansi.enabled", "false")
        .config("spark.sql.legacy.timeParserPolicy", "CORRECTED")
        .config("spark.sql.session.timeZone", "UTC")
        .getOrCreate()
    )
    spark.sparkContext.setLogLevel("WARN")

    print("SparkSession created.")
    yield spark

    # Teardown: Stop the SparkSession after tests are done
    spark.stop()
    print("SparkSession stopped.")


@pytest.fixture
def data_paths(tmp_path):
    """
    Provides temporary paths using pytest's tmp_path fixture.
    The raw directory mirrors the source_crm/ and source_erp/ layout.
    """
    paths = {
        "raw": tmp_path / "raw",
        "warehouse": tmp_path / "warehouse",
    }
    for path in paths.values():
        path.mkdir(parents=True, exist_ok=True)
    (paths["raw"] / "source_crm").mkdir(exist_ok=True)
    (paths["raw"] / "source_erp").mkdir(exist_ok=True)
    return paths


@pytest.fixture
def create_csv_file(data_paths):
    """Helper fixture to create sample CSV extracts under the temporary 'raw' directory."""
    def _create_csv(relative_path, data, headers):
        # Ensure data is a list of tuples/lists for consistent processing
        if not isinstance(data, list):
            raise TypeError("Input 'data' must be a list of sequences (tuples/lists).")
        if data and not isinstance(data[0], (list, tuple)):
            raise TypeError("Elements inside 'data' must be sequences (tuples/lists).")

        filepath = data_paths["raw"] / relative_path
        with open(filepath, "w", newline="") as f:
            f.write(",".join(map(str, headers)) + "\n")
            for row in data:
                f.write(",".join("" if value is None else str(value) for value in row) + "\n")
        print(f"Created test CSV: {filepath}")
        return str(filepath)
    return _create_csv
