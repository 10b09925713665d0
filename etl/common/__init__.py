"""
Common utilities for ETL processes.

This package contains common utilities used across the ETL processes,
including Spark session management, table schemas, shared column
transformations and Glue catalog operations.
"""
