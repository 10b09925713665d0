"""
Bronze layer ETL processes for the sales data warehouse.

This package contains ETL processes for the bronze layer, which ingests the
CRM and ERP CSV extracts as-is into Delta tables with ingestion metadata.
"""
