"""
Silver layer ETL processes for the sales data warehouse.

This package contains ETL processes for the silver layer, which cleans and
standardizes the bronze tables: deduplication, code standardization, date
repair and sales measure correction.
"""
