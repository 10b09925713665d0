"""
Gold layer ETL processes for the sales data warehouse.

This package contains ETL processes for the gold layer, which models the
cleaned silver tables as a star schema: the customer and product dimensions
and the sales fact table.
"""
