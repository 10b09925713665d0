"""
Data quality checks for the sales data warehouse.

This package contains the gold release-gate checks (surrogate key uniqueness
and fact-to-dimension referential integrity), the silver detection queries
and the runner that executes them after a refresh.
"""
