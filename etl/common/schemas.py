"""
Schema definitions for the sales data warehouse.

This module contains schema definitions for all data models used in the ETL processes.
It includes schemas for:
- Raw data (CRM and ERP CSV extracts)
- Bronze layer Delta tables
- Silver layer Delta tables
- Gold layer Delta tables (the star schema)

Each schema is defined using PySpark's StructType and StructField classes.
Column descriptions used for catalog registration live next to the schemas.
"""

from pyspark.sql.types import (
    StructType,
    StructField,
    StringType,
    IntegerType,
    TimestampType,
    DateType,
)

BRONZE_METADATA_FIELDS = [
    StructField("source_file", StringType(), True),
    StructField("ingestion_timestamp", TimestampType(), True),
    StructField("processing_timestamp", TimestampType(), True),
    StructField("layer", StringType(), True),
]

SILVER_METADATA_FIELDS = [
    StructField("dwh_processing_date", DateType(), True),
]

# Raw Layer Schemas

RAW_CRM_CUST_INFO_SCHEMA = StructType(
    [
        StructField("cst_id", IntegerType(), True),
        StructField("cst_key", StringType(), True),
        StructField("cst_firstname", StringType(), True),
        StructField("cst_lastname", StringType(), True),
        StructField("cst_marital_status", StringType(), True),
        StructField("cst_gndr", StringType(), True),
        StructField("cst_create_date", DateType(), True),
    ]
)

RAW_CRM_PRD_INFO_SCHEMA = StructType(
    [
        StructField("prd_id", IntegerType(), True),
        StructField("prd_key", StringType(), True),
        StructField("prd_nm", StringType(), True),
        StructField("prd_cost", IntegerType(), True),
        StructField("prd_line", StringType(), True),
        StructField("prd_start_dt", DateType(), True),
        StructField("prd_end_dt", DateType(), True),
    ]
)

RAW_CRM_SALES_DETAILS_SCHEMA = StructType(
    [
        StructField("sls_ord_num", StringType(), True),
        StructField("sls_prd_key", StringType(), True),
        StructField("sls_cust_id", IntegerType(), True),
        StructField("sls_order_dt", IntegerType(), True),
        StructField("sls_ship_dt", IntegerType(), True),
        StructField("sls_due_dt", IntegerType(), True),
        StructField("sls_sales", IntegerType(), True),
        StructField("sls_quantity", IntegerType(), True),
        StructField("sls_price", IntegerType(), True),
    ]
)

RAW_ERP_CUST_AZ12_SCHEMA = StructType(
    [
        StructField("cid", StringType(), True),
        StructField("bdate", DateType(), True),
        StructField("gen", StringType(), True),
    ]
)

RAW_ERP_LOC_A101_SCHEMA = StructType(
    [
        StructField("cid", StringType(), True),
        StructField("cntry", StringType(), True),
    ]
)

RAW_ERP_PX_CAT_G1V2_SCHEMA = StructType(
    [
        StructField("id", StringType(), True),
        StructField("cat", StringType(), True),
        StructField("subcat", StringType(), True),
        StructField("maintenance", StringType(), True),
    ]
)

RAW_SCHEMAS = {
    "crm_cust_info": RAW_CRM_CUST_INFO_SCHEMA,
    "crm_prd_info": RAW_CRM_PRD_INFO_SCHEMA,
    "crm_sales_details": RAW_CRM_SALES_DETAILS_SCHEMA,
    "erp_cust_az12": RAW_ERP_CUST_AZ12_SCHEMA,
    "erp_loc_a101": RAW_ERP_LOC_A101_SCHEMA,
    "erp_px_cat_g1v2": RAW_ERP_PX_CAT_G1V2_SCHEMA,
}

# Bronze Layer Schemas

BRONZE_SCHEMAS = {
    table_name: StructType(list(schema.fields) + BRONZE_METADATA_FIELDS)
    for table_name, schema in RAW_SCHEMAS.items()
}

# Silver Layer Schemas

SILVER_CRM_CUST_INFO_SCHEMA = StructType(
    [
        StructField("cst_id", IntegerType(), True),
        StructField("cst_key", StringType(), True),
        StructField("cst_firstname", StringType(), True),
        StructField("cst_lastname", StringType(), True),
        StructField("cst_marital_status", StringType(), True),
        StructField("cst_gndr", StringType(), True),
        StructField("cst_create_date", DateType(), True),
    ]
    + SILVER_METADATA_FIELDS
)

SILVER_CRM_PRD_INFO_SCHEMA = StructType(
    [
        StructField("prd_id", IntegerType(), True),
        StructField("cat_id", StringType(), True),
        StructField("prd_key", StringType(), True),
        StructField("prd_nm", StringType(), True),
        StructField("prd_cost", IntegerType(), True),
        StructField("prd_line", StringType(), True),
        StructField("prd_start_dt", DateType(), True),
        StructField("prd_end_dt", DateType(), True),
    ]
    + SILVER_METADATA_FIELDS
)

SILVER_CRM_SALES_DETAILS_SCHEMA = StructType(
    [
        StructField("sls_ord_num", StringType(), True),
        StructField("sls_prd_key", StringType(), True),
        StructField("sls_cust_id", IntegerType(), True),
        StructField("sls_order_dt", DateType(), True),
        StructField("sls_ship_dt", DateType(), True),
        StructField("sls_due_dt", DateType(), True),
        StructField("sls_sales", IntegerType(), True),
        StructField("sls_quantity", IntegerType(), True),
        StructField("sls_price", IntegerType(), True),
    ]
    + SILVER_METADATA_FIELDS
)

SILVER_ERP_CUST_AZ12_SCHEMA = StructType(
    list(RAW_ERP_CUST_AZ12_SCHEMA.fields) + SILVER_METADATA_FIELDS
)

SILVER_ERP_LOC_A101_SCHEMA = StructType(
    list(RAW_ERP_LOC_A101_SCHEMA.fields) + SILVER_METADATA_FIELDS
)

SILVER_ERP_PX_CAT_G1V2_SCHEMA = StructType(
    list(RAW_ERP_PX_CAT_G1V2_SCHEMA.fields) + SILVER_METADATA_FIELDS
)

# Gold Layer Schemas

GOLD_DIM_CUSTOMERS_SCHEMA = StructType(
    [
        StructField("customer_key", IntegerType(), True),
        StructField("customer_id", IntegerType(), True),
        StructField("customer_number", StringType(), True),
        StructField("first_name", StringType(), True),
        StructField("last_name", StringType(), True),
        StructField("country", StringType(), True),
        StructField("marital_status", StringType(), True),
        StructField("gender", StringType(), True),
        StructField("birthdate", DateType(), True),
        StructField("create_date", DateType(), True),
    ]
)

GOLD_DIM_PRODUCTS_SCHEMA = StructType(
    [
        StructField("product_key", IntegerType(), True),
        StructField("product_id", IntegerType(), True),
        StructField("product_number", StringType(), True),
        StructField("product_name", StringType(), True),
        StructField("category_id", StringType(), True),
        StructField("category", StringType(), True),
        StructField("subcategory", StringType(), True),
        StructField("maintenance", StringType(), True),
        StructField("cost", IntegerType(), True),
        StructField("product_line", StringType(), True),
        StructField("start_date", DateType(), True),
    ]
)

GOLD_FACT_SALES_SCHEMA = StructType(
    [
        StructField("order_number", StringType(), True),
        StructField("product_key", IntegerType(), True),
        StructField("customer_key", IntegerType(), True),
        StructField("order_date", DateType(), True),
        StructField("shipping_date", DateType(), True),
        StructField("due_date", DateType(), True),
        StructField("sales_amount", IntegerType(), True),
        StructField("quantity", IntegerType(), True),
        StructField("price", IntegerType(), True),
    ]
)

# Column descriptions (data catalog)

GOLD_COLUMN_DESCRIPTIONS = {
    "dim_customers": {
        "customer_key": "Surrogate key, ordered by customer_id",
        "customer_id": "CRM business identifier of the customer",
        "customer_number": "Alphanumeric customer key shared by CRM and ERP",
        "first_name": "Customer first name",
        "last_name": "Customer last name",
        "country": "Country of residence from the ERP location extract",
        "marital_status": "Single, Married or n/a",
        "gender": "Male, Female or n/a (CRM value, ERP fallback)",
        "birthdate": "Birthdate from the ERP demographic extract",
        "create_date": "Date the customer record was created in the CRM",
    },
    "dim_products": {
        "product_key": "Surrogate key, ordered by start_date and product_number",
        "product_id": "CRM business identifier of the product",
        "product_number": "Product key used by sales transactions",
        "product_name": "Product name",
        "category_id": "Category identifier derived from the product key",
        "category": "Top-level product category",
        "subcategory": "Product subcategory",
        "maintenance": "Whether the product needs maintenance",
        "cost": "Product cost",
        "product_line": "Mountain, Road, Other Sales, Touring or n/a",
        "start_date": "Date this product version became active",
    },
    "fact_sales": {
        "order_number": "Sales order number",
        "product_key": "Surrogate key of the product dimension (null when unresolved)",
        "customer_key": "Surrogate key of the customer dimension (null when unresolved)",
        "order_date": "Date the order was placed",
        "shipping_date": "Date the order was shipped",
        "due_date": "Date the order payment was due",
        "sales_amount": "Line amount, quantity times price",
        "quantity": "Units ordered",
        "price": "Unit price",
    },
}
