"""
Column-level transformations shared by the silver layer.

Code standardization follows one pattern everywhere: normalize the raw value,
look it up in a mapping, and fall back to a default when nothing matches.
"""

from typing import Dict, Optional

from pyspark.sql import Column
from pyspark.sql.functions import lit, trim, upper, when

NOT_AVAILABLE = "n/a"


def map_codes(
    column: Column,
    mapping: Dict[str, str],
    default: Optional[Column] = None,
    case_sensitive: bool = False,
) -> Column:
    """
    Map source codes to their standardized values.

    Args:
        column: Raw code column
        mapping: Normalized code -> standardized value. Keys must be upper case
            unless case_sensitive is True.
        default: Value for unmatched codes (and nulls). Defaults to 'n/a'.
        case_sensitive: Compare the trimmed value as is instead of upper-casing it

    Returns:
        Column: The standardized value
    """
    normalized = trim(column) if case_sensitive else upper(trim(column))

    mapping_expr = None
    for code, value in mapping.items():
        if mapping_expr is None:
            mapping_expr = when(normalized == code, lit(value))
        else:
            mapping_expr = mapping_expr.when(normalized == code, lit(value))

    if default is None:
        default = lit(NOT_AVAILABLE)

    if mapping_expr is None:
        return default
    return mapping_expr.otherwise(default)
