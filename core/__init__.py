"""Funciones compartidas: normalización, tallaje y errores"""
from .normalization import (
    normalize_key,
    normalize_talla,
    strip_all_string_columns,
    clean_nombre
)
from .tallaje import (
    VariantMode,
    infer_mode,
    extract_cups,
    merge_cups,
    keys_for_mode,
    talla_sort_key,
    es_talla_numerica
)
from .errors import (
    InventarioError,
    InvalidQuantityError,
    DuplicateKeyError,
    BusinessRuleError,
    ReconciliationApplyError,
    ApiError
)

__all__ = [
    'normalize_key',
    'normalize_talla',
    'strip_all_string_columns',
    'clean_nombre',
    'VariantMode',
    'infer_mode',
    'extract_cups',
    'merge_cups',
    'keys_for_mode',
    'talla_sort_key',
    'es_talla_numerica',
    'InventarioError',
    'InvalidQuantityError',
    'DuplicateKeyError',
    'BusinessRuleError',
    'ReconciliationApplyError',
    'ApiError'
]
