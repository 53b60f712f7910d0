"""Matriz de tallas, reconciliación y editor"""
from .matriz import VariantMatrix, validate_quantity
from .reconciliacion import (
    ReconciliationOperation,
    Create,
    Update,
    TallasGateway,
    ApplyResult,
    diff,
    apply_operations
)
from .editor import TallasEditor, formato_talla_zapato

__all__ = [
    'VariantMatrix',
    'validate_quantity',
    'ReconciliationOperation',
    'Create',
    'Update',
    'TallasGateway',
    'ApplyResult',
    'diff',
    'apply_operations',
    'TallasEditor',
    'formato_talla_zapato'
]
