"""Procesadores de datos del catálogo"""
from .catalogo_processor import CatalogoProcessor, COLUMNAS

__all__ = [
    'CatalogoProcessor',
    'COLUMNAS'
]
