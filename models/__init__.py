"""Modelos del catálogo"""
from .catalogo import (
    TallaStock,
    Producto,
    ProductoConTallas,
    Zapato,
    Ropa,
    Bolso,
    formato_precio
)
from .movimientos import EntradaMercancia, Devolucion, Venta

__all__ = [
    'EntradaMercancia',
    'Devolucion',
    'Venta',
    'TallaStock',
    'Producto',
    'ProductoConTallas',
    'Zapato',
    'Ropa',
    'Bolso',
    'formato_precio'
]
