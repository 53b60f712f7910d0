"""Flujos de negocio: devoluciones, ingresos y ventas"""
from .ajustes import AjusteStock, AcumuladorAjustes, resumen_ajustes
from .devoluciones import (
    DevolucionWorkflow,
    ProductoRecibido,
    ItemEntregado,
    MENSAJE_TOTALES
)
from .ingresos import IngresoWorkflow, LineaIngreso
from .ventas import VentaWorkflow

__all__ = [
    'AjusteStock',
    'AcumuladorAjustes',
    'resumen_ajustes',
    'DevolucionWorkflow',
    'ProductoRecibido',
    'ItemEntregado',
    'MENSAJE_TOTALES',
    'IngresoWorkflow',
    'LineaIngreso',
    'VentaWorkflow'
]
