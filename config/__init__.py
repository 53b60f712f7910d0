"""Configuración: API y constantes de negocio"""
from .api import ApiConfig
from .settings import (
    TALLAS_BASE,
    TALLA_UNICA,
    COPAS_BASE,
    TALLAS_ZAPATO_COMUNES,
    TIPOS_PRODUCTO
)

__all__ = [
    'ApiConfig',
    'TALLAS_BASE',
    'TALLA_UNICA',
    'COPAS_BASE',
    'TALLAS_ZAPATO_COMUNES',
    'TIPOS_PRODUCTO'
]
