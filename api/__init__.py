"""Colaborador HTTP: autenticación, cliente y servicios REST"""
from .auth import AuthContext, decode_jwt_payload
from .client import ApiClient
from .catalogo import (
    CatalogoService,
    find_by_etiqueta,
    find_zapato,
    find_ropa,
    find_bolso
)
from .tallas import RopaTallasGateway, ZapatoTallasGateway, talla_numerica
from .movimientos import EntradasService, DevolucionesService, VentasService

__all__ = [
    'AuthContext',
    'decode_jwt_payload',
    'ApiClient',
    'CatalogoService',
    'find_by_etiqueta',
    'find_zapato',
    'find_ropa',
    'find_bolso',
    'RopaTallasGateway',
    'ZapatoTallasGateway',
    'talla_numerica',
    'EntradasService',
    'DevolucionesService',
    'VentasService'
]
