"""
Modelos de movimientos de inventario (entradas, devoluciones y ventas)
"""
from datetime import datetime
from typing import Optional

from pydantic import field_validator

from .base import BaseSchema


class EntradaMercancia(BaseSchema):
    """Ingreso de mercancía registrado en el backend"""

    id: Optional[int] = None
    tipo: str
    zapato_id: Optional[int] = None
    ropa_nombre: Optional[str] = None
    ropa_color: Optional[str] = None
    bolso_id: Optional[str] = None
    talla: Optional[str] = None
    cantidad: int
    usuario_id: Optional[int] = None
    fecha: Optional[datetime] = None

    @field_validator("talla", "bolso_id", mode="before")
    @classmethod
    def como_texto(cls, v):
        return None if v is None else str(v)


class Devolucion(BaseSchema):
    """Devolución registrada (producto recibido vs. entregados)"""

    id: Optional[int] = None
    fecha: Optional[datetime] = None
    tipo: Optional[str] = None
    usuario_id: Optional[int] = None
    producto_recibido: Optional[str] = None
    color_recibido: Optional[str] = None
    talla_recibida: Optional[str] = None
    precio_recibido: Optional[float] = None
    producto_entregado: Optional[str] = None
    color_entregado: Optional[str] = None
    talla_entregada: Optional[str] = None
    precio_entregado: Optional[float] = None
    diferencia_pago: Optional[float] = None
    observaciones: Optional[str] = None

    @field_validator("producto_recibido", "talla_recibida",
                     "producto_entregado", "talla_entregada", mode="before")
    @classmethod
    def como_texto(cls, v):
        return None if v is None else str(v)


class Venta(BaseSchema):
    """Venta de una unidad (zapato, prenda o bolso)"""

    id: Optional[int] = None
    fecha: Optional[datetime] = None
    tipo: Optional[str] = None
    precio: Optional[float] = None
    total: Optional[float] = None
    usuario_id: Optional[int] = None
    zapato_id: Optional[int] = None
    nombre_producto: Optional[str] = None
    color: Optional[str] = None
    bolso_id: Optional[str] = None
    talla: Optional[str] = None
    observaciones: Optional[str] = None

    @field_validator("talla", "bolso_id", mode="before")
    @classmethod
    def como_texto(cls, v):
        return None if v is None else str(v)
