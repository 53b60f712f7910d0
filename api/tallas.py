"""
Gateways de tallas: traducen Create/Update a llamadas REST

    ropa:   POST  /tallas-ropa                 {talla, cantidad, ropa_nombre, ropa_color}
            PATCH /tallas-ropa/{talla}/{nombre} {cantidad, ropa_color}
    zapato: POST  /tallas                      {talla, cantidad, zapato_id}
            PATCH /tallas/{talla}/{zapato_id}  {cantidad}
"""
from typing import Union
from urllib.parse import quote
import logging

from core.errors import BusinessRuleError
from .client import ApiClient

logger = logging.getLogger(__name__)


def talla_numerica(key: str) -> Union[int, float]:
    """
    Talla de zapato como número para el backend

    Ejemplos:
        "38"   → 38
        "38.5" → 38.5
        "38,5" → 38.5
    """
    try:
        valor = float(str(key).replace(",", "."))
    except ValueError:
        raise BusinessRuleError(f"La talla de zapato debe ser numérica: {key!r}",
                                details={"talla": key})
    return int(valor) if valor.is_integer() else valor


def _segmento(valor) -> str:
    return quote(str(valor), safe="")


class RopaTallasGateway:
    """Tallas de una prenda (PK nombre + color)"""

    def __init__(self, client: ApiClient, nombre: str, color: str):
        self.client = client
        self.nombre = nombre
        self.color = color

    def create(self, key: str, quantity: int) -> None:
        self.client.post("/tallas-ropa", {
            "talla": key,
            "cantidad": quantity,
            "ropa_nombre": self.nombre,
            "ropa_color": self.color,
        })

    def update(self, key: str, quantity: int) -> None:
        self.client.patch(
            f"/tallas-ropa/{_segmento(key)}/{_segmento(self.nombre)}",
            {"cantidad": quantity, "ropa_color": self.color}
        )


class ZapatoTallasGateway:
    """Tallas numéricas de un zapato"""

    def __init__(self, client: ApiClient, zapato_id: int):
        self.client = client
        self.zapato_id = zapato_id

    def create(self, key: str, quantity: int) -> None:
        self.client.post("/tallas", {
            "talla": talla_numerica(key),
            "cantidad": quantity,
            "zapato_id": self.zapato_id,
        })

    def update(self, key: str, quantity: int) -> None:
        talla = talla_numerica(key)
        self.client.patch(f"/tallas/{talla}/{self.zapato_id}", {"cantidad": quantity})
