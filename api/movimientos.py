"""
Entradas de mercancía, devoluciones y ventas
"""
from datetime import date
from typing import Any, Dict, List, Optional, Union
import logging

from models.movimientos import Devolucion, EntradaMercancia, Venta
from .client import ApiClient

logger = logging.getLogger(__name__)

Fecha = Union[date, str]


def _iso(valor: Fecha) -> str:
    return valor.isoformat() if isinstance(valor, date) else str(valor)


class EntradasService:
    """POST /entradas, GET /entradas/rango-fechas"""

    def __init__(self, client: ApiClient):
        self.client = client

    def create(self, payload: Dict[str, Any]) -> EntradaMercancia:
        data = self.client.post("/entradas", payload)
        return EntradaMercancia.model_validate(data if data else payload)

    def by_date_range(self, start: Fecha, end: Fecha) -> List[EntradaMercancia]:
        data = self.client.get("/entradas/rango-fechas",
                               {"start": _iso(start), "end": _iso(end)}) or []
        return [EntradaMercancia.model_validate(d) for d in data]


class DevolucionesService:
    """POST /devoluciones, GET /devoluciones/rango-fechas"""

    def __init__(self, client: ApiClient):
        self.client = client

    def create(self, payload: Dict[str, Any]) -> Devolucion:
        data = self.client.post("/devoluciones", payload)
        return Devolucion.model_validate(data if data else payload)

    def by_date_range(self, start: Fecha, end: Fecha) -> List[Devolucion]:
        data = self.client.get("/devoluciones/rango-fechas",
                               {"start": _iso(start), "end": _iso(end)}) or []
        return [Devolucion.model_validate(d) for d in data]


class VentasService:
    """CRUD de /ventas, rango de fechas y ganancias"""

    def __init__(self, client: ApiClient):
        self.client = client

    def create(self, payload: Dict[str, Any]) -> Venta:
        data = self.client.post("/ventas", payload)
        return Venta.model_validate(data if data else payload)

    def listar(self) -> List[Venta]:
        return [Venta.model_validate(d) for d in self.client.get("/ventas") or []]

    def by_date_range(self, start: Fecha, end: Fecha) -> List[Venta]:
        data = self.client.get("/ventas/rango-fechas",
                               {"start": _iso(start), "end": _iso(end)}) or []
        return [Venta.model_validate(d) for d in data]

    def ganancias(self, start: Optional[Fecha] = None, end: Optional[Fecha] = None) -> float:
        """Total vendido; sin fechas es el total histórico"""
        params = {"start": _iso(start) if start else None,
                  "end": _iso(end) if end else None}
        data = self.client.get("/ventas/ganancias", params) or {}
        return float(data.get("total") or 0)

    def update(self, venta_id: int, payload: Dict[str, Any]) -> Venta:
        data = self.client.patch(f"/ventas/{int(venta_id)}", payload)
        return Venta.model_validate(data if data else {"id": venta_id, **payload})
