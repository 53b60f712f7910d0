"""
Catálogo: consulta, alta y edición de zapatos, ropa y bolsos
"""
from typing import Any, Dict, List, Optional, Sequence, TypeVar
from urllib.parse import quote
import logging

from pydantic import ValidationError

from core.errors import BusinessRuleError, InventarioError
from core.normalization import clean_label
from models.catalogo import Bolso, Producto, Ropa, Zapato
from .client import ApiClient

logger = logging.getLogger(__name__)

P = TypeVar("P", bound=Producto)


class CatalogoService:
    """Lectura, alta y edición del catálogo; cada registro se valida"""

    def __init__(self, client: ApiClient):
        self.client = client

    def _listar(self, path: str, modelo: type) -> list:
        data = self.client.get(path) or []
        if not isinstance(data, list):
            raise InventarioError(f"Respuesta inesperada de {path}: se esperaba una lista",
                                  details={"path": path})

        items = []
        for i, raw in enumerate(data):
            try:
                items.append(modelo.model_validate(raw))
            except ValidationError as e:
                raise InventarioError(
                    f"Registro {i} de {path} inválido: {e.error_count()} errores",
                    details={"path": path, "indice": i, "errores": e.errors()}
                ) from e

        logger.info(f"  {path}: {len(items)} registros")
        return items

    def get_zapatos(self) -> List[Zapato]:
        return self._listar("/zapatos", Zapato)

    def get_ropa(self) -> List[Ropa]:
        return self._listar("/ropa", Ropa)

    def get_bolsos(self) -> List[Bolso]:
        return self._listar("/bolsos", Bolso)

    def get_por_tipo(self, tipo: str) -> List[Producto]:
        getters = {
            "zapato": self.get_zapatos,
            "ropa": self.get_ropa,
            "bolso": self.get_bolsos,
        }
        if tipo not in getters:
            raise ValueError(f"Tipo de producto desconocido: {tipo}")
        return getters[tipo]()

    # ==========================================
    # ALTA Y EDICIÓN DE PRODUCTOS
    # ==========================================

    def _guardar(self, method: str, path: str, payload: Dict[str, Any], modelo: type):
        """
        POST/PATCH de un producto; la respuesta se valida como el modelo

        Respuesta vacía: en POST se valida lo enviado; en PATCH retorna None.
        """
        data = self.client.request(method, path, json=payload)
        if not data:
            if method != "POST":
                return None
            data = payload
        try:
            return modelo.model_validate(data)
        except ValidationError as e:
            raise InventarioError(
                f"Respuesta inválida de {path}: {e.error_count()} errores",
                details={"path": path, "errores": e.errors()}
            ) from e

    def create_zapato(self, payload: Dict[str, Any]) -> Zapato:
        """POST /zapatos (el id lo asigna el usuario)"""
        if payload.get("id") in (None, ""):
            raise BusinessRuleError("El zapato requiere id.")
        return self._guardar("POST", "/zapatos", payload, Zapato)

    def update_zapato(self, zapato_id: int, payload: Dict[str, Any]) -> Optional[Zapato]:
        """PATCH /zapatos/{id}; el id no se puede cambiar"""
        cambios = {k: v for k, v in payload.items() if k != "id"}
        return self._guardar("PATCH", f"/zapatos/{int(zapato_id)}", cambios, Zapato)

    def create_ropa(self, payload: Dict[str, Any]) -> Ropa:
        """POST /ropa; la PK es (nombre, color)"""
        if not payload.get("nombre") or not payload.get("color"):
            raise BusinessRuleError("La prenda requiere nombre y color.")
        return self._guardar("POST", "/ropa", payload, Ropa)

    def update_ropa(self, nombre: str, color: str, payload: Dict[str, Any]) -> Optional[Ropa]:
        """PATCH /ropa/{nombre}/{color}; nombre y color no se pueden cambiar"""
        cambios = {k: v for k, v in payload.items() if k not in ("nombre", "color")}
        path = f"/ropa/{quote(nombre, safe='')}/{quote(color, safe='')}"
        return self._guardar("PATCH", path, cambios, Ropa)

    def create_bolso(self, payload: Dict[str, Any]) -> Bolso:
        """POST /bolsos (id texto asignado por el usuario)"""
        if payload.get("id") in (None, ""):
            raise BusinessRuleError("El bolso requiere id.")
        return self._guardar("POST", "/bolsos", {**payload, "id": str(payload["id"])}, Bolso)

    def update_bolso(self, bolso_id: str, payload: Dict[str, Any]) -> Optional[Bolso]:
        """PATCH /bolsos/{id}; el id no se puede cambiar"""
        cambios = {k: v for k, v in payload.items() if k != "id"}
        return self._guardar("PATCH", f"/bolsos/{quote(str(bolso_id), safe='')}", cambios, Bolso)


def find_by_etiqueta(productos: Sequence[P], texto: str) -> Optional[P]:
    """
    Busca por la etiqueta del buscador ("nombre — color — $precio")

    Sin distinguir mayúsculas ni tildes; si no hay coincidencia exacta
    se acepta el nombre solo cuando es único.
    """
    objetivo = clean_label(texto)
    if not objetivo:
        return None

    for p in productos:
        if clean_label(p.etiqueta()) == objetivo:
            return p

    por_nombre = [p for p in productos if clean_label(p.nombre) == objetivo]
    return por_nombre[0] if len(por_nombre) == 1 else None


def find_zapato(zapatos: Sequence[Zapato], zapato_id: int) -> Optional[Zapato]:
    return next((z for z in zapatos if z.id == zapato_id), None)


def find_ropa(prendas: Sequence[Ropa], nombre: str, color: str) -> Optional[Ropa]:
    """Prenda por su PK (nombre, color), sin distinguir mayúsculas"""
    n, c = clean_label(nombre), clean_label(color)
    return next((r for r in prendas
                 if clean_label(r.nombre) == n and clean_label(r.color) == c), None)


def find_bolso(bolsos: Sequence[Bolso], bolso_id: str) -> Optional[Bolso]:
    return next((b for b in bolsos if b.id == str(bolso_id)), None)
