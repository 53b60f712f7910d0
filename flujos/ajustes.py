"""
Ajustes de stock derivados de un movimiento (ingreso o devolución)

Cada movimiento suma o resta unidades por (producto, talla). Aquí se
convierte eso en la matriz deseada de cada producto y se reconcilia
contra su estado persistido.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Tuple
import logging

from core.normalization import normalize_key
from inventario.matriz import VariantMatrix
from inventario.reconciliacion import ReconciliationOperation, diff
from models.catalogo import ProductoConTallas

logger = logging.getLogger(__name__)


@dataclass
class AjusteStock:
    """Operaciones de tallas para un producto"""
    producto: ProductoConTallas
    operaciones: List[ReconciliationOperation] = field(default_factory=list)

    @property
    def clave(self) -> str:
        return self.producto.clave


class AcumuladorAjustes:
    """Acumula deltas por producto y talla, en orden de llegada"""

    def __init__(self):
        self._productos: Dict[str, ProductoConTallas] = {}
        self._deltas: Dict[str, Dict[str, int]] = {}

    def agregar(self, producto: ProductoConTallas, talla: str, delta: int):
        clave = producto.clave
        self._productos.setdefault(clave, producto)
        por_talla = self._deltas.setdefault(clave, {})
        key = normalize_key(talla)
        por_talla[key] = por_talla.get(key, 0) + delta

    def deltas(self, clave: str) -> Dict[str, int]:
        return dict(self._deltas.get(clave, {}))

    def planificar(self) -> List[AjusteStock]:
        """
        Reconcilia cada producto tocado

        Raises:
            InvalidQuantityError: el delta deja una talla en negativo
        """
        ajustes: List[AjusteStock] = []

        for clave, producto in self._productos.items():
            baseline = VariantMatrix.from_persisted(producto.variant_entries())
            desired = baseline.copy()
            por_talla = self._deltas[clave]

            for key, delta in por_talla.items():
                desired.set(key, baseline.get(key) + delta)

            ops = diff(baseline, desired, scope=por_talla.keys())
            logger.debug(f"  {clave}: {len(ops)} operaciones")
            ajustes.append(AjusteStock(producto=producto, operaciones=ops))

        return ajustes


def resumen_ajustes(ajustes: List[AjusteStock]) -> List[Tuple[str, str]]:
    """[(clave, "Update(38, 2), Create(40, 1)")] para logs y reportes"""
    return [(a.clave, ", ".join(str(op) for op in a.operaciones) or "sin cambios")
            for a in ajustes]
