"""
Editor de tallas de un producto (modal "Tallas" del inventario)

Flujo:
    editor = TallasEditor().abrir(prenda)
    editor.cambiar_modo(VariantMode.BASE_SIZE_WITH_CUP)
    editor.set("M__COPA_36", 4)
    editor.plan()           → [Create(M__COPA_36, 4)]
    editor.guardar(gateway) → nuevas tallas del producto
"""
from typing import Iterable, List, Optional, Set
import logging

from config.settings import TALLAS_BASE, TALLAS_ZAPATO_COMUNES
from core.errors import BusinessRuleError
from core.normalization import normalize_key
from core.tallaje import VariantMode, es_talla_numerica, talla_sort_key
from models.catalogo import ProductoConTallas, TallaStock, Zapato
from .matriz import VariantMatrix
from .reconciliacion import (
    ApplyResult,
    ReconciliationOperation,
    TallasGateway,
    apply_operations,
    diff
)

logger = logging.getLogger(__name__)


def formato_talla_zapato(talla: float) -> str:
    """38.0 → "38"; 38.5 → "38.5" """
    talla = float(talla)
    return str(int(talla)) if talla.is_integer() else str(talla)


class TallasEditor:
    """
    Sesión de edición de tallas de UN producto

    El baseline se congela al abrir; las ediciones van a la matriz
    deseada. Un guardado fallido no toca ninguna de las dos.
    """

    def __init__(self, base_sizes: Iterable[str] = TALLAS_BASE):
        self.base_sizes = list(base_sizes)
        self.producto: Optional[ProductoConTallas] = None
        self.baseline = VariantMatrix()
        self.desired = VariantMatrix()
        self._modo: Optional[VariantMode] = None
        self._cups: List[int] = []
        # Tallas de zapato agregadas fuera de la lista común
        self._extra: Set[str] = set()

    def abrir(self, producto: ProductoConTallas) -> 'TallasEditor':
        """Carga el producto y prepara baseline, modo y copas"""
        self.producto = producto
        self.baseline = VariantMatrix.from_persisted(producto.variant_entries())
        self.desired = self.baseline.copy()
        self._extra = set()

        if self.es_zapato:
            self._modo = None
            self._cups = []
        else:
            self._modo = self.baseline.mode
            self._cups = self.baseline.cups

        logger.debug(f"Editor abierto: {producto.nombre} "
                     f"modo={self._modo.value if self._modo else 'numérico'} "
                     f"tallas={len(self.baseline)}")
        return self

    @property
    def es_zapato(self) -> bool:
        return isinstance(self.producto, Zapato)

    @property
    def modo(self) -> Optional[VariantMode]:
        """Modo activo (None para zapatos)"""
        return self._modo

    @property
    def cups(self) -> List[int]:
        return list(self._cups)

    def cambiar_modo(self, modo: VariantMode) -> List[str]:
        """
        Cambia el modo de la prenda

        Las cantidades de claves compartidas se conservan; las demás
        quedan huérfanas y fuera del guardado.
        """
        self._requiere_producto()
        if self.es_zapato:
            raise BusinessRuleError("Los zapatos no usan modos de talla")

        self._modo = VariantMode(modo)
        logger.debug(f"Modo → {self._modo.value}")
        return self.campos()

    def campos(self) -> List[str]:
        """Claves con input visible en el formulario"""
        self._requiere_producto()

        if self.es_zapato:
            comunes = {formato_talla_zapato(t) for t in TALLAS_ZAPATO_COMUNES}
            return sorted(comunes | set(self.baseline.quantities) | self._extra,
                          key=talla_sort_key)

        return self.desired.keys_for_mode(self._modo, self.base_sizes, self._cups)

    def set(self, talla: str, cantidad) -> None:
        """
        Edita la cantidad deseada de una talla visible

        En zapatos cualquier talla numérica se acepta y pasa a ser campo.
        """
        key = normalize_key(talla)
        if self.es_zapato and es_talla_numerica(key) and key not in self.campos():
            self._extra.add(key)
        if key not in self.campos():
            raise BusinessRuleError(
                f"La talla {key} no aplica al modo actual",
                details={"talla": key}
            )
        self.desired.set(key, cantidad)

    def get(self, talla: str) -> int:
        return self.desired.get(talla)

    def plan(self) -> List[ReconciliationOperation]:
        """Operaciones necesarias, limitadas a los campos visibles"""
        self._requiere_producto()
        return diff(self.baseline, self.desired, scope=self.campos())

    def guardar(self,
                gateway: TallasGateway,
                stop_on_error: bool = False) -> List[TallaStock]:
        """
        Aplica el plan y retorna las tallas resultantes

        Returns:
            TallaStock con cantidad > 0 en orden natural

        Raises:
            ReconciliationApplyError: alguna operación falló
        """
        operaciones = self.plan()
        if not operaciones:
            logger.info("Sin cambios en tallas")
        else:
            logger.info(f"Guardando {len(operaciones)} cambios de tallas "
                        f"de {self.producto.nombre}")
            result: ApplyResult = apply_operations(operaciones, gateway, stop_on_error)
            logger.info(f"✓ {len(result.applied)} operaciones aplicadas")

        final = self.baseline.copy()
        for op in operaciones:
            final.set(op.key, op.quantity)

        self.baseline = final
        self.desired = final.copy()

        return [TallaStock(talla=k, cantidad=q) for k, q in final.positive_items()]

    def _requiere_producto(self):
        if self.producto is None:
            raise BusinessRuleError("No hay producto abierto en el editor")
