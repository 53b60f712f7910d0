"""
Matriz de tallas de un producto

Mapa en memoria talla → cantidad para UNA sesión de edición.
No habla con la red; se descarta si el usuario no guarda.
"""
import numbers
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple
import logging

import pandas as pd

from config.settings import TALLAS_BASE
from core.errors import DuplicateKeyError, InvalidQuantityError
from core.normalization import normalize_key
from core.tallaje import (
    VariantMode,
    infer_mode,
    extract_cups,
    merge_cups,
    keys_for_mode,
    talla_sort_key
)

logger = logging.getLogger(__name__)


def validate_quantity(key: str, quantity: Any) -> int:
    """
    Valida una cantidad: entera y >= 0

    bool se rechaza aunque sea subclase de int.
    """
    if isinstance(quantity, bool) or not isinstance(quantity, numbers.Integral):
        raise InvalidQuantityError(key, quantity)
    if quantity < 0:
        raise InvalidQuantityError(key, quantity)
    return int(quantity)


class VariantMatrix:
    """
    Cantidades por talla de un producto

    Una clave con cantidad 0 existe (hay registro persistido) pero
    no tiene stock. Para la reconciliación, 0 y ausente en el lado
    deseado significan lo mismo.
    """

    def __init__(self, quantities: Optional[Dict[str, int]] = None):
        # Público para inspección; diff() re-valida antes de emitir operaciones
        self.quantities: Dict[str, int] = {}
        for key, qty in (quantities or {}).items():
            self.set(key, qty)

    @classmethod
    def from_persisted(cls, entries: Iterable[Tuple[Any, Any]]) -> 'VariantMatrix':
        """
        Construye la matriz desde los registros persistidos del producto

        Args:
            entries: Pares (etiqueta cruda, cantidad)

        Raises:
            DuplicateKeyError: dos etiquetas normalizan a la misma clave
            InvalidQuantityError: cantidad negativa o no entera
        """
        matrix = cls()
        labels: Dict[str, List[str]] = {}

        for label, qty in entries:
            key = normalize_key(label)
            labels.setdefault(key, []).append(str(label))
            if len(labels[key]) > 1:
                raise DuplicateKeyError(key, labels[key])
            matrix.quantities[key] = validate_quantity(key, qty)

        logger.debug(f"Matriz cargada: {len(matrix)} tallas, total {matrix.total()}")
        return matrix

    def get(self, key: str) -> int:
        """Cantidad de la talla (0 si no existe)"""
        return self.quantities.get(normalize_key(key), 0)

    def set(self, key: str, quantity: Any) -> None:
        """
        Asigna cantidad a una talla

        0 es válido: indica "sin stock", no elimina la talla.
        """
        key = normalize_key(key)
        self.quantities[key] = validate_quantity(key, quantity)

    def has_record(self, key: str) -> bool:
        """True si la talla tiene registro (aunque sea con 0)"""
        return normalize_key(key) in self.quantities

    def __contains__(self, key: str) -> bool:
        return self.has_record(key)

    def __len__(self) -> int:
        return len(self.quantities)

    def __iter__(self) -> Iterator[str]:
        return iter(self.keys())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, VariantMatrix):
            return NotImplemented
        return self.quantities == other.quantities

    def __repr__(self) -> str:
        body = ", ".join(f"{k}={v}" for k, v in self.items())
        return f"VariantMatrix({body})"

    def keys(self) -> List[str]:
        """Claves en orden natural de talla"""
        return sorted(self.quantities, key=talla_sort_key)

    def items(self) -> List[Tuple[str, int]]:
        return [(k, self.quantities[k]) for k in self.keys()]

    def positive_items(self) -> List[Tuple[str, int]]:
        """Solo tallas con stock"""
        return [(k, q) for k, q in self.items() if q > 0]

    def total(self) -> int:
        return sum(self.quantities.values())

    def copy(self) -> 'VariantMatrix':
        clone = VariantMatrix()
        clone.quantities = dict(self.quantities)
        return clone

    def validate(self) -> None:
        """Re-valida todas las cantidades (pudieron mutarse directamente)"""
        for key, qty in self.quantities.items():
            validate_quantity(key, qty)

    @property
    def mode(self) -> VariantMode:
        """Modo derivado de las claves actuales; nunca se almacena"""
        return infer_mode(self.quantities)

    @property
    def cups(self) -> List[int]:
        """Copas a mostrar: base (34, 36) + las que ya existen"""
        return merge_cups(extract_cups(self.quantities))

    def keys_for_mode(self,
                      mode: VariantMode,
                      available_base_sizes: Iterable[str] = TALLAS_BASE,
                      available_cup_sizes: Optional[Iterable[int]] = None) -> List[str]:
        """
        Claves relevantes para mostrar en un modo

        No modifica la matriz: las cantidades de claves fuera del modo
        quedan huérfanas (se conservan pero no se muestran).

        Args:
            mode: Modo destino
            available_base_sizes: Tallas base (default XS, S, M, L)
            available_cup_sizes: Copas; default = base + descubiertas
        """
        cups = self.cups if available_cup_sizes is None else available_cup_sizes
        return keys_for_mode(mode, available_base_sizes, cups)

    def to_frame(self) -> pd.DataFrame:
        """Vista tabular: columnas Talla, Cantidad (orden natural)"""
        return pd.DataFrame(self.items(), columns=['Talla', 'Cantidad'])
