"""
Modos de tallaje de un producto

El modo NUNCA se guarda: se deriva del conjunto de claves cada vez
que cambia. Es la única implementación; las pantallas no deben
re-deducirlo por su cuenta.
"""
import re
from enum import Enum
from typing import Iterable, List, Optional, Set, Tuple

from config.settings import TALLAS_BASE, TALLA_UNICA, SEPARADOR_COPA, COPAS_BASE

_RE_CON_COPA = re.compile(r"%s(\d+)" % SEPARADOR_COPA)
_RE_BASE = re.compile(r"^(%s)(?:%s\d+)?$" % ("|".join(TALLAS_BASE), SEPARADOR_COPA))
_RE_NUMERICA = re.compile(r"^\d+(?:[.,]\d+)?$")


class VariantMode(str, Enum):
    """Ejes que usa un producto"""
    BASE_SIZE_ONLY = "XS_L"
    UNIQUE_ONLY = "UNICA"
    UNIQUE_WITH_CUP = "UNICA_COPA"
    BASE_SIZE_WITH_CUP = "XS_L_COPA"

    @property
    def etiqueta(self) -> str:
        """Texto para el selector de modo"""
        return {
            VariantMode.BASE_SIZE_ONLY: "XS–L",
            VariantMode.UNIQUE_ONLY: "Única",
            VariantMode.UNIQUE_WITH_CUP: "Única + copa",
            VariantMode.BASE_SIZE_WITH_CUP: "XS–L + copa",
        }[self]


def has_unique(key: str) -> bool:
    return key == TALLA_UNICA or key.startswith(f"{TALLA_UNICA}{SEPARADOR_COPA}")


def has_cup(key: str) -> bool:
    return bool(_RE_CON_COPA.search(key))


def has_base_size(key: str) -> bool:
    return bool(_RE_BASE.match(key))


def es_talla_numerica(key: str) -> bool:
    """Talla de zapato: "38", "38.5", "38,5" """
    return bool(_RE_NUMERICA.match(key or ""))


def infer_mode(keys: Iterable[str]) -> VariantMode:
    """
    Deduce el modo de tallaje a partir de las claves presentes

    Prioridad:
    1. Alguna clave UNICA con copa → UNICA_COPA
    2. Alguna clave UNICA          → UNICA
    3. Alguna talla base con copa  → XS_L_COPA
    4. Resto (incluye vacío)       → XS_L

    Las claves deben venir normalizadas (core.normalization.normalize_key).
    """
    keys = set(keys)

    if any(has_unique(k) and has_cup(k) for k in keys):
        return VariantMode.UNIQUE_WITH_CUP
    if any(has_unique(k) for k in keys):
        return VariantMode.UNIQUE_ONLY
    if any(has_base_size(k) and has_cup(k) for k in keys):
        return VariantMode.BASE_SIZE_WITH_CUP
    return VariantMode.BASE_SIZE_ONLY


def extract_cups(keys: Iterable[str]) -> Set[int]:
    """Copas presentes en las claves: {"M__COPA_36", "S"} → {36}"""
    cups = set()
    for key in keys:
        m = _RE_CON_COPA.search(key)
        if m:
            cups.add(int(m.group(1)))
    return cups


def merge_cups(discovered: Iterable[int],
               base: Tuple[int, ...] = COPAS_BASE) -> List[int]:
    """Copas base + descubiertas en BD, ordenadas y sin repetir"""
    return sorted(set(base) | set(discovered))


def build_key(size: str, cup: Optional[int] = None) -> str:
    """("M", 36) → "M__COPA_36"; ("UNICA", None) → "UNICA" """
    return f"{size}{SEPARADOR_COPA}{cup}" if cup is not None else size


def keys_for_mode(mode: VariantMode,
                  base_sizes: Iterable[str] = TALLAS_BASE,
                  cup_sizes: Iterable[int] = COPAS_BASE) -> List[str]:
    """
    Claves que la UI debe mostrar para un modo

    Ejemplos:
        XS_L        → ["XS", "S", "M", "L"]
        UNICA       → ["UNICA"]
        UNICA_COPA  → ["UNICA__COPA_34", "UNICA__COPA_36"]
        XS_L_COPA   → ["XS__COPA_34", "XS__COPA_36", "S__COPA_34", ...]
    """
    base_sizes = list(base_sizes)
    cup_sizes = sorted(set(cup_sizes))

    if mode == VariantMode.BASE_SIZE_ONLY:
        return list(base_sizes)
    if mode == VariantMode.UNIQUE_ONLY:
        return [TALLA_UNICA]
    if mode == VariantMode.UNIQUE_WITH_CUP:
        return [build_key(TALLA_UNICA, c) for c in cup_sizes]
    return [build_key(s, c) for s in base_sizes for c in cup_sizes]


def talla_sort_key(key: str) -> tuple:
    """
    Orden natural de tallas

    Numéricas por valor (zapatos: 35 < 35.5 < 36), luego tallas base en
    orden XS, S, M, L, UNICA, y al final cualquier otra etiqueta.
    """
    if es_talla_numerica(key):
        return (0, float(key.replace(",", ".")), 0, key)

    size, _, cup = key.partition(SEPARADOR_COPA)
    cup_num = int(cup) if cup.isdigit() else -1
    order = list(TALLAS_BASE) + [TALLA_UNICA]
    if size in order:
        return (1, order.index(size), cup_num, key)
    return (2, 0, cup_num, key)
