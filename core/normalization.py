"""
Funciones de normalización y limpieza de tallas
CRÍTICO: Dos etiquetas que denotan la misma talla deben producir la misma clave
"""
import re
import unicodedata
from typing import Any, List

import pandas as pd

from config.settings import TALLAS_BASE, TALLA_UNICA, SEPARADOR_COPA

_RE_ESPACIOS = re.compile(r"\s+")

# Talla de zapato: "38", "38.5", "38,5"
_RE_NUMERICA = re.compile(r"^(\d+)(?:[.,](\d+))?$")

# Gramática canónica: UNICA, XS, S, M, L con copa opcional
_RE_CANONICA = re.compile(
    r"^(%s|%s)(?:%s\d+)?$" % (TALLA_UNICA, "|".join(TALLAS_BASE), SEPARADOR_COPA)
)

# "CUP 36", "copa:36", "COPA_36", "cup-36" → " COPA 36"
_RE_COPA = re.compile(r"(?<![A-Z])(?:CUP|COPA)[\s:_-]*(\d+)")
_RE_COPA_NUM = re.compile(r"(?<![A-Z])COPA (\d+)")

# "UNICA", "U N I C A", "UNIQUE" → "UNICA"
_RE_UNICA = re.compile(r"(?<![A-Z])(?:U ?N ?I ?C ?A|UNIQUE)(?![A-Z])")

_RE_TALLA_BASE = re.compile(r"\b(%s)\b" % "|".join(TALLAS_BASE))
_RE_NO_ALFANUM = re.compile(r"[^A-Z0-9]")


def clean_label(raw: Any) -> str:
    """
    Limpieza de texto de talla:
    1. Strip + upper
    2. Quitar acentos (compuestos o descompuestos)
    3. Colapsar espacios internos

    Ejemplos:
        "  única  " → "UNICA"
        "m   copa 36" → "M COPA 36"
        38 → "38"
    """
    text = "" if raw is None else str(raw)
    # upper() antes y después: hay mayúsculas que solo existen descompuestas
    text = unicodedata.normalize('NFKD', text.upper())
    text = ''.join(c for c in text if not unicodedata.combining(c))
    text = text.upper().strip()
    return _RE_ESPACIOS.sub(" ", text)


def _talla_numerica_canonica(match: "re.Match") -> str:
    """"38,5" → "38.5"; "38.0" → "38"; "038" → "38" """
    entero, decimal = match.group(1), (match.group(2) or "").rstrip("0")
    entero = str(int(entero))
    return f"{entero}.{decimal}" if decimal else entero


def normalize_key(raw: Any) -> str:
    """
    Normaliza una etiqueta de talla libre a su clave canónica

    Reglas (en orden):
        - Copa + UNICA       → UNICA__COPA_<n>
        - Copa + talla base  → <TALLA>__COPA_<n>
        - Solo UNICA         → UNICA
        - Solo talla base    → XS | S | M | L
        - Ya canónica        → sin cambios
        - Número             → talla de zapato canónica ("38,5" → "38.5", "38.0" → "38")
        - Otra cosa          → texto limpio tal cual

    Nunca falla y es idempotente: normalize_key(normalize_key(x)) == normalize_key(x)

    Ejemplos:
        "m cup 36"   → "M__COPA_36"
        "Única"      → "UNICA"
        "u n i c a copa 34" → "UNICA__COPA_34"
        "38"         → "38"
        "38,50"      → "38.5"
    """
    k = clean_label(raw)

    if _RE_CANONICA.match(k):
        return k

    numerica = _RE_NUMERICA.match(k)
    if numerica:
        return _talla_numerica_canonica(numerica)

    k = _RE_COPA.sub(r" COPA \1", k)
    k = _RE_UNICA.sub(TALLA_UNICA, k)
    k = _RE_ESPACIOS.sub(" ", k).strip()

    cup = _RE_COPA_NUM.search(k)
    if cup:
        num = cup.group(1)
        if re.match(r"^%s\b" % TALLA_UNICA, _RE_NO_ALFANUM.sub(" ", k)):
            return f"{TALLA_UNICA}{SEPARADOR_COPA}{num}"

        # "M_ COPA 36": el guion bajo también es \w
        resto = _RE_NO_ALFANUM.sub(" ", k[:cup.start()] + " " + k[cup.end():])
        size = _RE_TALLA_BASE.search(resto)
        if size:
            return f"{size.group(1)}{SEPARADOR_COPA}{num}"

    if k == TALLA_UNICA or k in TALLAS_BASE:
        return k

    # Etiqueta no reconocida: se conserva para no perder ninguna talla
    return k


def is_canonical_key(key: str) -> bool:
    """True si la clave cumple la gramática (UNICA|XS|S|M|L)(__COPA_n)?"""
    return bool(_RE_CANONICA.match(key or ""))


def _talla_texto(value: Any) -> Any:
    # Excel lee 38 como 38.0
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return value


def normalize_talla(series: pd.Series) -> pd.Series:
    """
    Normalización de Talla para columnas completas

    Ejemplos:
        "m copa 36 " → "M__COPA_36"
        38.0 → "38"
        None → ""
        "  unica  " → "UNICA"
    """
    return (series
            .astype('object')
            .where(series.notna(), '')
            .map(_talla_texto)
            .map(normalize_key))


def strip_all_string_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Elimina espacios en inicio/fin de TODAS las columnas de texto.
    Los JSON del backend traen nombres y colores con espacios sobrantes.
    """
    df = df.copy()

    for col in df.columns:
        # pandas 3 infiere dtype "str" en lugar de object
        if pd.api.types.is_object_dtype(df[col]) or pd.api.types.is_string_dtype(df[col]):
            df[col] = df[col].astype('string').str.strip()

    return df


def clean_control_chars(series: pd.Series) -> pd.Series:
    """
    Elimina caracteres de control ASCII (0x00-0x1F, 0x7F)
    que pueden aparecer en nombres capturados a mano.
    """
    return series.str.replace(r"[\x00-\x1F\x7F]", "", regex=True)


def clean_nombre(series: pd.Series) -> pd.Series:
    """
    Limpieza completa de nombre de producto:
    1. Strip espacios
    2. Eliminar caracteres de control
    """
    return (series
            .astype('string')
            .str.strip()
            .pipe(clean_control_chars))


def normalize_labels(labels: List[Any]) -> List[str]:
    """Normaliza una lista de etiquetas conservando el orden"""
    return [normalize_key(label) for label in labels]
