"""
Configuración de reglas de negocio y constantes
Externalizadas para fácil mantenimiento
"""
from typing import FrozenSet, Tuple

# ==========================================
# TIPOS DE PRODUCTO
# ==========================================

TIPOS_PRODUCTO: FrozenSet[str] = frozenset({
    "zapato",
    "ropa",
    "bolso"
})

# ==========================================
# TALLAS DE ROPA
# ==========================================

# Tallas base (orden de presentación)
TALLAS_BASE: Tuple[str, ...] = ("XS", "S", "M", "L")

# Token canónico de talla única
TALLA_UNICA = "UNICA"

# Marcador de copa dentro de la clave: M__COPA_36
SEPARADOR_COPA = "__COPA_"

# Copas que siempre se muestran, se complementan con las que vengan de BD
COPAS_BASE: Tuple[int, ...] = (34, 36)

# ==========================================
# TALLAS DE ZAPATOS
# ==========================================

# Lista típica de tallas para el formulario de zapatos
TALLAS_ZAPATO_COMUNES: Tuple[float, ...] = (
    35, 35.5, 36, 36.5, 37, 37.5, 38, 38.5, 39, 39.5, 40, 40.5, 41
)

# ==========================================
# BOLSOS
# ==========================================

# Los bolsos no manejan tallas; se serializan con esta etiqueta
TALLA_BOLSO = "Única"

# ==========================================
# DEVOLUCIONES
# ==========================================

# Separador de productos/tallas en el payload de devolución
SEPARADOR_ENTREGADOS = "; "
