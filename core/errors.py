"""
Excepciones del inventario de tallas

Todas se lanzan de forma síncrona al llamador inmediato (el flujo que
está guardando). Ninguna se reintenta: abortan el guardado actual y
dejan intacta la matriz en memoria para que el usuario corrija.
"""
import json
from typing import Any, Dict, List, Optional


class InventarioError(Exception):
    """
    Excepción base de la aplicación

    Attributes:
        message: Mensaje legible para el usuario
        details: Contexto adicional
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidQuantityError(InventarioError, ValueError):
    """Cantidad negativa o no entera"""

    def __init__(self, key: str, quantity: Any):
        self.key = key
        self.quantity = quantity
        super().__init__(
            f"Cantidad inválida para la talla {key}: {quantity!r} "
            f"(debe ser un entero >= 0)",
            details={"talla": key, "cantidad": quantity}
        )


class DuplicateKeyError(InventarioError):
    """
    Dos registros persistidos normalizan a la misma talla

    Indica un problema de integridad en el backend; no se suman.
    """

    def __init__(self, key: str, labels: List[str]):
        self.key = key
        self.labels = labels
        super().__init__(
            f"Talla duplicada {key}: {', '.join(repr(l) for l in labels)}",
            details={"talla": key, "etiquetas": labels}
        )


class BusinessRuleError(InventarioError, ValueError):
    """Regla de negocio violada (totales, selección faltante, stock)"""


class ReconciliationApplyError(InventarioError):
    """
    Falló una o más operaciones al aplicarlas contra la API

    Attributes:
        applied: Operaciones que sí se aplicaron
        failed: Lista de (operación, excepción)
    """

    def __init__(self, message: str, applied: list, failed: list):
        self.applied = applied
        self.failed = failed
        super().__init__(
            message,
            details={"aplicadas": len(applied), "fallidas": len(failed)}
        )


class ApiError(InventarioError):
    """Respuesta HTTP no exitosa"""

    def __init__(self, status: int, reason: str = "", detail: Any = None):
        self.status = status
        self.reason = reason
        self.detail = detail

        message = f"HTTP {status} {reason}".rstrip()
        if detail is not None:
            try:
                message += f" — {json.dumps(detail, ensure_ascii=False)}"
            except (TypeError, ValueError):
                message += f" — {detail}"

        super().__init__(message, details={"status": status, "detail": detail})
