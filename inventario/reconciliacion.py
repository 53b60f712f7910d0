"""
Motor de reconciliación de tallas

Compara la matriz persistida (baseline) con la deseada y emite las
operaciones mínimas para que el backend converja:

    - Create(talla, cantidad): talla sin registro y cantidad > 0
    - Update(talla, cantidad): talla con registro y cantidad distinta

No existe Delete: bajar a 0 es Update(talla, 0). Los registros en 0
se conservan para el histórico (cantidad_hist).
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Tuple
import logging

from core.errors import ReconciliationApplyError
from core.normalization import normalize_key
from core.tallaje import talla_sort_key
from .matriz import VariantMatrix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReconciliationOperation:
    """Cambio remoto requerido para una talla"""
    key: str
    quantity: int

    @property
    def kind(self) -> str:
        return type(self).__name__.upper()

    def __str__(self) -> str:
        return f"{type(self).__name__}({self.key}, {self.quantity})"


@dataclass(frozen=True)
class Create(ReconciliationOperation):
    """Crear registro de talla"""


@dataclass(frozen=True)
class Update(ReconciliationOperation):
    """Actualizar cantidad de una talla existente"""


class TallasGateway(Protocol):
    """Colaborador HTTP que ejecuta las operaciones de un producto"""

    def create(self, key: str, quantity: int) -> None: ...

    def update(self, key: str, quantity: int) -> None: ...


def diff(baseline: VariantMatrix,
         desired: VariantMatrix,
         scope: Optional[Iterable[str]] = None) -> List[ReconciliationOperation]:
    """
    Calcula operaciones para llevar el backend de baseline a desired

    Args:
        baseline: Estado persistido al abrir la edición
        desired: Estado editado por el usuario
        scope: (Opcional) Solo considerar estas claves. Se usa para
               excluir tallas huérfanas tras cambiar de modo.

    Returns:
        Operaciones en orden natural de talla. Lista vacía si no hay cambios.

    Raises:
        InvalidQuantityError: alguna matriz tiene cantidades inválidas
    """
    baseline.validate()
    desired.validate()

    keys = {k for k, q in baseline.quantities.items() if q > 0}
    keys |= {k for k, q in desired.quantities.items() if q > 0}

    if scope is not None:
        allowed = {normalize_key(k) for k in scope}
        keys &= allowed

    operations: List[ReconciliationOperation] = []

    for key in sorted(keys, key=talla_sort_key):
        wanted = desired.quantities.get(key, 0)

        if not baseline.has_record(key):
            if wanted > 0:
                operations.append(Create(key, wanted))
            continue

        if wanted != baseline.quantities[key]:
            operations.append(Update(key, wanted))

    logger.debug(f"Reconciliación: {len(operations)} operaciones "
                 f"({', '.join(str(op) for op in operations) or 'sin cambios'})")

    return operations


@dataclass
class ApplyResult:
    """Resultado de aplicar operaciones"""
    applied: List[ReconciliationOperation]
    failed: List[Tuple[ReconciliationOperation, Exception]]

    @property
    def ok(self) -> bool:
        return not self.failed


def apply_operations(operations: List[ReconciliationOperation],
                     gateway: TallasGateway,
                     stop_on_error: bool = False) -> ApplyResult:
    """
    Ejecuta operaciones una por una contra el gateway

    Secuencial, sin concurrencia y sin rollback.

    Args:
        operations: Salida de diff()
        gateway: Colaborador con create/update
        stop_on_error: True = abortar en la primera falla;
                       False = continuar y reportar todas al final

    Raises:
        ReconciliationApplyError: si alguna operación falló
    """
    result = ApplyResult(applied=[], failed=[])

    for op in operations:
        try:
            if isinstance(op, Create):
                gateway.create(op.key, op.quantity)
            else:
                gateway.update(op.key, op.quantity)
            result.applied.append(op)
            logger.info(f"  OK {op}")
        except Exception as e:
            logger.error(f"  FALLA {op}: {e}")
            result.failed.append((op, e))
            if stop_on_error:
                break

    if result.failed:
        lines = [f"{op}: {err}" for op, err in result.failed]
        message = (f"No se pudieron guardar las tallas "
                   f"({len(result.failed)} fallidas, {len(result.applied)} aplicadas).\n"
                   + "\n".join(lines))
        raise ReconciliationApplyError(message, result.applied, result.failed)

    return result
