"""
Flujo de ingreso de mercancía (entradas)

Varias líneas (tipo, producto, talla, cantidad). Se validan todas
juntas y se envían una por una a POST /entradas.
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from config.settings import TALLAS_ZAPATO_COMUNES, TIPOS_PRODUCTO
from core.errors import ApiError, BusinessRuleError
from core.normalization import normalize_key
from core.tallaje import es_talla_numerica, talla_sort_key
from inventario.editor import formato_talla_zapato
from models.catalogo import Bolso, Producto, ProductoConTallas, Ropa, Zapato
from .ajustes import AcumuladorAjustes, AjusteStock

logger = logging.getLogger(__name__)


@dataclass
class LineaIngreso:
    """Una línea del formulario de ingreso"""
    tipo: str = "zapato"
    producto: Optional[Producto] = None
    talla: Optional[str] = None
    cantidad: Any = 1


def _cantidad_valida(cantidad: Any) -> Optional[int]:
    """Cantidad entera > 0, o None si es inválida"""
    if isinstance(cantidad, bool) or cantidad is None or cantidad == "":
        return None
    try:
        valor = float(cantidad)
    except (TypeError, ValueError):
        return None
    if not valor.is_integer() or valor <= 0:
        return None
    return int(valor)


class IngresoWorkflow:
    """Arma, valida y registra un ingreso de varias líneas"""

    def __init__(self):
        self.lineas: List[LineaIngreso] = []

    def agregar_linea(self,
                      tipo: str = "zapato",
                      producto: Optional[Producto] = None,
                      talla: Optional[str] = None,
                      cantidad: Any = 1) -> LineaIngreso:
        if tipo not in TIPOS_PRODUCTO:
            raise BusinessRuleError(f"Tipo de producto desconocido: {tipo}")
        linea = LineaIngreso(tipo=tipo, producto=producto, talla=talla, cantidad=cantidad)
        self.lineas.append(linea)
        return linea

    def eliminar_linea(self, indice: int) -> LineaIngreso:
        if not 0 <= indice < len(self.lineas):
            raise BusinessRuleError(f"No existe la línea {indice + 1}.")
        return self.lineas.pop(indice)

    @staticmethod
    def tallas_disponibles(linea: LineaIngreso) -> List[str]:
        """
        Sugerencias de talla para la línea

        Zapatos: tallas comunes + las del producto. Ropa: las del
        producto. Bolsos: ninguna.
        """
        producto = linea.producto
        if linea.tipo == "zapato":
            tallas = {formato_talla_zapato(t) for t in TALLAS_ZAPATO_COMUNES}
            if isinstance(producto, Zapato):
                tallas |= {t.talla for t in producto.tallas}
            return sorted(tallas, key=talla_sort_key)
        if linea.tipo == "ropa" and isinstance(producto, Ropa):
            return sorted({normalize_key(t.talla) for t in producto.tallas}, key=talla_sort_key)
        return []

    def validar(self) -> List[int]:
        """
        Valida todas las líneas y retorna sus cantidades

        Raises:
            BusinessRuleError: con un renglón "Línea n: ..." por error
        """
        if not self.lineas:
            raise BusinessRuleError("Agrega al menos una línea al ingreso.")

        errores: List[str] = []
        cantidades: List[int] = []

        for i, linea in enumerate(self.lineas, start=1):
            cantidad = _cantidad_valida(linea.cantidad)
            if cantidad is None:
                errores.append(f"Línea {i}: cantidad inválida.")
                continue

            if linea.tipo == "zapato":
                if not isinstance(linea.producto, Zapato):
                    errores.append(f"Línea {i}: selecciona un zapato.")
                    continue
                if not linea.talla:
                    errores.append(f"Línea {i}: ingresa una talla.")
                    continue
                if not es_talla_numerica(normalize_key(linea.talla)):
                    errores.append(f"Línea {i}: la talla del zapato debe ser numérica.")
                    continue
            elif linea.tipo == "ropa":
                if not isinstance(linea.producto, Ropa):
                    errores.append(f"Línea {i}: selecciona la prenda.")
                    continue
                if not linea.talla:
                    errores.append(f"Línea {i}: ingresa una talla.")
                    continue
            elif not isinstance(linea.producto, Bolso):
                errores.append(f"Línea {i}: selecciona el bolso.")
                continue

            cantidades.append(cantidad)

        if errores:
            raise BusinessRuleError("\n".join(errores), details={"errores": errores})

        return cantidades

    def build_payloads(self, usuario_id: int) -> List[Dict[str, Any]]:
        """Un payload de POST /entradas por línea"""
        cantidades = self.validar()
        payloads = []

        for linea, cantidad in zip(self.lineas, cantidades):
            p = linea.producto
            if isinstance(p, Zapato):
                payload = {"tipo": "zapato", "zapato_id": p.id, "talla": normalize_key(linea.talla)}
            elif isinstance(p, Ropa):
                payload = {"tipo": "ropa", "ropa_nombre": p.nombre, "ropa_color": p.color,
                           "talla": normalize_key(linea.talla)}
            else:
                payload = {"tipo": "bolso", "bolso_id": str(p.id)}

            payload["cantidad"] = cantidad
            payload["usuario_id"] = int(usuario_id)
            payloads.append(payload)

        return payloads

    def plan_ajustes(self) -> List[AjusteStock]:
        """Operaciones de tallas resultantes de sumar cada línea al stock"""
        cantidades = self.validar()
        acumulador = AcumuladorAjustes()

        for linea, cantidad in zip(self.lineas, cantidades):
            if isinstance(linea.producto, ProductoConTallas):
                acumulador.agregar(linea.producto, str(linea.talla), cantidad)

        return acumulador.planificar()

    def registrar(self, service, auth) -> List[Any]:
        """
        Envía las líneas en orden, una petición por línea

        La primera falla aborta; las líneas anteriores ya quedaron
        registradas (no hay rollback).

        Raises:
            BusinessRuleError: validación o falla HTTP (mensaje agregado)
        """
        payloads = self.build_payloads(auth.require_usuario_id())
        creadas = []

        for i, payload in enumerate(payloads, start=1):
            try:
                creadas.append(service.create(payload))
                logger.info(f"  Línea {i}/{len(payloads)} registrada")
            except ApiError as e:
                logger.error(f"  Línea {i} falló: {e}")
                raise BusinessRuleError(
                    f"No se pudo crear el ingreso.\n"
                    f"Línea {i}: {e}\n"
                    f"({len(creadas)} de {len(payloads)} líneas registradas)",
                    details={"registradas": len(creadas), "total": len(payloads)}
                ) from e

        logger.info(f"✓ Ingreso registrado: {len(creadas)} líneas")
        return creadas
