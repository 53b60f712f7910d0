"""
Flujo de venta

Una venta es UNA unidad de un producto: zapato o prenda en una talla
con stock, o un bolso. El precio se autollena con el del inventario y
se puede ajustar (descuento/promoción).
"""
import math
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Union
import logging

from core.errors import ApiError, BusinessRuleError
from core.tallaje import talla_sort_key
from models.catalogo import Bolso, Producto, ProductoConTallas, Ropa, Zapato
from .ajustes import AcumuladorAjustes, AjusteStock
from .devoluciones import etiqueta_talla

logger = logging.getLogger(__name__)


class VentaWorkflow:
    """Arma, valida y registra una venta"""

    def __init__(self, fecha: Optional[Union[date, str]] = None):
        self.producto: Optional[Producto] = None
        self.talla: Optional[str] = None
        self.precio: Any = None
        self.fecha = fecha

    @staticmethod
    def tallas_con_stock(producto: Producto) -> List[str]:
        """Tallas que se pueden vender (cantidad > 0), en orden natural"""
        if not isinstance(producto, ProductoConTallas):
            return []
        tallas = {etiqueta_talla(producto, t.talla) for t in producto.tallas if t.cantidad > 0}
        return sorted(tallas, key=talla_sort_key)

    def seleccionar(self,
                    producto: Producto,
                    talla: Optional[str] = None,
                    precio: Any = None) -> None:
        """
        Elige el producto vendido

        Args:
            producto: Zapato, Ropa o Bolso del catálogo
            talla: Requerida salvo para bolsos; debe tener stock
            precio: (Opcional) Por defecto el precio del inventario

        Raises:
            BusinessRuleError: talla faltante o sin stock, bolso agotado
        """
        if isinstance(producto, ProductoConTallas):
            if talla is None or not str(talla).strip():
                nombre = "del zapato" if isinstance(producto, Zapato) else "de la prenda"
                raise BusinessRuleError(f"Selecciona la talla {nombre}.")
            if isinstance(producto, Zapato):
                try:
                    key = etiqueta_talla(producto, talla)
                except BusinessRuleError:
                    raise BusinessRuleError("La talla del zapato debe ser numérica.")
            else:
                key = etiqueta_talla(producto, talla)
            registro = producto.talla(key)
            if registro is None or registro.cantidad <= 0:
                raise BusinessRuleError(f"{producto.nombre} talla {key} no tiene stock.",
                                        details={"producto": producto.clave, "talla": key})
        else:
            if producto.cantidad <= 0:
                raise BusinessRuleError(f"{producto.nombre} no tiene stock.",
                                        details={"producto": producto.clave})
            key = etiqueta_talla(producto, None)

        self.producto = producto
        self.talla = key
        self.precio = producto.precio if precio is None else precio
        logger.debug(f"Venta: {producto.nombre} talla {key} ${self.precio}")

    def validar(self) -> float:
        """
        Valida la venta y retorna el precio

        Raises:
            BusinessRuleError: producto, fecha o precio faltante
        """
        if self.producto is None:
            raise BusinessRuleError("Selecciona el producto (puedes escribir y elegir de la lista).")
        if not self.fecha:
            raise BusinessRuleError("La fecha es obligatoria.")
        if isinstance(self.fecha, str):
            try:
                datetime.fromisoformat(self.fecha)
            except ValueError:
                raise BusinessRuleError(f"Fecha inválida: {self.fecha}")

        try:
            precio = float(self.precio)
        except (TypeError, ValueError):
            raise BusinessRuleError("El precio es obligatorio.")
        if math.isnan(precio) or precio < 0:
            raise BusinessRuleError("El precio es obligatorio.")
        return precio

    def build_payload(self, usuario_id: int) -> Dict[str, Any]:
        """Payload de POST /ventas"""
        precio = self.validar()
        p = self.producto
        fecha = self.fecha.isoformat() if isinstance(self.fecha, date) else str(self.fecha)

        payload: Dict[str, Any] = {
            "tipo": p.tipo,
            "precio": precio,
            "usuario_id": int(usuario_id),
            "fecha": fecha,
        }
        if isinstance(p, Zapato):
            payload.update({"zapato_id": p.id, "talla": self.talla})
        elif isinstance(p, Ropa):
            payload.update({"nombre_producto": p.nombre, "color": p.color, "talla": self.talla})
        elif isinstance(p, Bolso):
            payload["bolso_id"] = str(p.id)
        return payload

    def plan_ajustes(self) -> List[AjusteStock]:
        """Operaciones de tallas: la talla vendida baja en 1"""
        self.validar()
        acumulador = AcumuladorAjustes()
        if isinstance(self.producto, ProductoConTallas):
            acumulador.agregar(self.producto, self.talla, -1)
        return acumulador.planificar()

    def registrar(self, service, auth) -> Any:
        """
        Envía la venta

        Args:
            service: VentasService
            auth: AuthContext con el usuario actual

        Raises:
            BusinessRuleError: validación o falla HTTP
        """
        payload = self.build_payload(auth.require_usuario_id())
        try:
            venta = service.create(payload)
        except ApiError as e:
            logger.error(f"Venta falló: {e}")
            raise BusinessRuleError(f"No se pudo crear la venta.\n{e}",
                                    details={"payload": payload}) from e

        logger.info(f"✓ Venta registrada: {self.producto.nombre} talla {self.talla} "
                    f"(${payload['precio']:,.0f})")
        return venta
