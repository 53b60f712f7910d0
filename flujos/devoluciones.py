"""
Flujo de devolución

El cliente devuelve UN producto (recibido) y se lleva uno o varios
(carrito de entregados). Reglas:

1. La talla recibida debe haber existido en el producto
   (cantidad > 0, cantidad_hist > 0 o marcada como existente)
2. La talla de un zapato recibido debe ser numérica
3. Solo se entregan tallas con stock, sin superar el stock por talla
4. Total entregado >= precio recibido (se valida antes de reconciliar)
"""
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
import logging

from config.settings import SEPARADOR_ENTREGADOS, TALLA_BOLSO
from core.errors import BusinessRuleError
from core.normalization import normalize_key
from models.catalogo import Bolso, Producto, ProductoConTallas, Ropa, Zapato
from .ajustes import AcumuladorAjustes, AjusteStock
from api.tallas import talla_numerica

logger = logging.getLogger(__name__)

MENSAJE_TOTALES = "El precio ENTREGADO (suma del carrito) debe ser igual o mayor al RECIBIDO."


@dataclass
class ProductoRecibido:
    """Producto que el cliente devuelve"""
    producto: Producto
    talla: str
    precio: float

    @property
    def tipo(self) -> str:
        return self.producto.tipo


@dataclass
class ItemEntregado:
    """Unidad del carrito que se entrega al cliente"""
    producto: Producto
    talla: str
    precio: float
    cantidad: int = 1

    @property
    def tipo(self) -> str:
        return self.producto.tipo


def etiqueta_talla(producto: Producto, talla: Optional[str]) -> str:
    """Talla tal como se guarda: numérica para zapatos, clave para ropa"""
    if isinstance(producto, Bolso):
        return TALLA_BOLSO
    texto = "" if talla is None else str(talla).strip()
    if isinstance(producto, Zapato):
        return str(talla_numerica(texto))
    return normalize_key(texto)


class DevolucionWorkflow:
    """Arma y valida una devolución antes de enviarla"""

    def __init__(self):
        self.recibido: Optional[ProductoRecibido] = None
        self.entregados: List[ItemEntregado] = []

    # ==========================================
    # RECIBIDO
    # ==========================================

    def set_recibido(self,
                     producto: Producto,
                     talla: Optional[str] = None,
                     precio: Optional[float] = None) -> ProductoRecibido:
        """
        Selecciona el producto devuelto

        Args:
            producto: Zapato, Ropa o Bolso del catálogo
            talla: Requerida salvo para bolsos
            precio: Default = precio del catálogo
        """
        if isinstance(producto, ProductoConTallas):
            self._validar_talla_recibida(producto, talla)

        precio_final = producto.precio if precio is None else precio
        if precio_final is None:
            raise BusinessRuleError("El precio recibido es obligatorio.")
        if float(precio_final) < 0:
            raise BusinessRuleError("El precio recibido no puede ser negativo.")

        self.recibido = ProductoRecibido(
            producto=producto,
            talla=etiqueta_talla(producto, talla),
            precio=float(precio_final)
        )
        logger.debug(f"Recibido: {producto.nombre} talla {self.recibido.talla} "
                     f"${self.recibido.precio:,.0f}")
        return self.recibido

    def _validar_talla_recibida(self, producto: ProductoConTallas, talla: Optional[str]):
        nombre = "del zapato" if isinstance(producto, Zapato) else "de la prenda"

        if talla is None or not str(talla).strip():
            raise BusinessRuleError(f"Ingresa/selecciona la talla {nombre} DEVUELTO (recibido).")

        if isinstance(producto, Zapato):
            try:
                talla_numerica(talla)
            except BusinessRuleError:
                raise BusinessRuleError("La talla del zapato devuelto debe ser numérica.")

        # Sin información de tallas no se filtra
        if not producto.tallas:
            return

        registro = producto.talla(str(talla))
        if registro is None or not registro.existed():
            raise BusinessRuleError(
                f"La talla {talla} nunca existió para {producto.nombre}.",
                details={"producto": producto.clave, "talla": str(talla)}
            )

    # ==========================================
    # CARRITO DE ENTREGADOS
    # ==========================================

    def unidades_en_carrito(self, producto: Producto, talla: str) -> int:
        key = etiqueta_talla(producto, talla)
        return sum(it.cantidad for it in self.entregados
                   if it.producto.clave == producto.clave and it.talla == key)

    def agregar_entregado(self, producto: Producto, talla: Optional[str] = None) -> ItemEntregado:
        """Agrega una unidad al carrito validando stock disponible"""
        if isinstance(producto, ProductoConTallas):
            if talla is None or not str(talla).strip():
                nombre = "del zapato" if isinstance(producto, Zapato) else "de la prenda"
                raise BusinessRuleError(f"Selecciona la talla {nombre} ENTREGADO.")
            registro = producto.talla(str(talla))
            stock = registro.cantidad if registro else 0
        else:
            stock = producto.cantidad

        key = etiqueta_talla(producto, talla)
        if stock <= 0:
            raise BusinessRuleError(f"{producto.nombre} talla {key} no tiene stock.")
        if self.unidades_en_carrito(producto, key) + 1 > stock:
            raise BusinessRuleError(
                f"No hay más unidades de {producto.nombre} talla {key} (stock {stock}).",
                details={"producto": producto.clave, "talla": key, "stock": stock}
            )

        item = ItemEntregado(producto=producto, talla=key, precio=float(producto.precio or 0))
        self.entregados.append(item)
        return item

    def quitar_entregado(self, indice: int) -> ItemEntregado:
        if not 0 <= indice < len(self.entregados):
            raise BusinessRuleError(f"No existe el ítem {indice} en el carrito.")
        return self.entregados.pop(indice)

    # ==========================================
    # TOTALES
    # ==========================================

    @property
    def total_entregado(self) -> float:
        return sum(it.precio * it.cantidad for it in self.entregados)

    @property
    def diferencia(self) -> float:
        """Lo que paga el cliente: entregado - recibido"""
        recibido = self.recibido.precio if self.recibido else 0.0
        return self.total_entregado - recibido

    def validar(self) -> None:
        """
        Valida la devolución completa

        Raises:
            BusinessRuleError: selección faltante o total entregado < recibido
        """
        if self.recibido is None:
            raise BusinessRuleError("Selecciona el producto DEVUELTO (recibido).")
        if not self.entregados:
            raise BusinessRuleError("Agrega al menos un producto ENTREGADO al carrito.")
        if self.total_entregado < self.recibido.precio:
            raise BusinessRuleError(
                MENSAJE_TOTALES,
                details={"entregado": self.total_entregado, "recibido": self.recibido.precio}
            )

    # ==========================================
    # SERIALIZACIÓN
    # ==========================================

    def build_entregado_compat(self) -> Dict[str, Any]:
        """
        Carrito en el formato plano que espera el backend

        Ejemplo:
            producto_entregado: "12; Blusa Luna; B-7"
            talla_entregada:    "38; M; Única"
            color_entregado:    "Negro" (solo si hay ropa)
        """
        productos: List[str] = []
        tallas: List[str] = []
        colores_ropa = set()

        for it in self.entregados:
            p = it.producto
            if isinstance(p, Ropa):
                if not p.nombre or not p.color:
                    raise BusinessRuleError("Para ropa ENTREGADA se requiere nombre y color.")
                productos.append(p.nombre)
                tallas.append(it.talla)
                colores_ropa.add(p.color)
            elif isinstance(p, Bolso):
                productos.append(str(p.id))
                tallas.append(TALLA_BOLSO)
            else:
                productos.append(str(p.id))
                tallas.append(it.talla)

        if len(colores_ropa) > 1:
            raise BusinessRuleError(
                "No se pueden entregar varias prendas de ropa con colores "
                "distintos en la misma devolución."
            )

        compat = {
            "producto_entregado": SEPARADOR_ENTREGADOS.join(productos),
            "talla_entregada": SEPARADOR_ENTREGADOS.join(tallas),
        }
        if colores_ropa:
            compat["color_entregado"] = colores_ropa.pop()
        return compat

    def build_payload(self, usuario_id: int) -> Dict[str, Any]:
        """Payload de POST /devoluciones"""
        self.validar()
        rec = self.recibido
        p = rec.producto

        payload: Dict[str, Any] = {
            "tipo": rec.tipo,
            "usuario_id": int(usuario_id),
            "precio_recibido": rec.precio,
            "producto_recibido": p.nombre if isinstance(p, Ropa) else str(p.id),
            "talla_recibida": rec.talla,
        }
        if p.color:
            payload["color_recibido"] = p.color

        payload.update(self.build_entregado_compat())
        payload["precio_entregado"] = self.total_entregado
        payload["diferencia_pago"] = self.diferencia
        return payload

    # ==========================================
    # STOCK
    # ==========================================

    def plan_ajustes(self) -> List[AjusteStock]:
        """
        Operaciones de tallas: recibido +1, cada entregado -1

        El guard de totales corre primero; si falla no se reconcilia nada.
        Los bolsos no manejan tallas y no generan operaciones.
        """
        self.validar()
        acumulador = AcumuladorAjustes()

        if isinstance(self.recibido.producto, ProductoConTallas):
            acumulador.agregar(self.recibido.producto, self.recibido.talla, +1)

        for it in self.entregados:
            if isinstance(it.producto, ProductoConTallas):
                acumulador.agregar(it.producto, it.talla, -it.cantidad)

        return acumulador.planificar()

    def registrar(self, service, auth) -> Any:
        """
        Envía la devolución

        Args:
            service: DevolucionesService
            auth: AuthContext con el usuario actual
        """
        payload = self.build_payload(auth.require_usuario_id())
        logger.info(f"Registrando devolución: {payload['producto_recibido']} → "
                    f"{payload['producto_entregado']} (diferencia ${payload['diferencia_pago']:,.0f})")
        return service.create(payload)
