"""
Modelos del catálogo (zapatos, ropa, bolsos)

Todo JSON entrante del backend se valida aquí antes de usarse;
las tallas se tratan como texto hasta pasar por normalize_key.
"""
from typing import Any, ClassVar, List, Optional, Tuple

from pydantic import Field, field_validator

from core.normalization import normalize_key
from .base import BaseSchema


def formato_precio(precio: float) -> str:
    """
    Precio con separadores es-CO

    Ejemplos:
        120000 → "120.000"
        99.5   → "99,5"
    """
    texto = f"{precio:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
    return texto.rstrip("0").rstrip(",")


class TallaStock(BaseSchema):
    """Registro de talla de un producto"""

    talla: str = Field(..., description="Etiqueta de talla tal como viene del backend")
    cantidad: int = Field(0, description="Stock actual")
    cantidad_hist: Optional[int] = Field(None, description="Stock histórico")
    existio: Optional[bool] = Field(None, description="La talla existió alguna vez")

    @field_validator("talla", mode="before")
    @classmethod
    def talla_como_texto(cls, v: Any) -> str:
        """38 → "38"; 38.0 → "38"; 38.5 → "38.5" """
        if isinstance(v, float) and v.is_integer():
            return str(int(v))
        return v if isinstance(v, str) else str(v)

    @field_validator("cantidad", mode="before")
    @classmethod
    def cantidad_vacia(cls, v: Any) -> Any:
        return 0 if v is None or v == "" else v

    def existed(self) -> bool:
        """
        La talla existió: tiene stock, tuvo stock o el backend lo marca

        Solo se aceptan devoluciones de tallas que existieron.
        """
        return (self.cantidad > 0
                or (self.cantidad_hist or 0) > 0
                or bool(self.existio))


class Producto(BaseSchema):
    """Campos comunes a todo producto del catálogo"""

    tipo: ClassVar[str] = ""

    nombre: str
    color: Optional[str] = None
    precio: float = 0.0
    observaciones: Optional[str] = None

    def etiqueta(self) -> str:
        """Texto del buscador: "nombre — color — $precio" """
        partes = [self.nombre]
        if self.color:
            partes.append(self.color)
        partes.append(f"${formato_precio(self.precio)}")
        return " — ".join(partes)

    @property
    def clave(self) -> str:
        raise NotImplementedError


class ProductoConTallas(Producto):
    """Producto que maneja stock por talla"""

    tallas: List[TallaStock] = Field(default_factory=list)

    @field_validator("tallas", mode="before")
    @classmethod
    def tallas_nulas(cls, v: Any) -> Any:
        return v or []

    def total_tallas(self) -> int:
        return sum(t.cantidad for t in self.tallas)

    def variant_entries(self) -> List[Tuple[str, int]]:
        """Pares (etiqueta, cantidad) para VariantMatrix.from_persisted"""
        return [(t.talla, t.cantidad) for t in self.tallas]

    def talla(self, etiqueta: str) -> Optional[TallaStock]:
        """Busca un registro de talla comparando claves normalizadas"""
        key = normalize_key(etiqueta)
        for t in self.tallas:
            if normalize_key(t.talla) == key:
                return t
        return None


class Zapato(ProductoConTallas):
    tipo: ClassVar[str] = "zapato"

    id: int
    ubicacion: Optional[str] = None
    imagen_url: Optional[str] = None
    categoria_nombre: Optional[str] = Field(None, alias="categoriaNombre")

    @property
    def clave(self) -> str:
        return f"zapato:{self.id}"


class Ropa(ProductoConTallas):
    """Prenda: la PK en el backend es (nombre, color)"""
    tipo: ClassVar[str] = "ropa"

    id: Optional[str] = None
    color: str
    categoria_nombre: Optional[str] = Field(None, alias="categoriaNombre")

    @field_validator("id", mode="before")
    @classmethod
    def id_como_texto(cls, v: Any) -> Optional[str]:
        return None if v is None else str(v)

    @property
    def clave(self) -> str:
        return f"ropa:{self.nombre}|{self.color}"


class Bolso(Producto):
    """Bolso: sin tallas, stock en un solo campo"""
    tipo: ClassVar[str] = "bolso"

    id: str
    cantidad: int = 0

    @field_validator("id", mode="before")
    @classmethod
    def id_como_texto(cls, v: Any) -> str:
        return str(v)

    @property
    def clave(self) -> str:
        return f"bolso:{self.id}"
