"""
Procesador del catálogo
Aplana zapatos, ropa y bolsos a una tabla de stock por talla
"""
from typing import Iterable, List
import logging

import numpy as np
import pandas as pd

from config.settings import TALLA_BOLSO
from core.normalization import (
    strip_all_string_columns,
    clean_nombre,
    normalize_talla
)
from core.tallaje import infer_mode, talla_sort_key
from models.catalogo import Bolso, Producto, ProductoConTallas, Zapato

logger = logging.getLogger(__name__)

COLUMNAS = ['Tipo', 'Clave', 'Producto', 'Color', 'Talla', 'Cantidad', 'Modo']


class CatalogoProcessor:
    """
    Pipeline de transformación del catálogo.

    Entrada: modelos Zapato / Ropa / Bolso ya validados

    Salida (una fila por producto y talla):
        - Tipo, Clave, Producto, Color, Talla, Cantidad, Modo

    Modo solo aplica a ropa (XS_L, UNICA, ...); zapatos quedan como
    "NUMERICA" y bolsos como "SIN_TALLA".
    """

    def __init__(self, debug: bool = False):
        self.debug = debug
        self._log_step = logger.info if debug else logger.debug

    def process(self, productos: Iterable[Producto]) -> pd.DataFrame:
        """
        Pipeline completo

        Args:
            productos: Modelos del catálogo (mezcla de tipos permitida)

        Returns:
            DataFrame con COLUMNAS, ordenado por tipo, producto y talla
        """
        productos = list(productos)
        if not productos:
            logger.warning("Catálogo vacío")
            return pd.DataFrame(columns=COLUMNAS)

        self._log_step(f"[1/6] Inicio: {len(productos):,} productos")

        # 1. Aplanar a filas
        df = self._flatten(productos)

        # 2. Limpiar texto
        df = self._clean_text(df)

        # 3. Normalizar tallas
        df = self._normalize_talla(df)

        # 4. Modo por producto
        df = self._assign_mode(df)

        # 5. Tipos
        df = self._convert_types(df)

        # 6. Orden natural
        df = self._sort(df)

        self._log_step(f"[6/6] Final: {len(df):,} filas")

        return df

    def _flatten(self, productos: List[Producto]) -> pd.DataFrame:
        """
        PASO 1: Una fila por talla

        Bolsos: una sola fila con talla "Única" y su cantidad.
        Productos con tallas pero sin registros: sin filas.
        """
        self._log_step("[1/6] Aplanando productos a filas por talla")

        rows = []
        for p in productos:
            base = {'Tipo': p.tipo, 'Clave': p.clave, 'Producto': p.nombre, 'Color': p.color or ''}
            if isinstance(p, ProductoConTallas):
                for t in p.tallas:
                    rows.append({**base, 'Talla': t.talla, 'Cantidad': t.cantidad})
            elif isinstance(p, Bolso):
                rows.append({**base, 'Talla': TALLA_BOLSO, 'Cantidad': p.cantidad})

        df = pd.DataFrame(rows, columns=COLUMNAS[:-1])
        self._log_step(f"  {len(df):,} filas")
        return df

    def _clean_text(self, df: pd.DataFrame) -> pd.DataFrame:
        """PASO 2: Strip + caracteres de control en nombre y color"""
        self._log_step("[2/6] Limpiando texto")

        df = strip_all_string_columns(df)
        df['Producto'] = clean_nombre(df['Producto'])
        df['Color'] = clean_nombre(df['Color'].fillna(''))
        return df

    def _normalize_talla(self, df: pd.DataFrame) -> pd.DataFrame:
        """
        PASO 3: Talla a clave canónica

        Bolsos conservan "Única" (no son tallas de ropa).
        """
        self._log_step("[3/6] Normalizando tallas")

        mask = df['Tipo'] != Bolso.tipo
        df.loc[mask, 'Talla'] = normalize_talla(df.loc[mask, 'Talla'])

        if self.debug and mask.any():
            sample = df.loc[mask, 'Talla'].unique()[:10]
            logger.debug(f"  Tallas sample: {list(sample)}")

        return df

    def _assign_mode(self, df: pd.DataFrame) -> pd.DataFrame:
        """PASO 4: Modo de tallaje inferido por producto"""
        self._log_step("[4/6] Infiriendo modo de tallaje")

        modos = {}
        for clave, grupo in df.groupby('Clave'):
            tipo = grupo['Tipo'].iloc[0]
            if tipo == Zapato.tipo:
                modos[clave] = 'NUMERICA'
            elif tipo == Bolso.tipo:
                modos[clave] = 'SIN_TALLA'
            else:
                modos[clave] = infer_mode(grupo['Talla']).value

        df['Modo'] = df['Clave'].map(modos)
        return df

    def _convert_types(self, df: pd.DataFrame) -> pd.DataFrame:
        """PASO 5: Cantidad entera"""
        self._log_step("[5/6] Convirtiendo tipos")

        df['Cantidad'] = pd.to_numeric(df['Cantidad'], errors='coerce').fillna(0).astype(int)
        for col in ['Tipo', 'Clave', 'Producto', 'Color', 'Talla', 'Modo']:
            df[col] = df[col].astype(str)
        return df

    def _sort(self, df: pd.DataFrame) -> pd.DataFrame:
        """PASO 6: Tipo, producto y talla en orden natural"""
        self._log_step("[6/6] Ordenando")

        rango = {t: i for i, t in enumerate(sorted(df['Talla'].unique(), key=talla_sort_key))}
        df = df.assign(_orden=df['Talla'].map(rango))
        df = df.sort_values(['Tipo', 'Producto', 'Color', '_orden'], kind='stable')
        return df.drop(columns='_orden').reset_index(drop=True)[COLUMNAS]

    @staticmethod
    def resumen_por_producto(df: pd.DataFrame) -> pd.DataFrame:
        """
        Totales por producto

        Columnas: Tipo, Clave, Producto, Color, Modo, Tallas, Con_Stock, Total
        """
        if df.empty:
            return pd.DataFrame(columns=['Tipo', 'Clave', 'Producto', 'Color', 'Modo',
                                         'Tallas', 'Con_Stock', 'Total'])

        resumen = (df.groupby(['Tipo', 'Clave', 'Producto', 'Color', 'Modo'], sort=False)
                   .agg(Tallas=('Talla', 'count'),
                        Con_Stock=('Cantidad', lambda s: int(np.count_nonzero(s.to_numpy() > 0))),
                        Total=('Cantidad', 'sum'))
                   .reset_index())
        resumen['Total'] = resumen['Total'].astype(int)
        return resumen
