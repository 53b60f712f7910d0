"""
Tallas - Ajuste de stock por talla contra la API

Flujo:
1. Carga el producto del catálogo (zapato o prenda)
2. Lee las cantidades deseadas por talla (Excel o CSV: Talla, Cantidad)
3. Calcula el plan de operaciones (Create / Update) y lo guarda en Excel
4. Con --aplicar, envía las operaciones una por una

Uso:
    python main.py --tipo zapato --id 12 --archivo tallas.xlsx
    python main.py --tipo ropa --nombre "Blusa Luna" --color Negro --archivo tallas.csv --aplicar
    python main.py --reporte --out Catalogo.xlsx
"""
import sys
import logging
import argparse
from pathlib import Path
from typing import List, Optional, Tuple

import pandas as pd

# Imports del proyecto
from config import ApiConfig
from api import (
    ApiClient,
    AuthContext,
    CatalogoService,
    RopaTallasGateway,
    ZapatoTallasGateway,
    find_ropa,
    find_zapato
)
from core import BusinessRuleError, infer_mode, normalize_talla
from inventario import TallasEditor, VariantMatrix, ReconciliationOperation
from models import ProductoConTallas, Ropa, Zapato
from processors import CatalogoProcessor

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False):
    """Logging a consola y a tallas.log"""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler('tallas.log', encoding='utf-8')
        ]
    )


def leer_tallas_deseadas(path: Path) -> VariantMatrix:
    """
    Lee el archivo de cantidades deseadas

    Columnas requeridas: Talla, Cantidad (sin importar mayúsculas).
    Tallas repetidas (después de normalizar) son un error.
    """
    if path.suffix.lower() in ('.xlsx', '.xls'):
        df = pd.read_excel(path)
    else:
        df = pd.read_csv(path)

    df.columns = [str(c).strip().capitalize() for c in df.columns]
    faltantes = {'Talla', 'Cantidad'} - set(df.columns)
    if faltantes:
        raise BusinessRuleError(f"{path.name}: faltan columnas {sorted(faltantes)}")

    df = df.dropna(how='all', subset=['Talla', 'Cantidad'])
    df['Talla'] = normalize_talla(df['Talla'])

    cantidades = pd.to_numeric(df['Cantidad'], errors='coerce')
    invalidas = df[cantidades.isna() | (cantidades % 1 != 0) | (df['Talla'] == '')]
    if not invalidas.empty:
        filas = ", ".join(str(i + 2) for i in invalidas.index)
        raise BusinessRuleError(f"{path.name}: filas inválidas (talla o cantidad): {filas}")

    entries = list(zip(df['Talla'], cantidades.astype(int).tolist()))
    return VariantMatrix.from_persisted(entries)


class TallasPipeline:
    """
    Pipeline de ajuste de tallas de UN producto

    Integra:
    - Lectura del catálogo (API)
    - Lectura de cantidades deseadas (archivo)
    - Reconciliación (plan)
    - Aplicación secuencial (opcional)
    """

    def __init__(self, client: ApiClient, debug: bool = False):
        self.client = client
        self.debug = debug
        self.catalogo = CatalogoService(client)

        if debug:
            logging.getLogger().setLevel(logging.DEBUG)
            logger.debug("Modo DEBUG activado")

    def run(
        self,
        tipo: str,
        archivo: Path,
        zapato_id: Optional[int] = None,
        nombre: Optional[str] = None,
        color: Optional[str] = None,
        output_path: Path = Path("Plan_tallas.xlsx"),
        aplicar: bool = False,
        stop_on_error: bool = False
    ) -> List[ReconciliationOperation]:
        """
        Ejecuta el pipeline completo

        Returns:
            Operaciones planificadas (aplicadas si aplicar=True)
        """
        try:
            logger.info("=" * 80)
            logger.info("AJUSTE DE TALLAS")
            logger.info("=" * 80)

            # PASO 1: Producto
            logger.info("PASO 1/4: Cargando producto del catálogo...")
            producto = self._cargar_producto(tipo, zapato_id, nombre, color)
            logger.info(f"  > {producto.etiqueta()} ({len(producto.tallas)} tallas, "
                        f"{producto.total_tallas()} unidades)")

            # PASO 2: Cantidades deseadas
            logger.info(f"\nPASO 2/4: Leyendo cantidades deseadas de {archivo}...")
            deseadas = leer_tallas_deseadas(archivo)
            editor = self._preparar_editor(producto, deseadas)
            logger.info(f"  > {len(deseadas)} tallas leídas")

            # PASO 3: Plan
            logger.info("\nPASO 3/4: Calculando plan...")
            operaciones = editor.plan()
            if not operaciones:
                logger.info("  > Sin cambios: el stock ya coincide")
            for op in operaciones:
                logger.info(f"    {op}")
            self._save_output(editor, operaciones, output_path)

            # PASO 4: Aplicar
            if aplicar and operaciones:
                logger.info(f"\nPASO 4/4: Aplicando {len(operaciones)} operaciones...")
                gateway = self._gateway(producto)
                tallas = editor.guardar(gateway, stop_on_error=stop_on_error)
                logger.info(f"  > Tallas finales: {', '.join(f'{t.talla}={t.cantidad}' for t in tallas)}")
            else:
                logger.info("\nPASO 4/4: Omitido (usa --aplicar para enviar los cambios)")

            logger.info("\n" + "=" * 80)
            logger.info("PIPELINE COMPLETADO")
            logger.info("=" * 80)

            return operaciones

        except Exception as e:
            logger.error(f"\nERROR EN PIPELINE: {e}", exc_info=True)
            raise

    def reporte(self, output_path: Path = Path("Catalogo_tallas.xlsx")) -> pd.DataFrame:
        """Exporta el stock por talla de todo el catálogo"""
        logger.info("Generando reporte de catálogo...")
        productos = (self.catalogo.get_zapatos()
                     + self.catalogo.get_ropa()
                     + self.catalogo.get_bolsos())

        processor = CatalogoProcessor(debug=self.debug)
        df = processor.process(productos)
        resumen = processor.resumen_por_producto(df)

        with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
            df.to_excel(writer, sheet_name='Stock por talla', index=False)
            resumen.to_excel(writer, sheet_name='Resumen', index=False)

        logger.info(f"  > {len(df):,} filas, {len(resumen):,} productos → {output_path}")
        return df

    def _cargar_producto(self,
                         tipo: str,
                         zapato_id: Optional[int],
                         nombre: Optional[str],
                         color: Optional[str]) -> ProductoConTallas:
        if tipo == "zapato":
            if zapato_id is None:
                raise BusinessRuleError("--id es obligatorio para zapatos")
            producto = find_zapato(self.catalogo.get_zapatos(), zapato_id)
            if producto is None:
                raise BusinessRuleError(f"No existe el zapato {zapato_id}")
            return producto

        if tipo == "ropa":
            if not nombre or not color:
                raise BusinessRuleError("--nombre y --color son obligatorios para ropa")
            producto = find_ropa(self.catalogo.get_ropa(), nombre, color)
            if producto is None:
                raise BusinessRuleError(f"No existe la prenda {nombre} / {color}")
            return producto

        raise BusinessRuleError(f"El tipo {tipo} no maneja tallas")

    def _preparar_editor(self, producto: ProductoConTallas, deseadas: VariantMatrix) -> TallasEditor:
        """
        Abre el editor y vuelca las cantidades del archivo

        Ropa: si el archivo usa otro modo (p. ej. agrega copas) se cambia
        el modo antes de asignar. Tallas ausentes del archivo no se tocan.
        """
        editor = TallasEditor().abrir(producto)

        if isinstance(producto, Ropa) and len(deseadas):
            modo = infer_mode(deseadas.keys())
            if modo != editor.modo:
                logger.info(f"  > Cambio de modo: {editor.modo.value} → {modo.value}")
                editor.cambiar_modo(modo)

        for talla, cantidad in deseadas.items():
            editor.set(talla, cantidad)

        return editor

    def _gateway(self, producto: ProductoConTallas):
        if isinstance(producto, Zapato):
            return ZapatoTallasGateway(self.client, producto.id)
        return RopaTallasGateway(self.client, producto.nombre, producto.color)

    def _save_output(self,
                     editor: TallasEditor,
                     operaciones: List[ReconciliationOperation],
                     output_path: Path):
        """
        Guarda el plan en Excel

        Hojas: Plan (operación, talla, antes, después) y Stock final
        """
        plan = pd.DataFrame(
            [(op.kind, op.key, editor.baseline.get(op.key), op.quantity) for op in operaciones],
            columns=['Operacion', 'Talla', 'Antes', 'Despues']
        )
        final = editor.baseline.copy()
        for op in operaciones:
            final.set(op.key, op.quantity)

        try:
            with pd.ExcelWriter(output_path, engine='openpyxl') as writer:
                plan.to_excel(writer, sheet_name='Plan', index=False)
                final.to_frame().to_excel(writer, sheet_name='Stock final', index=False)
            logger.info(f"  > Plan guardado en {output_path}")
        except OSError as e:
            logger.warning(f"  ! No se pudo guardar el plan (no crítico): {e}")


def build_client(config: ApiConfig) -> Tuple[ApiClient, AuthContext]:
    auth = AuthContext.from_token(config.token, usuario_id=config.usuario_id)
    return ApiClient(config, auth=auth), auth


def main():
    """Punto de entrada principal"""
    parser = argparse.ArgumentParser(
        description='Tallas - Ajuste de stock por talla',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Ejemplos de uso:
  python main.py --tipo zapato --id 12 --archivo tallas.xlsx
  python main.py --tipo ropa --nombre "Blusa Luna" --color Negro --archivo tallas.csv --aplicar
  python main.py --reporte --out Catalogo.xlsx
        """
    )

    parser.add_argument('--tipo', choices=['zapato', 'ropa'], help='Tipo de producto')
    parser.add_argument('--id', type=int, dest='zapato_id', help='ID del zapato')
    parser.add_argument('--nombre', help='Nombre de la prenda')
    parser.add_argument('--color', help='Color de la prenda')
    parser.add_argument('--archivo', type=Path, help='Excel/CSV con columnas Talla, Cantidad')

    parser.add_argument(
        '--out',
        type=Path,
        default=None,
        help='Archivo de salida (default: Plan_tallas.xlsx o Catalogo_tallas.xlsx)'
    )

    parser.add_argument(
        '--aplicar',
        action='store_true',
        help='Enviar las operaciones a la API (sin esto solo se planifica)'
    )

    parser.add_argument(
        '--stop-on-error',
        action='store_true',
        help='Detenerse en la primera operación fallida'
    )

    parser.add_argument(
        '--reporte',
        action='store_true',
        help='Exportar el stock por talla de todo el catálogo'
    )

    parser.add_argument(
        '--debug',
        action='store_true',
        help='Activar modo debug (logs detallados)'
    )

    args = parser.parse_args()
    setup_logging(args.debug)

    if not args.reporte and (not args.tipo or not args.archivo):
        parser.error("--tipo y --archivo son obligatorios (o usa --reporte)")

    # Cargar configuracion de la API
    try:
        api_config = ApiConfig.from_env()
        logger.info(f"Configuracion de API: {api_config}")
    except ValueError as e:
        logger.error(f"Error cargando configuracion de API: {e}")
        logger.error("Verifica que el archivo .env existe y tiene API_BASE_URL")
        sys.exit(1)

    client, auth = build_client(api_config)
    logger.debug(f"Autenticación: {auth}")

    try:
        with client:
            pipeline = TallasPipeline(client, debug=args.debug)
            if args.reporte:
                pipeline.reporte(args.out or Path("Catalogo_tallas.xlsx"))
            else:
                pipeline.run(
                    tipo=args.tipo,
                    archivo=args.archivo,
                    zapato_id=args.zapato_id,
                    nombre=args.nombre,
                    color=args.color,
                    output_path=args.out or Path("Plan_tallas.xlsx"),
                    aplicar=args.aplicar,
                    stop_on_error=args.stop_on_error
                )

        sys.exit(0)

    except KeyboardInterrupt:
        logger.warning("\nEjecucion cancelada por el usuario")
        sys.exit(1)
    except Exception as e:
        logger.error(f"\nError fatal: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
