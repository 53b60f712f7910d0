"""
Tests de integración end-to-end
Catálogo → editor / flujos → API, con requests.Session simulada
"""
from types import FunctionType

import pandas as pd
import pytest
from pathlib import Path
import sys

# Agregar path del proyecto
sys.path.insert(0, str(Path(__file__).parent.parent))

from config.api import ApiConfig
from api import (
    ApiClient,
    AuthContext,
    CatalogoService,
    DevolucionesService,
    ZapatoTallasGateway,
    RopaTallasGateway
)
from core.errors import ReconciliationApplyError
from flujos import DevolucionWorkflow
from inventario import TallasEditor, Create, Update
from main import TallasPipeline, leer_tallas_deseadas
from conftest import make_response


ZAPATOS = [{
    "id": 12, "nombre": "Bota Andes", "color": "Café", "precio": 180000,
    "tallas": [{"talla": 38, "cantidad": 4}, {"talla": 39, "cantidad": 0}],
}]

ROPA = [{
    "nombre": "Blusa Luna", "color": "Negro", "precio": 80000,
    "tallas": [{"talla": "M", "cantidad": 3}],
}]


def router(session, routes):
    """Responde según (método, ruta); registra las llamadas en session.calls"""
    session.calls = []

    def _request(method, url, json=None, timeout=None):
        path = url.replace("http://api.local", "").split("?")[0]
        session.calls.append((method, path, json))
        for (m, prefix), response in routes.items():
            if m == method and path.startswith(prefix):
                return response() if isinstance(response, FunctionType) else response
        return make_response(200, {})

    session.request.side_effect = _request
    return session


@pytest.fixture
def client(session):
    config = ApiConfig(base_url="http://api.local", timeout=5)
    return ApiClient(config, auth=AuthContext(token="t", usuario_id=1), session=session)


class TestEditorEndToEnd:
    """Editor de tallas contra la API simulada"""

    def test_zapato(self, client, session):
        """Test: 38 → 2, 40 nueva con 3, 39 en 0 no se toca"""
        router(session, {("GET", "/zapatos"): make_response(200, ZAPATOS)})

        zapato = CatalogoService(client).get_zapatos()[0]
        editor = TallasEditor().abrir(zapato)
        editor.set("38", 2)
        editor.set("40", 3)

        assert editor.plan() == [Update("38", 2), Create("40", 3)]

        tallas = editor.guardar(ZapatoTallasGateway(client, zapato.id))

        assert session.calls[1:] == [
            ("PATCH", "/tallas/38/12", {"cantidad": 2}),
            ("POST", "/tallas", {"talla": 40, "cantidad": 3, "zapato_id": 12}),
        ]
        assert [(t.talla, t.cantidad) for t in tallas] == [("38", 2), ("40", 3)]

    def test_ropa_cambio_modo_falla_parcial(self, client, session):
        """Test: una falla no detiene las demás ni modifica la matriz"""
        router(session, {
            ("GET", "/ropa"): make_response(200, ROPA),
            ("POST", "/tallas-ropa"): make_response(409, {"message": "existe"}, reason="Conflict"),
        })

        prenda = CatalogoService(client).get_ropa()[0]
        editor = TallasEditor().abrir(prenda)
        editor.set("M", 1)
        editor.set("S", 2)
        desired = editor.desired.copy()

        with pytest.raises(ReconciliationApplyError) as exc:
            editor.guardar(RopaTallasGateway(client, prenda.nombre, prenda.color))

        assert [op for op, _ in exc.value.failed] == [Create("S", 2)]
        assert exc.value.applied == [Update("M", 1)]
        assert editor.desired == desired


class TestDevolucionEndToEnd:
    """Devolución completa contra la API simulada"""

    def test_registrar(self, client, session):
        router(session, {
            ("GET", "/zapatos"): make_response(200, ZAPATOS),
            ("GET", "/ropa"): make_response(200, ROPA),
            ("POST", "/devoluciones"): make_response(201, {"id": 50, "tipo": "zapato"}),
        })
        catalogo = CatalogoService(client)
        zapato = catalogo.get_zapatos()[0]
        prenda = catalogo.get_ropa()[0]

        flujo = DevolucionWorkflow()
        flujo.set_recibido(prenda, "M")
        flujo.agregar_entregado(zapato, "38")

        devolucion = flujo.registrar(DevolucionesService(client), client.auth)

        assert devolucion.id == 50
        method, path, payload = session.calls[-1]
        assert (method, path) == ("POST", "/devoluciones")
        assert payload["diferencia_pago"] == 100000
        assert payload["usuario_id"] == 1

    def test_guard_no_llama_api(self, client, session):
        """Test: recibido 100.000 vs entregado 80.000 → nada se envía"""
        router(session, {("GET", "/ropa"): make_response(200, ROPA)})
        prenda = CatalogoService(client).get_ropa()[0]

        flujo = DevolucionWorkflow()
        flujo.set_recibido(prenda, "M", precio=100000)
        flujo.agregar_entregado(prenda, "M")

        with pytest.raises(ValueError):
            flujo.registrar(DevolucionesService(client), client.auth)
        assert [c[0] for c in session.calls] == ["GET"]


class TestPipelineCLI:
    """Pipeline de main.py con archivo de tallas"""

    def test_leer_archivo(self, tmp_path):
        path = tmp_path / "tallas.csv"
        pd.DataFrame({'talla': ['38', '40.5', ' 41 '], 'cantidad': [2, 1, 0]}).to_csv(path, index=False)

        matriz = leer_tallas_deseadas(path)
        assert matriz.items() == [("38", 2), ("40.5", 1), ("41", 0)]

    def test_archivo_con_filas_invalidas(self, tmp_path):
        path = tmp_path / "tallas.csv"
        pd.DataFrame({'Talla': ['M', 'L'], 'Cantidad': [1, 'x']}).to_csv(path, index=False)

        with pytest.raises(ValueError, match="filas inválidas"):
            leer_tallas_deseadas(path)

    def test_plan_y_aplicar(self, client, session, tmp_path):
        router(session, {("GET", "/zapatos"): make_response(200, ZAPATOS)})
        archivo = tmp_path / "tallas.xlsx"
        pd.DataFrame({'Talla': [38, 40], 'Cantidad': [2, 3]}).to_excel(archivo, index=False)
        out = tmp_path / "plan.xlsx"

        ops = TallasPipeline(client).run(
            tipo="zapato", archivo=archivo, zapato_id=12, output_path=out, aplicar=True
        )

        assert ops == [Update("38", 2), Create("40", 3)]
        assert ("POST", "/tallas", {"talla": 40, "cantidad": 3, "zapato_id": 12}) in session.calls

        plan = pd.read_excel(out, sheet_name='Plan')
        assert list(plan['Operacion']) == ['UPDATE', 'CREATE']
        final = pd.read_excel(out, sheet_name='Stock final')
        assert final['Cantidad'].sum() == 5

    def test_ropa_cambia_modo(self, client, session, tmp_path):
        """Test: el archivo trae copas → se cambia el modo antes de asignar"""
        router(session, {("GET", "/ropa"): make_response(200, ROPA)})
        archivo = tmp_path / "tallas.csv"
        pd.DataFrame({'Talla': ['M copa 36'], 'Cantidad': [4]}).to_csv(archivo, index=False)

        ops = TallasPipeline(client).run(
            tipo="ropa", archivo=archivo, nombre="blusa luna", color="negro",
            output_path=tmp_path / "plan.xlsx"
        )

        assert ops == [Create("M__COPA_36", 4)]
        assert all(c[0] == "GET" for c in session.calls)

    def test_reporte(self, client, session, tmp_path):
        router(session, {
            ("GET", "/zapatos"): make_response(200, ZAPATOS),
            ("GET", "/ropa"): make_response(200, ROPA),
            ("GET", "/bolsos"): make_response(200, []),
        })
        out = tmp_path / "catalogo.xlsx"

        df = TallasPipeline(client).reporte(out)

        assert len(df) == 3
        assert set(pd.ExcelFile(out).sheet_names) == {'Stock por talla', 'Resumen'}


if __name__ == '__main__':
    pytest.main([__file__, '-v', '--tb=short'])
