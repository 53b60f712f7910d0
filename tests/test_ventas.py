"""
Tests para el flujo de venta
"""
from datetime import date
from unittest.mock import MagicMock

import pytest
from pathlib import Path
import sys

# Agregar path del proyecto
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.auth import AuthContext
from core.errors import ApiError, BusinessRuleError
from flujos.ventas import VentaWorkflow
from inventario.reconciliacion import Update


class TestSeleccion:
    """Tests para seleccionar()"""

    def test_precio_del_inventario(self, zapato):
        flujo = VentaWorkflow(fecha=date(2025, 3, 1))
        flujo.seleccionar(zapato, "38")

        assert flujo.talla == "38"
        assert flujo.precio == 180000

    def test_precio_ajustado(self, prenda):
        """Test: descuento sobre el precio del inventario"""
        flujo = VentaWorkflow(fecha="2025-03-01")
        flujo.seleccionar(prenda, "m", precio=70000)

        assert flujo.talla == "M"
        assert flujo.validar() == 70000.0

    def test_talla_sin_stock(self, zapato, prenda):
        with pytest.raises(BusinessRuleError, match="no tiene stock"):
            VentaWorkflow().seleccionar(zapato, "39")
        with pytest.raises(BusinessRuleError, match="no tiene stock"):
            VentaWorkflow().seleccionar(prenda, "XS")

    def test_talla_requerida(self, prenda):
        with pytest.raises(BusinessRuleError, match="talla de la prenda"):
            VentaWorkflow().seleccionar(prenda)

    def test_talla_zapato_numerica(self, zapato):
        with pytest.raises(BusinessRuleError, match="numérica"):
            VentaWorkflow().seleccionar(zapato, "M")

    def test_bolso_agotado(self, bolso):
        bolso.cantidad = 0
        with pytest.raises(BusinessRuleError, match="no tiene stock"):
            VentaWorkflow().seleccionar(bolso)

    def test_tallas_con_stock(self, zapato, prenda, bolso):
        assert VentaWorkflow.tallas_con_stock(zapato) == ["38"]
        assert VentaWorkflow.tallas_con_stock(prenda) == ["S", "M"]
        assert VentaWorkflow.tallas_con_stock(bolso) == []


class TestValidacion:
    """Tests para validar()"""

    def test_sin_producto(self):
        with pytest.raises(BusinessRuleError, match="Selecciona el producto"):
            VentaWorkflow(fecha="2025-03-01").validar()

    def test_sin_fecha(self, bolso):
        flujo = VentaWorkflow()
        flujo.seleccionar(bolso)
        with pytest.raises(BusinessRuleError, match="fecha es obligatoria"):
            flujo.validar()

    def test_fecha_invalida(self, bolso):
        flujo = VentaWorkflow(fecha="ayer")
        flujo.seleccionar(bolso)
        with pytest.raises(BusinessRuleError, match="Fecha inválida"):
            flujo.validar()

    @pytest.mark.parametrize("precio", ["", "abc", -1, float("nan")])
    def test_precio_invalido(self, bolso, precio):
        flujo = VentaWorkflow(fecha="2025-03-01")
        flujo.seleccionar(bolso, precio=precio)
        with pytest.raises(BusinessRuleError, match="precio es obligatorio"):
            flujo.validar()


class TestPayload:
    """Tests para build_payload()"""

    def test_zapato(self, zapato):
        flujo = VentaWorkflow(fecha=date(2025, 3, 1))
        flujo.seleccionar(zapato, "38")

        assert flujo.build_payload(usuario_id=2) == {
            "tipo": "zapato", "precio": 180000.0, "usuario_id": 2,
            "fecha": "2025-03-01", "zapato_id": 12, "talla": "38",
        }

    def test_ropa(self, prenda):
        flujo = VentaWorkflow(fecha="2025-03-01")
        flujo.seleccionar(prenda, "S")
        payload = flujo.build_payload(usuario_id=2)

        assert payload["nombre_producto"] == "Blusa Luna"
        assert payload["color"] == "Negro"
        assert payload["talla"] == "S"

    def test_bolso(self, bolso):
        flujo = VentaWorkflow(fecha="2025-03-01")
        flujo.seleccionar(bolso)
        payload = flujo.build_payload(usuario_id=2)

        assert payload["bolso_id"] == "B-7"
        assert "talla" not in payload


class TestAjustesVenta:
    """Tests para el plan de stock de la venta"""

    def test_talla_vendida_baja_uno(self, prenda):
        flujo = VentaWorkflow(fecha="2025-03-01")
        flujo.seleccionar(prenda, "M")

        ajustes = flujo.plan_ajustes()

        assert len(ajustes) == 1
        assert ajustes[0].operaciones == [Update("M", 2)]

    def test_ultima_unidad_queda_en_cero(self, zapato):
        zapato.tallas[0].cantidad = 1
        flujo = VentaWorkflow(fecha="2025-03-01")
        flujo.seleccionar(zapato, "38")

        assert flujo.plan_ajustes()[0].operaciones == [Update("38", 0)]

    def test_bolso_sin_operaciones(self, bolso):
        flujo = VentaWorkflow(fecha="2025-03-01")
        flujo.seleccionar(bolso)
        assert flujo.plan_ajustes() == []


class TestRegistrar:
    """Tests para el envío"""

    def test_registrar(self, zapato):
        flujo = VentaWorkflow(fecha="2025-03-01")
        flujo.seleccionar(zapato, "38")
        service = MagicMock()

        flujo.registrar(service, AuthContext(usuario_id=5))

        payload = service.create.call_args[0][0]
        assert payload["usuario_id"] == 5
        assert payload["zapato_id"] == 12

    def test_falla_http(self, bolso):
        flujo = VentaWorkflow(fecha="2025-03-01")
        flujo.seleccionar(bolso)
        service = MagicMock()
        service.create.side_effect = ApiError(400, "Bad Request", {"message": "sin stock"})

        with pytest.raises(BusinessRuleError) as exc:
            flujo.registrar(service, AuthContext(usuario_id=5))

        assert str(exc.value).startswith("No se pudo crear la venta.\nHTTP 400 Bad Request")

    def test_sin_usuario_no_envia(self, bolso):
        flujo = VentaWorkflow(fecha="2025-03-01")
        flujo.seleccionar(bolso)
        service = MagicMock()

        with pytest.raises(BusinessRuleError):
            flujo.registrar(service, AuthContext())
        service.create.assert_not_called()


if __name__ == '__main__':
    pytest.main([__file__, '-v', '--tb=short'])
