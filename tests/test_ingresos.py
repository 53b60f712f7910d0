"""
Tests para el flujo de ingreso de mercancía
"""
from unittest.mock import MagicMock

import pytest
from pathlib import Path
import sys

# Agregar path del proyecto
sys.path.insert(0, str(Path(__file__).parent.parent))

from api.auth import AuthContext
from core.errors import ApiError, BusinessRuleError
from flujos.ingresos import IngresoWorkflow, LineaIngreso
from inventario.reconciliacion import Create, Update


class TestValidacion:
    """Tests para validar()"""

    def test_errores_por_linea(self, zapato, prenda):
        """Test: todos los errores se reportan juntos"""
        flujo = IngresoWorkflow()
        flujo.agregar_linea("zapato", zapato, "38", 0)
        flujo.agregar_linea("zapato", None, "38", 1)
        flujo.agregar_linea("ropa", prenda, "", 2)
        flujo.agregar_linea("bolso", None, None, 1)
        flujo.agregar_linea("ropa", None, "M", "abc")

        with pytest.raises(BusinessRuleError) as exc:
            flujo.validar()

        assert str(exc.value).split("\n") == [
            "Línea 1: cantidad inválida.",
            "Línea 2: selecciona un zapato.",
            "Línea 3: ingresa una talla.",
            "Línea 4: selecciona el bolso.",
            "Línea 5: cantidad inválida.",
        ]

    @pytest.mark.parametrize("cantidad", [0, -1, 1.5, "", None, True])
    def test_cantidad_invalida(self, bolso, cantidad):
        flujo = IngresoWorkflow()
        flujo.agregar_linea("bolso", bolso, None, cantidad)
        with pytest.raises(BusinessRuleError, match="cantidad inválida"):
            flujo.validar()

    def test_cantidad_texto_entero(self, bolso):
        flujo = IngresoWorkflow()
        flujo.agregar_linea("bolso", bolso, None, "3")
        assert flujo.validar() == [3]

    def test_sin_lineas(self):
        with pytest.raises(BusinessRuleError):
            IngresoWorkflow().validar()

    def test_tipo_desconocido(self):
        with pytest.raises(BusinessRuleError):
            IngresoWorkflow().agregar_linea("cinturon")

    def test_talla_zapato_no_numerica(self, zapato):
        """Test: "ABC" se rechaza antes de planear o enviar"""
        flujo = IngresoWorkflow()
        flujo.agregar_linea("zapato", zapato, "ABC", 1)

        with pytest.raises(BusinessRuleError) as exc:
            flujo.plan_ajustes()

        assert str(exc.value) == "Línea 1: la talla del zapato debe ser numérica."


class TestPayloads:
    """Tests para build_payloads"""

    def test_payload_por_tipo(self, zapato, prenda, bolso):
        flujo = IngresoWorkflow()
        flujo.agregar_linea("zapato", zapato, "38", 2)
        flujo.agregar_linea("ropa", prenda, "m", 1)
        flujo.agregar_linea("bolso", bolso, None, 4)

        payloads = flujo.build_payloads(usuario_id=3)

        assert payloads == [
            {"tipo": "zapato", "zapato_id": 12, "talla": "38", "cantidad": 2, "usuario_id": 3},
            {"tipo": "ropa", "ropa_nombre": "Blusa Luna", "ropa_color": "Negro",
             "talla": "M", "cantidad": 1, "usuario_id": 3},
            {"tipo": "bolso", "bolso_id": "B-7", "cantidad": 4, "usuario_id": 3},
        ]

    def test_talla_zapato_con_coma(self, zapato):
        flujo = IngresoWorkflow()
        flujo.agregar_linea("zapato", zapato, "38,5", 1)

        assert flujo.build_payloads(usuario_id=3)[0]["talla"] == "38.5"

    def test_tallas_disponibles(self, zapato, prenda, bolso):
        assert "38.5" in IngresoWorkflow.tallas_disponibles(LineaIngreso("zapato", zapato))
        assert IngresoWorkflow.tallas_disponibles(LineaIngreso("ropa", prenda)) == ["S", "M", "L"]
        assert IngresoWorkflow.tallas_disponibles(LineaIngreso("bolso", bolso)) == []

    def test_eliminar_linea(self, bolso):
        flujo = IngresoWorkflow()
        flujo.agregar_linea("bolso", bolso)
        flujo.eliminar_linea(0)
        assert flujo.lineas == []
        with pytest.raises(BusinessRuleError):
            flujo.eliminar_linea(0)


class TestRegistrar:
    """Tests para el envío secuencial"""

    @pytest.fixture
    def flujo(self, zapato, bolso):
        f = IngresoWorkflow()
        f.agregar_linea("zapato", zapato, "38", 2)
        f.agregar_linea("bolso", bolso, None, 1)
        f.agregar_linea("zapato", zapato, "40", 1)
        return f

    def test_una_peticion_por_linea(self, flujo):
        service = MagicMock()
        creadas = flujo.registrar(service, AuthContext(usuario_id=1))

        assert len(creadas) == 3
        assert service.create.call_count == 3
        assert service.create.call_args_list[1][0][0]["tipo"] == "bolso"

    def test_falla_aborta(self, flujo):
        """Test: la primera falla detiene el envío con mensaje agregado"""
        service = MagicMock()
        service.create.side_effect = [None, ApiError(400, "Bad Request", {"message": "stock"}), None]

        with pytest.raises(BusinessRuleError) as exc:
            flujo.registrar(service, AuthContext(usuario_id=1))

        assert service.create.call_count == 2
        mensaje = str(exc.value)
        assert mensaje.startswith("No se pudo crear el ingreso.")
        assert "Línea 2: HTTP 400 Bad Request" in mensaje
        assert "(1 de 3 líneas registradas)" in mensaje

    def test_validacion_antes_de_enviar(self, zapato):
        flujo = IngresoWorkflow()
        flujo.agregar_linea("zapato", zapato, None, 1)
        service = MagicMock()

        with pytest.raises(BusinessRuleError):
            flujo.registrar(service, AuthContext(usuario_id=1))
        service.create.assert_not_called()


class TestAjustesIngreso:
    """Tests para el plan de stock del ingreso"""

    def test_suma_por_talla(self, zapato, prenda, bolso):
        flujo = IngresoWorkflow()
        flujo.agregar_linea("zapato", zapato, "38", 2)
        flujo.agregar_linea("zapato", zapato, "40", 1)
        flujo.agregar_linea("zapato", zapato, "38", 1)
        flujo.agregar_linea("ropa", prenda, "l", 5)
        flujo.agregar_linea("bolso", bolso, None, 3)

        ajustes = {a.clave: a.operaciones for a in flujo.plan_ajustes()}

        assert ajustes == {
            "zapato:12": [Update("38", 7), Create("40", 1)],
            "ropa:Blusa Luna|Negro": [Update("L", 5)],
        }


if __name__ == '__main__':
    pytest.main([__file__, '-v', '--tb=short'])
