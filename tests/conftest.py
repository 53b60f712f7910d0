"""
Fixtures compartidas: productos de catálogo y sesión HTTP simulada
"""
import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Agregar path del proyecto
sys.path.insert(0, str(Path(__file__).parent.parent))

from models import Zapato, Ropa, Bolso


def make_response(status: int = 200, body=None, reason: str = "OK"):
    """Respuesta de requests simulada"""
    response = MagicMock()
    response.status_code = status
    response.ok = 200 <= status < 300
    response.reason = reason
    response.content = b"" if body is None else json.dumps(body).encode("utf-8")
    if body is None:
        response.json.side_effect = ValueError("sin cuerpo")
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def zapato():
    """Zapato con 38 en stock y 39 agotado"""
    return Zapato.model_validate({
        "id": 12,
        "nombre": "Bota Andes",
        "color": "Café",
        "precio": 180000,
        "categoriaNombre": "Botas",
        "tallas": [
            {"talla": 38, "cantidad": 4},
            {"talla": 39, "cantidad": 0, "cantidad_hist": 2},
        ],
    })


@pytest.fixture
def prenda():
    """Prenda en modo XS-L"""
    return Ropa.model_validate({
        "nombre": "Blusa Luna",
        "color": "Negro",
        "precio": 80000,
        "tallas": [
            {"talla": "S", "cantidad": 2},
            {"talla": "M", "cantidad": 3},
            {"talla": "L", "cantidad": 0},
        ],
    })


@pytest.fixture
def brasier():
    """Prenda con copas"""
    return Ropa.model_validate({
        "nombre": "Brasier Sol",
        "color": "Rojo",
        "precio": 60000,
        "tallas": [
            {"talla": "M copa 36", "cantidad": 1},
            {"talla": "S__COPA_38", "cantidad": 2},
        ],
    })


@pytest.fixture
def bolso():
    return Bolso.model_validate({
        "id": "B-7",
        "nombre": "Bolso Mar",
        "color": "Azul",
        "precio": 50000,
        "cantidad": 2,
    })


@pytest.fixture
def session():
    """requests.Session simulada; por defecto responde 200 {}"""
    s = MagicMock()
    s.headers = {}
    s.request.return_value = make_response(200, {})
    return s
