"""
Cliente HTTP para la API REST del inventario
"""
from typing import Any, Dict, Optional
import logging

import requests

from config.api import ApiConfig
from core.errors import ApiError
from .auth import AuthContext

logger = logging.getLogger(__name__)


def error_from_response(response: requests.Response) -> ApiError:
    """Construye ApiError con el cuerpo JSON si lo hay"""
    detail = None
    try:
        detail = response.json()
    except ValueError:
        detail = None
    return ApiError(response.status_code, response.reason or "", detail)


class ApiClient:
    """Administrador de la sesión HTTP contra la API"""

    def __init__(self,
                 config: ApiConfig,
                 auth: Optional[AuthContext] = None,
                 session: Optional[requests.Session] = None):
        self.config = config
        self.auth = auth or AuthContext()
        self._session = session

    def connect(self) -> requests.Session:
        """Crea la sesión si no existe"""
        if not self.config.base_url:
            raise ValueError("API_BASE_URL requerido para llamar a la API")

        if self._session is None:
            logger.info(f"Abriendo sesión HTTP contra {self.config.base_url}")
            self._session = requests.Session()

        self._session.headers.update({"Content-Type": "application/json"})
        self._session.headers.update(self.auth.headers())
        return self._session

    def close(self):
        """Cierra la sesión activa"""
        if self._session:
            self._session.close()
            self._session = None
            logger.info("Sesión HTTP cerrada")

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def request(self,
                method: str,
                path: str,
                params: Optional[Dict[str, Any]] = None,
                json: Any = None) -> Any:
        """
        Ejecuta una petición y retorna el JSON de respuesta

        Raises:
            ApiError: respuesta no 2xx o sin conexión (status 0)
        """
        session = self.connect()
        url = self.config.url(path, params)
        logger.debug(f"{method} {url}")

        try:
            response = session.request(method, url, json=json, timeout=self.config.timeout)
        except requests.RequestException as e:
            logger.error(f"Error de red en {method} {url}: {e}")
            raise ApiError(0, "Sin conexión", str(e)) from e

        if not response.ok:
            error = error_from_response(response)
            logger.error(f"{method} {url} → {error}")
            raise error

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return self.request("GET", path, params=params)

    def post(self, path: str, payload: Any) -> Any:
        return self.request("POST", path, json=payload)

    def patch(self, path: str, payload: Any) -> Any:
        return self.request("PATCH", path, json=payload)

    def delete(self, path: str) -> Any:
        return self.request("DELETE", path)
