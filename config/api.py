"""
Configuración de conexión a la API REST del inventario
"""
from dataclasses import dataclass
from pathlib import Path
import os
from typing import Optional, Dict, Any
from urllib.parse import urlencode


@dataclass
class ApiConfig:
    """Configuración de conexión a la API"""
    base_url: str = ""
    timeout: float = 30.0
    token: Optional[str] = None
    usuario_id: Optional[int] = None

    def __post_init__(self):
        self.base_url = (self.base_url or "").rstrip("/")

    @classmethod
    def from_env(cls, env_file: Optional[Path] = None):
        """
        Carga configuración desde variables de entorno o archivo .env

        Variables esperadas:
        - API_BASE_URL: raíz de la API (ej.: http://localhost:3001).
          Si está vacía se usan rutas relativas.
        - API_TIMEOUT: timeout en segundos (opcional, default 30)
        - API_TOKEN: JWT de acceso (opcional)
        - API_USUARIO_ID: usuario por defecto si el token no trae id (opcional)
        """
        from dotenv import load_dotenv

        # Cargar .env si existe
        if env_file is None:
            env_file = Path('.env')

        if env_file.exists():
            load_dotenv(env_file, override=True)
        else:
            # Intentar cargar .env sin especificar ruta (busca automáticamente)
            load_dotenv(override=True)

        usuario = os.getenv("API_USUARIO_ID", "").strip()

        try:
            timeout = float(os.getenv("API_TIMEOUT", "30"))
        except ValueError:
            raise ValueError("API_TIMEOUT debe ser numérico")

        return cls(
            base_url=os.getenv("API_BASE_URL", ""),
            timeout=timeout,
            token=os.getenv("API_TOKEN") or None,
            usuario_id=int(usuario) if usuario.isdigit() else None
        )

    def url(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        """
        Construye URL absoluta (o relativa si no hay base_url)

        Omite parámetros vacíos:
            url("/entradas/rango-fechas", {"start": "2025-01-01", "end": ""})
            → "/entradas/rango-fechas?start=2025-01-01"
        """
        p = path if path.startswith("/") else f"/{path}"
        base = f"{self.base_url}{p}" if self.base_url else p

        if not params:
            return base

        query = urlencode({
            k: str(v) for k, v in params.items()
            if v is not None and f"{v}" != ""
        })
        return f"{base}?{query}" if query else base

    def __repr__(self) -> str:
        """Representación segura sin credenciales"""
        auth = "token" if self.token else "sin token"
        return f"ApiConfig(base_url={self.base_url or '<relativa>'}, timeout={self.timeout}, {auth})"
