"""
Contexto de autenticación explícito

Se construye una vez (CLI, script, test) y se pasa al ApiClient.
Ningún módulo lee token ni usuario de un almacenamiento global.
"""
from dataclasses import dataclass
from typing import Any, Dict, Optional
import logging

from jose import JWTError, jwt

from core.errors import BusinessRuleError

logger = logging.getLogger(__name__)

# Claims donde distintos backends ponen el id de usuario
_CLAIMS_USUARIO = ("userId", "userid", "id", "sub")


def decode_jwt_payload(token: str) -> Dict[str, Any]:
    """
    Lee los claims de un JWT SIN verificar la firma

    Solo se usa para leer el usuario actual; el backend es quien valida.
    Retorna {} si el token no tiene forma de JWT.
    """
    try:
        return jwt.get_unverified_claims(token or "")
    except JWTError as e:
        logger.warning(f"Token con payload ilegible: {e}")
        return {}


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(str(value))
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class AuthContext:
    """Usuario autenticado y su token"""
    token: Optional[str] = None
    usuario_id: Optional[int] = None
    rol: Optional[str] = None
    nombre: Optional[str] = None

    @classmethod
    def from_token(cls, token: Optional[str],
                   usuario_id: Optional[int] = None) -> 'AuthContext':
        """
        Construye el contexto a partir del JWT

        Args:
            token: JWT de acceso (puede ser None)
            usuario_id: Respaldo si el token no trae un id numérico
        """
        payload = decode_jwt_payload(token) if token else {}

        uid = None
        for claim in _CLAIMS_USUARIO:
            uid = _as_int(payload.get(claim))
            if uid is not None:
                break

        return cls(
            token=token,
            usuario_id=uid if uid is not None else usuario_id,
            rol=payload.get("rol"),
            nombre=payload.get("nombre")
        )

    def headers(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"} if self.token else {}

    def require_usuario_id(self) -> int:
        if self.usuario_id is None:
            raise BusinessRuleError(
                "No se pudo determinar el usuario. Inicia sesión o configura API_USUARIO_ID."
            )
        return self.usuario_id

    @property
    def is_admin(self) -> bool:
        return (self.rol or "").upper() == "ADMIN"

    @property
    def is_employee(self) -> bool:
        return (self.rol or "").upper() == "EMPLOYEE"

    def __repr__(self) -> str:
        """Representación segura sin token"""
        return f"AuthContext(usuario_id={self.usuario_id}, rol={self.rol})"
