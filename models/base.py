"""
Esquema base para los modelos del catálogo
"""
from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """
    Base de todos los esquemas

    - Recorta espacios en strings
    - Valida también al asignar atributos
    - Ignora campos extra que mande el backend
    """
    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        populate_by_name=True,
        extra='ignore'
    )
