from typing import Any, Dict, List, Optional, TypeVar, Union
from sqlalchemy.engine.row import Row
from bolao.database.models import ApiResponse

T = TypeVar("T")

def sqlalchemy_to_dict(obj):
    """
    Converte um objeto SQLAlchemy (modelo ORM ou Row de consulta) em dicionário.
    """
    if isinstance(obj, Row):
        return dict(obj._mapping)

    if hasattr(obj, '__table__'):
        return {c.name: getattr(obj, c.name) for c in obj.__table__.columns}

    return obj

def serialize_data(data):
    """Serializa listas, dicionários e objetos SQLAlchemy recursivamente"""
    if data is None:
        return None

    if isinstance(data, (list, tuple)):
        return [serialize_data(item) for item in data]

    if hasattr(data, '__table__') or isinstance(data, Row):
        return sqlalchemy_to_dict(data)

    if isinstance(data, dict):
        return {k: serialize_data(v) for k, v in data.items()}

    return data

def create_response(
    success: bool,
    data: Optional[Union[T, List[T], Dict[str, Any]]] = None,
    message: Optional[str] = None,
    meta: Optional[Dict[str, Any]] = None,
    status_code: int = 200
) -> ApiResponse:
    return ApiResponse(
        success=success,
        data=serialize_data(data),
        message=message,
        meta=meta,
        status_code=status_code
    )


def success_response(
    data: Optional[Union[T, List[T], Dict[str, Any]]] = None,
    message: str = "Operação realizada com sucesso",
    meta: Optional[Dict[str, Any]] = None,
    status_code: int = 200
) -> ApiResponse:
    """
    Cria uma resposta de sucesso padronizada.

    Args:
        data: Dados a serem retornados
        message: Mensagem de sucesso
        meta: Metadados adicionais (ex: totais)
        status_code: Código HTTP de status (padrão 200)
    """
    return create_response(True, data, message, meta, status_code)


def error_response(
    message: str = "Ocorreu um erro ao processar a solicitação",
    data: Optional[Union[T, List[T], Dict[str, Any]]] = None,
    meta: Optional[Dict[str, Any]] = None,
    status_code: int = 400
) -> ApiResponse:
    """Cria uma resposta de erro padronizada (success=False)"""
    return create_response(False, data, message, meta, status_code)
