import logging
from typing import Callable
from fastapi import Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from bolao.utils.api_response import error_response
from bolao.utils.exceptions_bolao import BolaoException

logger = logging.getLogger(__name__)

class RouteErrorHandler(APIRoute):
    """
    Rota personalizada que converte exceções de negócio (BolaoException)
    na resposta padronizada de erro, com o código HTTP da própria exceção.
    """

    def get_route_handler(self) -> Callable:
        original_route_handler = super().get_route_handler()

        async def custom_route_handler(request: Request) -> Response:
            try:
                return await original_route_handler(request)
            except BolaoException as exc:
                logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc}")
                resposta = error_response(message=str(exc), status_code=exc.status_code)
                return JSONResponse(
                    content=jsonable_encoder(resposta),
                    status_code=exc.status_code
                )

        return custom_route_handler
