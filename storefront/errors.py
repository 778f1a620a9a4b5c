"""
Erros de domínio da loja e o mapeamento deles para respostas HTTP.

Toda resposta de erro da API segue o formato histórico do front: {"error": "<mensagem>"}.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


class StoreError(Exception):
    status_code = 500
    default_message = "Erro interno no servidor"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidCart(StoreError):
    status_code = 400
    default_message = "Carrinho inválido"


class InvalidPayload(StoreError):
    status_code = 400
    default_message = "Dados inválidos"


class Unauthorized(StoreError):
    status_code = 401
    default_message = "Acesso negado. Token não fornecido."


class Forbidden(StoreError):
    status_code = 403
    default_message = "Acesso proibido. Requer privilégios de admin."


class NotFound(StoreError):
    status_code = 404
    default_message = "Não encontrado"


class Conflict(StoreError):
    status_code = 409
    default_message = "Registro já existe"


class AmbiguousReference(Conflict):
    default_message = "Código de pedido ambíguo, informe o código completo"


class PaymentGatewayError(StoreError):
    status_code = 500
    default_message = "Erro no checkout"

    def __init__(self, message: str | None = None, *, transient: bool = True) -> None:
        super().__init__(message)
        self.transient = transient


class InternalError(StoreError):
    status_code = 500


class DuplicateOrderId(InternalError):
    def __init__(self, order_id: str) -> None:
        super().__init__(f"Pedido {order_id} já existe")
        self.order_id = order_id


async def _store_error_handler(request: Request, exc: StoreError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


def _error_details(exc: RequestValidationError) -> list[dict]:
    # O valor recebido não volta na resposta: pode ser NaN/Infinity, que não é JSON válido.
    details = []
    for error in exc.errors():
        detail = {key: value for key, value in error.items() if key not in ("input", "ctx")}
        if "ctx" in error:
            detail["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        details.append(detail)
    return jsonable_encoder(details)


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": InvalidPayload.default_message, "details": _error_details(exc)},
    )


async def _database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": InternalError.default_message})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StoreError, _store_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, _database_error_handler)
