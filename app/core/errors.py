# app/core/errors.py
"""
Error kinds raised by the scoring and ledger services.

Routers never catch these; the handler installed in app.main turns them
into JSON responses. The HTTP status lives here so every code path maps a
kind to the same response.
"""
from fastapi import Request
from fastapi.responses import JSONResponse


class EngineError(Exception):
    kind = "engine_error"
    status_code = 500
    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFound(EngineError):
    kind = "not_found"
    status_code = 404


class Conflict(EngineError):
    kind = "conflict"
    status_code = 409


class InvalidInput(EngineError):
    kind = "invalid_input"
    status_code = 422


class DivisionByZeroError(InvalidInput):
    """Task target is not positive. Catalog rules should make this unreachable."""
    kind = "division_by_zero"


class TransactionFailure(EngineError):
    """The store aborted the transaction. Nothing was persisted; safe to retry."""
    kind = "transaction_failure"
    status_code = 503
    retryable = True


async def engine_error_handler(request: Request, exc: EngineError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "kind": exc.kind, "retryable": exc.retryable},
    )
