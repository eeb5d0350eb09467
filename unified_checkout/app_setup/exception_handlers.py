"""
Gestionnaires d'exceptions du backend sandbox.
- Les erreurs sont rendues au format attendu par le checkout: {"message": "..."}.
- Les erreurs de validation pydantic deviennent 422 avec le premier message lisible.
"""
import logging
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

logger = logging.getLogger(__name__)

def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors() or []
    if not errors:
        return "invalid request"
    first = errors[0]
    loc = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg") or "invalid value"
    return f"{loc}: {msg}" if loc else msg

def register_exception_handlers(app: FastAPI) -> None:
    """
    Enregistre les handlers HTTPException et RequestValidationError.
    - Corps JSON {"message": ...} (lu par le client checkout), statut conservé.
    """
    @app.exception_handler(HTTPException)
    async def message_on_http_errors(request: Request, exc: HTTPException):
        message = str(getattr(exc, "detail", "") or "Unknown error")
        if exc.status_code >= 500:
            logger.error("sandbox.error path=%s status=%s message=%s", request.url.path, exc.status_code, message)
        return JSONResponse(status_code=exc.status_code, content={"message": message}, headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def message_on_validation_errors(request: Request, exc: RequestValidationError):
        message = _validation_message(exc)
        logger.info("sandbox.validation path=%s message=%s", request.url.path, message)
        return JSONResponse(status_code=422, content={"message": message})
