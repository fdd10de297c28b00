# backend/pokemon_api/errors.py

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import settings

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Pokémon non trouvé."
SERVER_ERROR_MESSAGE = "Erreur serveur."


class StoreError(Exception):
    """Base class for record and credential store failures."""


class PokemonNotFoundError(StoreError):
    def __init__(self, pokemon_id):
        super().__init__(f"No Pokémon with id {pokemon_id!r}")
        self.pokemon_id = pokemon_id


class UniqueConstraintError(StoreError):
    """Raised when an insert would break a uniqueness constraint."""

    def __init__(self, field: str):
        super().__init__(f"Duplicate value for unique field '{field}'")
        self.field = field


class StorageError(StoreError):
    """Wraps I/O or driver errors raised by a storage backend."""


def server_error_content(exc: Exception, message: str = SERVER_ERROR_MESSAGE) -> dict:
    """Body of a 500 response. The raw error is only echoed when configured to."""
    content = {"message": message}
    if settings.expose_error_details:
        content["error"] = str(exc)
    return content


def format_validation_errors(errors) -> str:
    """Joins pydantic error entries into a single readable message."""
    messages = []
    for e in errors:
        loc = [str(part) for part in e.get("loc", ()) if part != "body"]
        field = ".".join(loc)
        messages.append(f"{field}: {e['msg']}" if field else e["msg"])
    return ", ".join(messages)


def register_error_handlers(app: FastAPI) -> None:
    """Register the global error handlers on the FastAPI app."""

    @app.exception_handler(PokemonNotFoundError)
    async def not_found_handler(request: Request, exc: PokemonNotFoundError):
        logger.info(f"{request.method} {request.url.path}: Pokémon {exc.pokemon_id!r} not found")
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"message": NOT_FOUND_MESSAGE},
        )

    @app.exception_handler(StoreError)
    async def store_error_handler(request: Request, exc: StoreError):
        logger.error(f"Storage failure on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=server_error_content(exc),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"message": format_validation_errors(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=server_error_content(exc),
        )
