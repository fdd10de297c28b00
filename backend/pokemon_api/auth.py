# backend/pokemon_api/auth.py

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .credential_store import CredentialStore, sanitize_account
from .errors import UniqueConstraintError, format_validation_errors, server_error_content
from .models import UserCreate, UserLogin
from .security import hash_password, verify_password
from .stores import get_credential_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])

# Same answer for an unknown email and a wrong password
LOGIN_FAILED_MESSAGE = "Email ou mot de passe incorrect."

def _missing(payload: Optional[Dict[str, Any]], *fields: str) -> bool:
    return not payload or any(not payload.get(field) for field in fields)

def _message(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message, **extra})


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user account",
)
async def register(
    payload: Optional[Dict[str, Any]] = Body(None),
    store: CredentialStore = Depends(get_credential_store),
):
    """
    Creates an account from `username`, `email` and `password`.
    Email is checked before username; the password is stored as a bcrypt hash.
    """
    if _missing(payload, "username", "email", "password"):
        return _message(status.HTTP_400_BAD_REQUEST, "Tous les champs sont requis.")

    try:
        user = UserCreate.model_validate(payload)
    except ValidationError as e:
        logger.info(f"Registration rejected: {e.error_count()} validation error(s)")
        return _message(status.HTTP_400_BAD_REQUEST, format_validation_errors(e.errors()))

    try:
        if await store.find_by_email(user.email):
            return _message(status.HTTP_400_BAD_REQUEST, "Cet email est déjà utilisé.")
        if await store.find_by_username(user.username):
            return _message(status.HTTP_400_BAD_REQUEST, "Ce nom d'utilisateur est déjà pris.")

        password_hash = await hash_password(user.password)
        account = await store.create(user.username, user.email, password_hash)
    except UniqueConstraintError as e:
        # Lost a race with a concurrent registration after the checks above
        logger.warning(f"Registration hit unique constraint on '{e.field}'")
        return _message(status.HTTP_400_BAD_REQUEST, f"Le champ {e.field} est déjà utilisé.")
    except Exception as e:
        logger.error(f"Registration failed for '{user.username}': {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=server_error_content(e, "Erreur lors de l'inscription."),
        )

    logger.info(f"Registered user '{user.username}'")
    return _message(
        status.HTTP_201_CREATED,
        "Utilisateur créé avec succès.",
        user=sanitize_account(account),
    )


@router.post("/login", summary="Check an email/password pair")
async def login(
    payload: Optional[Dict[str, Any]] = Body(None),
    store: CredentialStore = Depends(get_credential_store),
):
    """
    Verifies credentials and returns the public account. No session or token is issued.
    """
    if _missing(payload, "email", "password"):
        return _message(status.HTTP_400_BAD_REQUEST, "Email et mot de passe requis.")

    try:
        credentials = UserLogin.model_validate(payload)
    except ValidationError as e:
        return _message(status.HTTP_400_BAD_REQUEST, format_validation_errors(e.errors()))

    try:
        account = await store.find_by_email(credentials.email)
        valid = account is not None and await verify_password(credentials.password, account["password"])
    except Exception as e:
        logger.error(f"Login failed with a server error: {e}", exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=server_error_content(e, "Erreur lors de la connexion."),
        )

    if not valid:
        logger.info("Login rejected")
        return _message(status.HTTP_401_UNAUTHORIZED, LOGIN_FAILED_MESSAGE)

    logger.info(f"User '{account['username']}' logged in")
    return _message(status.HTTP_200_OK, "Connexion réussie.", user=sanitize_account(account))
