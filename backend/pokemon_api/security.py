# backend/pokemon_api/security.py
import logging

import bcrypt
from starlette.concurrency import run_in_threadpool

from .config import settings

logger = logging.getLogger(__name__)

def _hash(password: str, rounds: int) -> str:
    salt = bcrypt.gensalt(rounds=rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")

def _verify(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed hash in storage
        logger.warning("Stored password hash could not be parsed.")
        return False

async def hash_password(password: str) -> str:
    """Hashes a password with a fresh random salt. Runs off the event loop."""
    return await run_in_threadpool(_hash, password, settings.bcrypt_rounds)

async def verify_password(password: str, password_hash: str) -> bool:
    """Checks a plain-text password against a stored bcrypt hash."""
    return await run_in_threadpool(_verify, password, password_hash)
