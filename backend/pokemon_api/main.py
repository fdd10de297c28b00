# backend/pokemon_api/main.py

from fastapi import Body, Depends, FastAPI, Path, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
import logging
import os
import re
import uvicorn

from .auth import router as auth_router
from .config import settings
from .errors import PokemonNotFoundError, register_error_handlers
from .models import Pokemon, PokemonUpdate
from .record_store import RecordStore
from .stores import close_stores, get_record_store, prepare_stores

# Configure logging
logger = logging.getLogger(__name__)
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

WELCOME_MESSAGE = "bienvenue sur l'API Pokémon"

# Plain decimal integers only
POKEMON_ID_PATTERN = re.compile(r"-?[0-9]+")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup phase
    logger.info(f"Application startup (storage backend: {settings.storage_backend})...")
    await prepare_stores()

    yield # Application runs here

    # Shutdown phase
    logger.info("Application shutdown...")
    await close_stores()
    logger.info("Resources cleaned up.")

app = FastAPI(
    title="Pokémon API",
    description="CRUD API over a Pokémon catalog, with user registration and login.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
app.include_router(auth_router)

def mount_assets(app: FastAPI, directory: str) -> None:
    """Serves `directory` under /assets. The directory is created if missing so unknown files answer 404."""
    os.makedirs(directory, exist_ok=True)
    app.mount("/assets", StaticFiles(directory=directory), name="assets")

mount_assets(app, settings.assets_dir)


def _parse_id(raw_id: str) -> int:
    """Path ids that are not integers match no record."""
    if not POKEMON_ID_PATTERN.fullmatch(raw_id):
        raise PokemonNotFoundError(raw_id)
    return int(raw_id)

# --- API Endpoints ---

@app.get("/", response_class=PlainTextResponse)
async def read_root():
    """ Basic root endpoint to check if the API is running. """
    return WELCOME_MESSAGE

@app.get(
    "/api/pokemons",
    summary="List every Pokémon",
    tags=["Pokemon"]
)
async def list_pokemons(store: RecordStore = Depends(get_record_store)):
    pokemons = await store.list_all()
    logger.info(f"Returning {len(pokemons)} Pokémon.")
    return {"pokemons": pokemons}

@app.post(
    "/api/pokemons",
    status_code=status.HTTP_201_CREATED,
    summary="Add a Pokémon",
    description="Stores the record as sent. The client chooses the id.",
    tags=["Pokemon"]
)
async def create_pokemon(
    pokemon: Pokemon = Body(...),
    store: RecordStore = Depends(get_record_store),
):
    created = await store.create(pokemon.to_document())
    return {"message": "Pokémon ajouté avec succès.", "pokemon": created}

@app.get(
    "/api/pokemons/{pokemon_id}",
    summary="Get one Pokémon by id",
    tags=["Pokemon"]
)
async def get_pokemon(
    pokemon_id: str = Path(..., description="National Pokédex number", examples=["25"]),
    store: RecordStore = Depends(get_record_store),
):
    return await store.get_by_id(_parse_id(pokemon_id))

@app.put(
    "/api/pokemons/{pokemon_id}",
    summary="Update a Pokémon",
    description="Only the top-level fields present in the body are replaced.",
    tags=["Pokemon"]
)
async def update_pokemon(
    pokemon_id: str = Path(..., description="National Pokédex number"),
    changes: PokemonUpdate = Body(...),
    store: RecordStore = Depends(get_record_store),
):
    updated = await store.update(_parse_id(pokemon_id), changes.to_document())
    return {"message": "Pokémon mis à jour avec succès.", "pokemon": updated}

@app.delete(
    "/api/pokemons/{pokemon_id}",
    summary="Delete a Pokémon",
    tags=["Pokemon"]
)
async def delete_pokemon(
    pokemon_id: str = Path(..., description="National Pokédex number"),
    store: RecordStore = Depends(get_record_store),
):
    deleted = await store.delete(_parse_id(pokemon_id))
    return {"message": "Pokémon supprimé avec succès.", "pokemon": deleted}


def run():
    """Console entry point: serve the app with uvicorn."""
    logger.info(f"Serveur démarré sur http://localhost:{settings.port}")
    uvicorn.run(app, host=settings.host, port=settings.port)

if __name__ == "__main__":
    run()
