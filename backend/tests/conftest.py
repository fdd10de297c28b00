# backend/tests/conftest.py

import json
import os
import tempfile

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Settings are read at import time, so point them at scratch locations first
_scratch_dir = tempfile.mkdtemp(prefix="pokemon-api-tests-")
ASSETS_DIR = os.path.join(_scratch_dir, "assets")
os.makedirs(os.path.join(ASSETS_DIR, "pokemons"))
SPRITE_BYTES = b"\x89PNG\r\n\x1a\nfake-pikachu"
with open(os.path.join(ASSETS_DIR, "pokemons", "025.png"), "wb") as f:
    f.write(SPRITE_BYTES)

os.environ["STORAGE_BACKEND"] = "file"
os.environ["DATA_DIR"] = os.path.join(_scratch_dir, "data")
os.environ["ASSETS_DIR"] = ASSETS_DIR
os.environ["BCRYPT_ROUNDS"] = "4" # Lowest cost bcrypt accepts, keeps tests fast
os.environ["EXPOSE_ERROR_DETAILS"] = "true"

from pokemon_api.credential_store import JsonFileCredentialStore
from pokemon_api.main import app
from pokemon_api.record_store import JsonFileRecordStore
from pokemon_api.stores import get_credential_store, get_record_store

PIKACHU = {
    "id": 25,
    "name": {"english": "Pikachu", "japanese": "ピカチュウ", "chinese": "皮卡丘", "french": "Pikachu"},
    "type": ["Electric"],
    "base": {"HP": 35, "Attack": 55, "Defense": 40, "Sp. Attack": 50, "Sp. Defense": 50, "Speed": 90},
    "image": "/assets/pokemons/025.png",
}

BULBASAUR = {
    "id": 1,
    "name": {"english": "Bulbasaur", "french": "Bulbizarre"},
    "type": ["Grass", "Poison"],
    "base": {"HP": 45, "Attack": 49, "Defense": 49, "Sp. Attack": 65, "Sp. Defense": 65, "Speed": 45},
    "image": "/assets/pokemons/001.png",
}

def read_json(path):
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)

@pytest.fixture
def pokemons_path(tmp_path):
    path = tmp_path / "pokemons.json"
    path.write_text(json.dumps([BULBASAUR, PIKACHU], ensure_ascii=False), encoding="utf-8")
    return str(path)

@pytest.fixture
def record_store(pokemons_path):
    return JsonFileRecordStore(pokemons_path)

@pytest.fixture
def credential_store(tmp_path):
    return JsonFileCredentialStore(str(tmp_path / "users.json"))

@pytest_asyncio.fixture
async def client(record_store, credential_store):
    """AsyncClient wired to the app, with file stores living in tmp_path."""
    app.dependency_overrides[get_record_store] = lambda: record_store
    app.dependency_overrides[get_credential_store] = lambda: credential_store
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
