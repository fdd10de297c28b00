# backend/tests/test_main_endpoints.py

import pytest

from conftest import BULBASAUR, PIKACHU, SPRITE_BYTES, read_json


@pytest.mark.asyncio
async def test_read_root(client):
    """Test the root endpoint '/'."""
    response = await client.get("/")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert response.text == "bienvenue sur l'API Pokémon"


@pytest.mark.asyncio
async def test_list_pokemons(client):
    response = await client.get("/api/pokemons")

    assert response.status_code == 200
    assert response.json() == {"pokemons": [BULBASAUR, PIKACHU]}


@pytest.mark.asyncio
async def test_get_pokemon_found(client):
    response = await client.get("/api/pokemons/25")

    assert response.status_code == 200
    assert response.json() == PIKACHU


@pytest.mark.asyncio
@pytest.mark.parametrize("pokemon_id", ["404", "pikachu", "2_5", "+25", "%2025", "25.0"])
async def test_get_pokemon_not_found(client, pokemon_id):
    response = await client.get(f"/api/pokemons/{pokemon_id}")

    assert response.status_code == 404
    assert response.json() == {"message": "Pokémon non trouvé."}


@pytest.mark.asyncio
async def test_create_then_get_then_delete(client):
    mewtwo = {
        "id": 999,
        "name": {"english": "Mewtwo", "french": "Mewtwo"},
        "type": ["Psychic"],
        "base": {"HP": 106, "Attack": 110, "Defense": 90, "Sp. Attack": 154, "Sp. Defense": 90, "Speed": 130},
        "image": "/assets/pokemons/150.png",
    }
    created = await client.post("/api/pokemons", json=mewtwo)
    assert created.status_code == 201
    assert created.json() == {"message": "Pokémon ajouté avec succès.", "pokemon": mewtwo}

    fetched = await client.get("/api/pokemons/999")
    assert fetched.status_code == 200
    assert fetched.json() == mewtwo

    deleted = await client.delete("/api/pokemons/999")
    assert deleted.status_code == 200
    assert deleted.json() == {"message": "Pokémon supprimé avec succès.", "pokemon": mewtwo}

    gone = await client.get("/api/pokemons/999")
    assert gone.status_code == 404


@pytest.mark.asyncio
async def test_create_keeps_only_sent_fields(client):
    response = await client.post("/api/pokemons", json={"id": 132, "name": {"french": "Métamorph"}})

    assert response.status_code == 201
    assert response.json()["pokemon"] == {"id": 132, "name": {"french": "Métamorph"}}


@pytest.mark.asyncio
async def test_create_keeps_extra_fields(client):
    record = {"id": 133, "type": ["Normal"], "species": "Evolution Pokémon"}
    response = await client.post("/api/pokemons", json=record)

    assert response.status_code == 201
    assert (await client.get("/api/pokemons/133")).json() == record


@pytest.mark.asyncio
async def test_create_without_id_is_rejected(client):
    response = await client.post("/api/pokemons", json={"name": {"french": "Inconnu"}})

    assert response.status_code == 400
    assert "id" in response.json()["message"]


@pytest.mark.asyncio
async def test_create_duplicate_id_is_accepted_by_file_store(client):
    response = await client.post("/api/pokemons", json={"id": 25, "name": {"french": "Pikachu bis"}})

    assert response.status_code == 201
    listing = (await client.get("/api/pokemons")).json()["pokemons"]
    assert [p["id"] for p in listing] == [1, 25, 25]
    # Lookups still answer with the first record carrying the id
    assert (await client.get("/api/pokemons/25")).json() == PIKACHU


@pytest.mark.asyncio
async def test_update_is_shallow_merge(client):
    response = await client.put("/api/pokemons/25", json={"name": {"french": "Pikachu"}})

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Pokémon mis à jour avec succès."
    assert body["pokemon"] == {**PIKACHU, "name": {"french": "Pikachu"}}
    assert (await client.get("/api/pokemons/25")).json() == body["pokemon"]


@pytest.mark.asyncio
async def test_update_not_found(client):
    response = await client.put("/api/pokemons/4242", json={"type": ["Ghost"]})

    assert response.status_code == 404
    assert response.json() == {"message": "Pokémon non trouvé."}


@pytest.mark.asyncio
async def test_delete_not_found(client):
    response = await client.delete("/api/pokemons/4242")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_mutations_are_written_to_disk(client, record_store):
    await client.post("/api/pokemons", json={"id": 150, "name": {"english": "Mewtwo"}})
    assert read_json(record_store.path) == (await client.get("/api/pokemons")).json()["pokemons"]

    await client.put("/api/pokemons/1", json={"type": ["Grass"]})
    assert read_json(record_store.path) == (await client.get("/api/pokemons")).json()["pokemons"]

    await client.delete("/api/pokemons/25")
    assert read_json(record_store.path) == [
        {**BULBASAUR, "type": ["Grass"]},
        {"id": 150, "name": {"english": "Mewtwo"}},
    ]


@pytest.mark.asyncio
async def test_storage_failure_returns_500_with_detail(client, record_store, monkeypatch):
    from pokemon_api.errors import StorageError

    async def broken_save(items):
        raise StorageError("disk full")

    monkeypatch.setattr(record_store._file, "save", broken_save)
    response = await client.post("/api/pokemons", json={"id": 151})

    assert response.status_code == 500
    assert response.json() == {"message": "Erreur serveur.", "error": "disk full"}
    # Nothing was committed to memory either
    assert (await client.get("/api/pokemons/151")).status_code == 404


@pytest.mark.asyncio
async def test_storage_failure_detail_can_be_hidden(client, record_store, monkeypatch):
    from pokemon_api.config import settings
    from pokemon_api.errors import StorageError

    async def broken_save(items):
        raise StorageError("disk full")

    monkeypatch.setattr(record_store._file, "save", broken_save)
    monkeypatch.setattr(settings, "expose_error_details", False)
    response = await client.delete("/api/pokemons/25")

    assert response.status_code == 500
    assert response.json() == {"message": "Erreur serveur."}


@pytest.mark.asyncio
async def test_serves_assets(client):
    response = await client.get("/assets/pokemons/025.png")

    assert response.status_code == 200
    assert response.content == SPRITE_BYTES


@pytest.mark.asyncio
async def test_missing_asset_is_404(client):
    response = await client.get("/assets/pokemons/999.png")

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cors_allows_any_origin(client):
    response = await client.get("/api/pokemons", headers={"Origin": "http://example.com"})

    assert response.headers["access-control-allow-origin"] == "*"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["get", "delete"])
async def test_underscore_id_does_not_touch_record(client, method):
    response = await client.request(method.upper(), "/api/pokemons/2_5")

    assert response.status_code == 404
    assert (await client.get("/api/pokemons/25")).json() == PIKACHU


@pytest.mark.asyncio
async def test_missing_asset_root_answers_404(tmp_path):
    from fastapi import FastAPI
    from httpx import ASGITransport, AsyncClient
    from pokemon_api.main import mount_assets

    asset_root = tmp_path / "not-created-yet" / "assets"
    assets_app = FastAPI()
    mount_assets(assets_app, str(asset_root))

    transport = ASGITransport(app=assets_app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        response = await ac.get("/assets/pokemons/025.png")

    assert response.status_code == 404
    assert asset_root.is_dir()
