# backend/pokemon_api/config.py

import os
from typing import List, Literal
from pydantic_settings import BaseSettings, SettingsConfigDict
from dotenv import load_dotenv

BACKEND_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

# Load environment variables from .env file if it exists
# Useful for local development
env_path = os.path.join(BACKEND_DIR, '.env')
load_dotenv(dotenv_path=env_path)

class Settings(BaseSettings):
    """Application settings."""

    # "file" keeps records in JSON files under data_dir, "mongo" uses MongoDB
    storage_backend: Literal["file", "mongo"] = "file"

    # File backend
    data_dir: str = os.path.join(BACKEND_DIR, "data")
    pokemons_file: str = "pokemons.json"
    users_file: str = "users.json"

    # MongoDB configuration
    # Reads MONGO_URI from environment or .env file
    mongo_uri: str = "mongodb://localhost:27017/pokemon-api"
    mongo_db_name: str = "pokemon-api"
    # Populate an empty pokemons collection from the JSON seed file at startup
    seed_database: bool = True

    # Static files served under /assets
    assets_dir: str = os.path.join(BACKEND_DIR, "assets")

    host: str = "0.0.0.0"
    port: int = 3000
    cors_origins: List[str] = ["*"]

    # bcrypt cost factor
    bcrypt_rounds: int = 10

    # Echo the raw error text in 500 responses (always logged server-side)
    expose_error_details: bool = True

    model_config = SettingsConfigDict(env_file_encoding='utf-8')

    @property
    def pokemons_path(self) -> str:
        return os.path.join(self.data_dir, self.pokemons_file)

    @property
    def users_path(self) -> str:
        return os.path.join(self.data_dir, self.users_file)


# Create a single instance of the settings to be imported in other modules
settings = Settings()
