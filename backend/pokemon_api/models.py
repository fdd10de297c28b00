# backend/pokemon_api/models.py
import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import List, Optional, Union, Dict, Any

EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")

Number = Union[int, float]

class PokemonName(BaseModel):
    """Display name of a Pokémon, one entry per language."""
    model_config = ConfigDict(extra="allow")

    french: Optional[str] = None
    english: Optional[str] = None
    japanese: Optional[str] = None
    chinese: Optional[str] = None

class PokemonBaseStats(BaseModel):
    """The six base stats, keyed the way the catalog file spells them."""
    model_config = ConfigDict(populate_by_name=True)

    hp: Optional[Number] = Field(None, alias="HP")
    attack: Optional[Number] = Field(None, alias="Attack")
    defense: Optional[Number] = Field(None, alias="Defense")
    sp_attack: Optional[Number] = Field(None, alias="Sp. Attack")
    sp_defense: Optional[Number] = Field(None, alias="Sp. Defense")
    speed: Optional[Number] = Field(None, alias="Speed")

class PokemonUpdate(BaseModel):
    """Partial record sent on PUT. Only the fields present are merged."""
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: Optional[int] = Field(None, description="National Pokédex number")
    name: Optional[PokemonName] = None
    type: Optional[List[str]] = Field(None, description="Elemental types, display order")
    base: Optional[PokemonBaseStats] = None
    image: Optional[str] = Field(None, description="Image URL or /assets path")

    def to_document(self) -> Dict[str, Any]:
        # Only what the client sent, spelled the way it was sent
        return self.model_dump(by_alias=True, exclude_unset=True)

class Pokemon(PokemonUpdate):
    """A full catalog record as sent on POST."""
    id: int = Field(..., description="National Pokédex number")


class UserCreate(BaseModel):
    username: str = Field(..., min_length=3)
    email: str
    password: str = Field(..., min_length=6)

    @field_validator("username", mode="before")
    @classmethod
    def strip_username(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Email invalide")
        return value

    @field_validator("password")
    @classmethod
    def check_password_bytes(cls, value: str) -> str:
        # bcrypt only accepts up to 72 bytes
        if len(value.encode("utf-8")) > 72:
            raise ValueError("Le mot de passe ne doit pas dépasser 72 octets")
        return value

class UserLogin(BaseModel):
    email: str
    password: str

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value):
        return value.strip().lower() if isinstance(value, str) else value
