from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from typing import Annotated, Optional
from datetime import datetime
from bson import ObjectId


def _stringify_object_id(value):
    return str(value) if isinstance(value, ObjectId) else value


# ObjectIds leave the api as plain strings
PyObjectId = Annotated[str, BeforeValidator(_stringify_object_id)]


# request part

class SongForm(BaseModel):
    title: str = Field(min_length=1)
    artist: str = Field(min_length=1)
    duration: int = Field(ge=0, title="Duration in seconds")
    albumId: Optional[str] = None

    @field_validator("title", "artist", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value

    @field_validator("albumId", mode="before")
    @classmethod
    def check_album_id(cls, value):
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        if not ObjectId.is_valid(value):
            raise ValueError("albumId is not a valid identifier")
        return str(value).strip()


class AlbumForm(BaseModel):
    title: str = Field(min_length=1)
    artist: str = Field(min_length=1)
    releaseYear: int = Field(ge=0, title="Release year")

    @field_validator("title", "artist", mode="before")
    @classmethod
    def strip_text(cls, value):
        return value.strip() if isinstance(value, str) else value


# response part

class Song(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: PyObjectId = Field(validation_alias="_id")
    title: str
    artist: str
    audioUrl: str
    imageUrl: str
    duration: int
    albumId: Optional[PyObjectId] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class Album(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: PyObjectId = Field(validation_alias="_id")
    title: str
    artist: str
    imageUrl: str
    releaseYear: int
    songs: list[PyObjectId] = []
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class Message(BaseModel):
    message: str


class IntegrityReport(BaseModel):
    albumId: PyObjectId
    consistent: bool = True
    songs: list[PyObjectId] = []
    dangling: list[PyObjectId] = Field([], title="Listed on the album but missing or pointing elsewhere")
    unlisted: list[PyObjectId] = Field([], title="Pointing at the album but not listed on it")
