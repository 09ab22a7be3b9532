from motor.motor_asyncio import AsyncIOMotorClient
from bson import ObjectId
from bson.errors import InvalidId
from datetime import datetime, timezone
from config import MONGODB_URL, MONGODB_DATABASE
from exceptions import NotFound


client = AsyncIOMotorClient(MONGODB_URL)

# database config
database = client[MONGODB_DATABASE]
SongsCollection = database.Songs
AlbumsCollection = database.Albums
UsersCollection = database.Users


def to_object_id(value) -> ObjectId:
    """
    Converts a path identifier into an ObjectId, a malformed one can't match any document
    """
    if isinstance(value, ObjectId):
        return value
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise NotFound(f"No document with id {value!r}")


class CatalogStore:
    """
    Song and album documents on top of motor.

    Every method touches a single document or runs a single bulk statement,
    there is no transaction spanning both collections.
    """

    def __init__(self, songs=SongsCollection, albums=AlbumsCollection):
        self.songs = songs
        self.albums = albums

    async def insert_song(self, data: dict) -> dict:
        now = datetime.now(timezone.utc)
        document = {**data, "createdAt": now, "updatedAt": now}
        if document.get("albumId") is not None:
            document["albumId"] = to_object_id(document["albumId"])
        result = await self.songs.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    async def get_song(self, song_id) -> dict:
        song = await self.songs.find_one({"_id": to_object_id(song_id)})
        if not song:
            raise NotFound("Song not found")
        return song

    async def delete_song(self, song_id) -> bool:
        result = await self.songs.delete_one({"_id": to_object_id(song_id)})
        return result.deleted_count == 1

    async def insert_album(self, data: dict) -> dict:
        now = datetime.now(timezone.utc)
        document = {**data, "songs": [], "createdAt": now, "updatedAt": now}
        result = await self.albums.insert_one(document)
        document["_id"] = result.inserted_id
        return document

    async def get_album(self, album_id) -> dict:
        album = await self.albums.find_one({"_id": to_object_id(album_id)})
        if not album:
            raise NotFound("Album not found")
        return album

    async def delete_album(self, album_id) -> bool:
        result = await self.albums.delete_one({"_id": to_object_id(album_id)})
        return result.deleted_count == 1

    async def append_song_to_album(self, album_id, song_id) -> None:
        result = await self.albums.update_one(
            {"_id": to_object_id(album_id)},
            {"$addToSet": {"songs": to_object_id(song_id)}, "$set": {"updatedAt": datetime.now(timezone.utc)}},
        )
        if result.matched_count == 0:
            raise NotFound("Album not found")

    async def remove_song_from_album(self, album_id, song_id) -> bool:
        result = await self.albums.update_one(
            {"_id": to_object_id(album_id)},
            {"$pull": {"songs": to_object_id(song_id)}, "$set": {"updatedAt": datetime.now(timezone.utc)}},
        )
        return result.matched_count == 1

    async def delete_songs_by_album(self, album_id) -> int:
        result = await self.songs.delete_many({"albumId": to_object_id(album_id)})
        return result.deleted_count

    async def find_song_ids_by_album(self, album_id) -> list:
        cursor = self.songs.find({"albumId": to_object_id(album_id)}, {"_id": 1})
        return [song["_id"] async for song in cursor]
