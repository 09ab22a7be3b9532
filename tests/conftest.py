import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("CLOUDINARY_CLOUD_NAME", "demo")
os.environ.setdefault("CLOUDINARY_API_KEY", "123456789")
os.environ.setdefault("CLOUDINARY_API_SECRET", "shhh")

import asyncio
import pytest
from datetime import datetime, timezone
from bson import ObjectId
from database import to_object_id
from exceptions import NotFound, UploadError
from services.publishing import PublishingWorkflow
from utils.uploader import StagedFile


class FakeCatalogStore:
    """In-memory stand-in with the same contract as database.CatalogStore."""

    def __init__(self):
        self.songs = {}
        self.albums = {}

    async def insert_song(self, data):
        document = {**data, "_id": ObjectId(), "createdAt": datetime.now(timezone.utc)}
        if document.get("albumId") is not None:
            document["albumId"] = to_object_id(document["albumId"])
        self.songs[document["_id"]] = document
        return dict(document)

    async def get_song(self, song_id):
        await asyncio.sleep(0)
        song = self.songs.get(to_object_id(song_id))
        if not song:
            raise NotFound("Song not found")
        return dict(song)

    async def delete_song(self, song_id):
        return self.songs.pop(to_object_id(song_id), None) is not None

    async def insert_album(self, data):
        document = {**data, "_id": ObjectId(), "songs": [], "createdAt": datetime.now(timezone.utc)}
        self.albums[document["_id"]] = document
        return {**document, "songs": []}

    async def get_album(self, album_id):
        album = self.albums.get(to_object_id(album_id))
        if not album:
            raise NotFound("Album not found")
        return {**album, "songs": list(album["songs"])}

    async def delete_album(self, album_id):
        return self.albums.pop(to_object_id(album_id), None) is not None

    async def append_song_to_album(self, album_id, song_id):
        await asyncio.sleep(0)
        album = self.albums.get(to_object_id(album_id))
        if album is None:
            raise NotFound("Album not found")
        if to_object_id(song_id) not in album["songs"]:
            album["songs"].append(to_object_id(song_id))

    async def remove_song_from_album(self, album_id, song_id):
        album = self.albums.get(to_object_id(album_id))
        if album is None:
            return False
        album["songs"] = [listed for listed in album["songs"] if listed != to_object_id(song_id)]
        return True

    async def delete_songs_by_album(self, album_id):
        doomed = [song_id for song_id, song in self.songs.items() if song.get("albumId") == to_object_id(album_id)]
        for song_id in doomed:
            del self.songs[song_id]
        return len(doomed)

    async def find_song_ids_by_album(self, album_id):
        return [song_id for song_id, song in self.songs.items() if song.get("albumId") == to_object_id(album_id)]


class FakeUploader:
    """Records every staged file it receives, fails on the calls listed in fail_on."""

    def __init__(self, fail_on=()):
        self.calls = []
        self.fail_on = set(fail_on)

    async def upload(self, file):
        self.calls.append(file)
        await asyncio.sleep(0)
        if len(self.calls) in self.fail_on:
            raise UploadError("Cloudinary upload failed: Request Timeout")
        return f"https://res.cloudinary.com/demo/upload/{len(self.calls)}-{file.filename}"


def assert_catalog_consistent(store):
    """Every album lists exactly the songs that point at it, and no song points at a missing album."""
    for album_id, album in store.albums.items():
        referencing = {song_id for song_id, song in store.songs.items() if song.get("albumId") == album_id}
        assert set(album["songs"]) == referencing
        assert len(album["songs"]) == len(set(album["songs"]))
    for song in store.songs.values():
        if song.get("albumId") is not None:
            assert song["albumId"] in store.albums


@pytest.fixture
def store():
    return FakeCatalogStore()


@pytest.fixture
def uploader():
    return FakeUploader()


@pytest.fixture
def workflow(store, uploader):
    return PublishingWorkflow(store=store, uploader=uploader)


@pytest.fixture
def make_staged(tmp_path):
    def make(filename, content_type, content=b"payload"):
        path = tmp_path / filename
        path.write_bytes(content)
        return StagedFile(filename=filename, content_type=content_type, path=str(path), size=len(content))
    return make


@pytest.fixture
def audio_file(make_staged):
    return make_staged("track.mp3", "audio/mpeg", b"ID3\x03\x00audio")


@pytest.fixture
def image_file(make_staged):
    return make_staged("cover.png", "image/png", b"\x89PNG\r\n\x1a\ncover")
