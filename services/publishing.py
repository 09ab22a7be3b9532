import logging
from typing import Optional
from exceptions import IntegrityError, NotFound
from schemas.models import Song, Album, IntegrityReport
from services.validation import validate_song_request, validate_album_request
from utils.uploader import StagedFile


logger = logging.getLogger(__name__)


class PublishingWorkflow:
    """
    Creates and deletes songs and albums while keeping Song.albumId and Album.songs in step.

    The catalog has no cross-collection transaction, so every operation relies on
    its step ordering, and create_song compensates when linking to the album fails.
    """

    def __init__(self, store, uploader):
        self.store = store
        self.uploader = uploader

    async def create_song(self, data: dict, audio_file: Optional[StagedFile], image_file: Optional[StagedFile]) -> Song:
        form = validate_song_request(data, audio_file, image_file)

        audio_url = await self.uploader.upload(audio_file)
        image_url = await self.uploader.upload(image_file)

        song = await self.store.insert_song({
            "title": form.title,
            "artist": form.artist,
            "audioUrl": audio_url,
            "imageUrl": image_url,
            "duration": form.duration,
            "albumId": form.albumId,
        })
        song_id = song["_id"]
        logger.info("Song inserted", extra={"song_id": str(song_id), "album_id": form.albumId})

        if form.albumId:
            try:
                await self.store.append_song_to_album(form.albumId, song_id)
            except Exception as error:
                await self._discard_unlinked_song(song_id, form.albumId, error)
                raise
            logger.info("Song linked to album", extra={"song_id": str(song_id), "album_id": form.albumId})

        return Song.model_validate(song)

    async def _discard_unlinked_song(self, song_id, album_id: str, cause: Exception) -> None:
        logger.warning(
            "Linking song to album failed, removing the song",
            extra={"song_id": str(song_id), "album_id": album_id, "error": str(cause)},
        )
        # the append may have been applied before it failed, unlist before deleting
        try:
            await self.store.remove_song_from_album(album_id, song_id)
            deleted = await self.store.delete_song(song_id)
        except Exception as error:
            logger.exception("Compensation failed, song left orphaned", extra={"song_id": str(song_id)})
            raise IntegrityError(
                f"Song {song_id} was created but could not be linked to album {album_id} nor removed",
                details={"orphan_song_id": str(song_id), "album_id": album_id},
                diagnostics={"error": str(error)},
            ) from cause
        if not deleted:
            logger.warning("Compensated song was already gone", extra={"song_id": str(song_id)})

    async def delete_song(self, song_id: str) -> None:
        song = await self.store.get_song(song_id)

        # unlist first so the album never points at a deleted song
        if song.get("albumId"):
            if not await self.store.remove_song_from_album(song["albumId"], song["_id"]):
                logger.warning(
                    "Album of deleted song does not exist",
                    extra={"song_id": str(song["_id"]), "album_id": str(song["albumId"])},
                )

        if not await self.store.delete_song(song["_id"]):
            raise NotFound("Song not found")
        logger.info("Song deleted", extra={"song_id": str(song["_id"])})

    async def create_album(self, data: dict, image_file: Optional[StagedFile]) -> Album:
        form = validate_album_request(data, image_file)
        image_url = await self.uploader.upload(image_file)
        album = await self.store.insert_album({
            "title": form.title,
            "artist": form.artist,
            "imageUrl": image_url,
            "releaseYear": form.releaseYear,
        })
        logger.info("Album inserted", extra={"album_id": str(album["_id"])})
        return Album.model_validate(album)

    async def delete_album(self, album_id: str) -> None:
        # songs go first, an interrupted run leaves songs on a live album and can be repeated
        removed = await self.store.delete_songs_by_album(album_id)
        if not await self.store.delete_album(album_id):
            raise NotFound("Album not found")
        logger.info("Album deleted", extra={"album_id": str(album_id), "songs_removed": removed})

    async def audit_album(self, album_id: str) -> IntegrityReport:
        """
        Compares an album's songs list with the songs that point at it.
        Raises IntegrityError carrying both differences when they disagree.
        """
        album = await self.store.get_album(album_id)
        listed = [str(song_id) for song_id in album.get("songs", [])]
        referencing = [str(song_id) for song_id in await self.store.find_song_ids_by_album(album["_id"])]

        report = IntegrityReport(
            albumId=album["_id"],
            songs=listed,
            dangling=[song_id for song_id in listed if song_id not in referencing],
            unlisted=[song_id for song_id in referencing if song_id not in listed],
        )
        if report.dangling or report.unlisted:
            report.consistent = False
            logger.error("Album integrity mismatch", extra=report.model_dump())
            raise IntegrityError(f"Album {album_id} is out of sync with its songs", details=report.model_dump())
        return report
