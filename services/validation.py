from typing import Optional
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError
from fastapi.encoders import jsonable_encoder
from exceptions import ValidationError
from schemas.models import SongForm, AlbumForm
from utils.uploader import StagedFile


AUDIO_PREFIX = "audio/"
IMAGE_PREFIX = "image/"


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _require_fields(data: dict, fields: tuple[str, ...]) -> None:
    missing = {field: _is_blank(data.get(field)) for field in fields}
    if any(missing.values()):
        raise ValidationError("Missing required fields", details={"missing": missing})


def _require_file(file: Optional[StagedFile], name: str, prefix: str, label: str) -> None:
    if file is None or file.size == 0:
        raise ValidationError(f"{label.capitalize()} file is required", details={"field": name})
    if not (file.content_type or "").startswith(prefix):
        raise ValidationError(f"Invalid {label} file type", details={"field": name, "content_type": file.content_type})


def _parse(model: type[BaseModel], data: dict) -> BaseModel:
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Invalid field values", details=jsonable_encoder(e.errors(include_url=False, include_context=False)))


def validate_song_request(data: dict, audio_file: Optional[StagedFile], image_file: Optional[StagedFile]) -> SongForm:
    """
    Checks a create-song request before anything leaves the process
    """
    if audio_file is None and image_file is None:
        raise ValidationError("No files were uploaded")
    _require_file(audio_file, "audioFile", AUDIO_PREFIX, "audio")
    _require_file(image_file, "imageFile", IMAGE_PREFIX, "image")
    _require_fields(data, ("title", "artist", "duration"))
    return _parse(SongForm, data)


def validate_album_request(data: dict, image_file: Optional[StagedFile]) -> AlbumForm:
    _require_file(image_file, "imageFile", IMAGE_PREFIX, "image")
    _require_fields(data, ("title", "artist", "releaseYear"))
    return _parse(AlbumForm, data)
