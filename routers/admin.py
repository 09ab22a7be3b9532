from fastapi import APIRouter, Depends, status, UploadFile, File, Form
from typing import Annotated, Optional
from auth.jwt_handler import Caller, require_admin
from database import CatalogStore
from schemas.models import Song, Album, Message, IntegrityReport
from services.publishing import PublishingWorkflow
from utils.uploader import BlobUploader, stage_upload, discard_staged


router = APIRouter(prefix="/api/admin", dependencies=[Depends(require_admin)])


def get_workflow() -> PublishingWorkflow:
    return PublishingWorkflow(store=CatalogStore(), uploader=BlobUploader())


Workflow = Annotated[PublishingWorkflow, Depends(get_workflow)]


@router.get("/check", tags=["admin"])
async def check_admin(user: Annotated[Caller, Depends(require_admin)]) -> dict:
    """
    Confirms the caller passes the admission gate
    """
    return {"admin": True}


@router.post("/songs", tags=["admin"], status_code=status.HTTP_201_CREATED, response_model=Song)
async def create_song(
    workflow: Workflow,
    title: Optional[str] = Form(None),
    artist: Optional[str] = Form(None),
    duration: Optional[str] = Form(None),
    albumId: Optional[str] = Form(None),
    audioFile: Optional[UploadFile] = File(None),
    imageFile: Optional[UploadFile] = File(None),
):
    """
    Uploads the audio and cover, stores the song and lists it on its album
    """
    audio = image = None
    try:
        audio = await stage_upload(audioFile)
        image = await stage_upload(imageFile)
        return await workflow.create_song(
            {"title": title, "artist": artist, "duration": duration, "albumId": albumId},
            audio,
            image,
        )
    finally:
        discard_staged([audio, image])


@router.delete("/songs/{id}", tags=["admin"], response_model=Message)
async def delete_song(id: str, workflow: Workflow):
    await workflow.delete_song(id)
    return {"message": "Song deleted successfully"}


@router.post("/albums", tags=["admin"], status_code=status.HTTP_201_CREATED, response_model=Album)
async def create_album(
    workflow: Workflow,
    title: Optional[str] = Form(None),
    artist: Optional[str] = Form(None),
    releaseYear: Optional[str] = Form(None),
    imageFile: Optional[UploadFile] = File(None),
):
    image = None
    try:
        image = await stage_upload(imageFile)
        return await workflow.create_album({"title": title, "artist": artist, "releaseYear": releaseYear}, image)
    finally:
        discard_staged([image])


@router.delete("/albums/{id}", tags=["admin"], response_model=Message)
async def delete_album(id: str, workflow: Workflow):
    """
    Deletes the album together with every song on it
    """
    await workflow.delete_album(id)
    return {"message": "Album deleted successfully"}


@router.get("/albums/{id}/integrity", tags=["admin"], response_model=IntegrityReport)
async def audit_album(id: str, workflow: Workflow):
    return await workflow.audit_album(id)
