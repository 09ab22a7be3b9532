from fastapi import APIRouter, Depends
from typing import Annotated
from database import CatalogStore
from schemas.models import Song, Album


router = APIRouter(prefix="/api")


def get_store() -> CatalogStore:
    return CatalogStore()


@router.get("/songs/{id}", tags=["catalog"], response_model=Song)
async def get_song(id: str, store: Annotated[CatalogStore, Depends(get_store)]):
    return Song.model_validate(await store.get_song(id))


@router.get("/albums/{id}", tags=["catalog"], response_model=Album)
async def get_album(id: str, store: Annotated[CatalogStore, Depends(get_store)]):
    return Album.model_validate(await store.get_album(id))
