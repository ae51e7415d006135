import uuid
from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, ConfigDict
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.auth import dependencies
from chirpy.core.responses import StandardResponse
from chirpy.database import get_db
from chirpy.services.chirp_service import ChirpService

router = APIRouter()


class ChirpCreate(BaseModel):
    body: str


class ChirpResponse(BaseModel):
    id: uuid.UUID
    body: str
    user_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


@router.post("", status_code=status.HTTP_201_CREATED, response_model=StandardResponse[ChirpResponse])
async def create_chirp(
    data: ChirpCreate,
    user_id: Annotated[uuid.UUID, Depends(dependencies.get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    chirp = await ChirpService.create(db, user_id, data.body)
    return StandardResponse(data=ChirpResponse.model_validate(chirp), message="Chirp created")


@router.get("", response_model=StandardResponse[list[ChirpResponse]])
async def list_chirps(db: Annotated[AsyncSession, Depends(get_db)]):
    chirps = await ChirpService.list_all(db)
    return StandardResponse(data=[ChirpResponse.model_validate(chirp) for chirp in chirps])


@router.get("/{chirp_id}", response_model=StandardResponse[ChirpResponse])
async def get_chirp(
    chirp_id: uuid.UUID,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    chirp = await ChirpService.get(db, chirp_id)
    return StandardResponse(data=ChirpResponse.model_validate(chirp))


@router.delete("/{chirp_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chirp(
    chirp_id: uuid.UUID,
    user_id: Annotated[uuid.UUID, Depends(dependencies.get_current_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    await ChirpService.delete(db, chirp_id, user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
