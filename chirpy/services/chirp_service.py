import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.core.exceptions import ForbiddenOperation, NotFoundError, ValidationError
from chirpy.models.chirp import Chirp

MAX_CHIRP_LENGTH = 140
BANNED_WORDS = frozenset({"kerfuffle", "sharbert", "fornax"})
REPLACEMENT = "****"


class ChirpService:
    @staticmethod
    def clean_body(body: str) -> str:
        """Mask banned words. Only whole space-separated words match, case-insensitively."""
        words = body.split(" ")
        return " ".join(REPLACEMENT if word.lower() in BANNED_WORDS else word for word in words)

    @staticmethod
    async def create(db: AsyncSession, user_id: uuid.UUID, body: str) -> Chirp:
        if len(body) > MAX_CHIRP_LENGTH:
            raise ValidationError(f"Chirp is too long. Max length is {MAX_CHIRP_LENGTH}")

        chirp = Chirp(body=ChirpService.clean_body(body), user_id=user_id)
        db.add(chirp)
        await db.commit()
        await db.refresh(chirp)
        return chirp

    @staticmethod
    async def list_all(db: AsyncSession) -> list[Chirp]:
        result = await db.execute(select(Chirp).order_by(Chirp.created_at.asc()))
        return list(result.scalars().all())

    @staticmethod
    async def get(db: AsyncSession, chirp_id: uuid.UUID) -> Chirp:
        result = await db.execute(select(Chirp).where(Chirp.id == chirp_id))
        chirp = result.scalar_one_or_none()
        if chirp is None:
            raise NotFoundError("Chirp not found")
        return chirp

    @staticmethod
    async def delete(db: AsyncSession, chirp_id: uuid.UUID, user_id: uuid.UUID) -> None:
        chirp = await ChirpService.get(db, chirp_id)
        if chirp.user_id != user_id:
            raise ForbiddenOperation("You can only delete your own chirps")
        await db.delete(chirp)
        await db.commit()
