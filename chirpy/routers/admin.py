import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.ext.asyncio import AsyncSession

from chirpy.auth.repositories import SqlUserRepository
from chirpy.config import settings
from chirpy.core.exceptions import ForbiddenOperation
from chirpy.core.metrics import FileserverMetrics, get_metrics
from chirpy.core.responses import StandardResponse
from chirpy.database import get_db

logger = logging.getLogger(__name__)

router = APIRouter()

METRICS_TEMPLATE = """<html>
  <body>
    <h1>Welcome, Chirpy Admin</h1>
    <p>Chirpy has been visited {hits} times!</p>
  </body>
</html>"""


@router.get("/metrics", response_class=HTMLResponse)
async def metrics(metrics: Annotated[FileserverMetrics, Depends(get_metrics)]):
    return METRICS_TEMPLATE.format(hits=metrics.hits)


@router.post("/reset", response_model=StandardResponse)
async def reset(
    metrics: Annotated[FileserverMetrics, Depends(get_metrics)],
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Wipe all users and reset the hit counter. Only allowed on the dev platform."""
    if not settings.is_dev_platform:
        raise ForbiddenOperation("Reset is only allowed in the dev environment")

    await SqlUserRepository(db).delete_all()
    metrics.reset()
    logger.warning("Development reset: all users deleted and metrics cleared")
    return StandardResponse(message="Reset complete")
