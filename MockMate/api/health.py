from fastapi import APIRouter, Depends

from packages.mm_core.config import MockMateConfig
from packages.mm_core.time import utc_now_iso

from MockMate.api.dependencies import get_config

router = APIRouter()


@router.get("/health")
async def health_check(config: MockMateConfig = Depends(get_config)):
    """
    Server liveness check.
    Returns status, version, and current timestamp.
    """
    return {
        "status": "ok",
        "version": config.VERSION,
        "timestamp": utc_now_iso(),
    }
