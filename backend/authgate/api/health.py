from fastapi import APIRouter

from authgate import __version__

router = APIRouter()


@router.get("/health")
async def health_check() -> dict[str, str]:
    return {"status": "healthy", "version": __version__}
