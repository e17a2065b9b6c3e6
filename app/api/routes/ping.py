from fastapi import APIRouter

router = APIRouter(prefix="/ping", tags=["health"])


@router.get("", summary="Liveness probe")
async def ping() -> dict[str, str]:
    return {"status": "ok"}
