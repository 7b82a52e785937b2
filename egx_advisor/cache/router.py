from fastapi import APIRouter

from egx_advisor.dependencies import DiskCacheDep

router = APIRouter()


@router.delete("")
async def clear_cache(cache: DiskCacheDep) -> dict:
    removed = cache.clear()
    return {"success": True, "removed": removed}
