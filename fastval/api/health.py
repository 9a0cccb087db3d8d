from fastapi import APIRouter

from fastval.core.registry import registry

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    # number of classes with declared or compiled schemas
    return {"status": "ok", "schemas": len(registry)}
