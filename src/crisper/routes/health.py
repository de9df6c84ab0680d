from fastapi import APIRouter

router = APIRouter(prefix="/api", tags=["Health"])


@router.get("/health")
async def health():
    """Simple health-check endpoint."""
    return {"ok": True, "service": "crisper-backend"}
