from fastapi import APIRouter

router = APIRouter()

@router.get("/")
def root():
    return {
        "name": "Formhost Backend",
        "status": "ok",
        "docs": "/docs",
        "health": "/health",
    }
