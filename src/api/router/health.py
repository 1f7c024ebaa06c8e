from datetime import datetime

from fastapi import APIRouter, status, Request

from src.infra.config.settings import settings

router = APIRouter()


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check(request: Request):
    """
    Health check endpoint.
    Reports the database connection state; always answers 200 so monitors can read the body.
    """
    db_healthy = await request.app.state.db.ping()

    return {
        "status": "healthy" if db_healthy else "unhealthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "services": {
            "database": "healthy" if db_healthy else "unhealthy"
        },
        "timestamp": datetime.utcnow().isoformat() + "Z"
    }
