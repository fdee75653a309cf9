"""Health check endpoints"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mssp_console.database import get_db
from mssp_console.utils.logger import logger

router = APIRouter(prefix="/health", tags=["health"])


@router.get("")
def health_check():
    return {"status": "healthy", "service": "MSSP Console", "version": "0.1.0"}


@router.get("/ready")
def readiness_check(db: Session = Depends(get_db)):
    """503 until the database holding admin records and secrets answers."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Readiness check failed", extra={"error": type(e).__name__})
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "checks": {"database": False}},
        )
    return {"status": "ready", "checks": {"database": True}}


@router.get("/live")
def liveness_check():
    return {"status": "alive"}
