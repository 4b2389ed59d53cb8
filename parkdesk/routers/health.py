# parkdesk/routers/health.py
"""
System health check endpoint.
Returns status of backend + DB + receipt printer reachability.
"""

import requests
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import text
from parkdesk.database import get_db
from parkdesk.config import settings
from datetime import datetime

router = APIRouter()


@router.get("/health", summary="System health check")
def health_check(db: Session = Depends(get_db)):
    """
    Returns:
    - Backend status
    - Database connectivity
    - Printer reachability (skipped when no PRINTER_URL is set)
    """
    result = {
        "status": "ok",
        "timestamp": datetime.now().isoformat(),
        "backend": "ok",
        "database": "unknown",
        "printer": "not_configured",
    }

    # Check database
    try:
        db.execute(text("SELECT 1"))
        result["database"] = "ok"
    except Exception as e:
        result["database"] = f"error: {str(e)}"
        result["status"] = "degraded"

    # Ping the print bridge
    if settings.PRINTER_URL:
        try:
            resp = requests.get(settings.PRINTER_URL, timeout=3)
            result["printer"] = "ok" if resp.status_code < 500 else f"http_{resp.status_code}"
        except requests.exceptions.ConnectionError:
            result["printer"] = "unreachable"
            result["status"] = "degraded"
        except requests.exceptions.RequestException as e:
            result["printer"] = f"error: {str(e)}"

    return result
