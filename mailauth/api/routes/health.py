"""
Health check endpoints.
"""
from datetime import datetime, timezone
from fastapi import APIRouter, Depends
from config.settings import settings
from mailauth.api.dependencies import get_store
from mailauth.database.store import MailAuthDatabase

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/")
async def root():
    """Service name, version and DNS limits in effect."""
    return {
        "service": settings.app_name,
        "version": settings.app_version,
        "status": "operational",
        "dns": {
            "timeout": settings.dns_timeout,
            "spf_max_depth": settings.spf_max_depth,
            "spf_max_lookups": settings.spf_max_lookups,
            "dkim_probe_limit": settings.dkim_probe_limit
        }
    }


@router.get("/health")
async def health_check(db: MailAuthDatabase = Depends(get_store)):
    """Health check endpoint; touches the database."""
    return {
        "status": "healthy",
        "global_known_senders": db.count_global_senders(),
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
