"""Health endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Request, status

from ...config import settings

router = APIRouter(tags=["health"])


@router.get("/health", status_code=status.HTTP_200_OK)
def health_root() -> dict:
    """Simple health check endpoint that doesn't require any dependencies."""
    return {"status": "ok"}


def _get_osrm_health_check():
    """Lazy import to avoid startup failures."""
    from ...services.routing.osrm_client import check_health as osrm_health_check
    return osrm_health_check


@router.get("/health/routing", status_code=status.HTTP_200_OK)
def health_routing() -> dict:
    """Report whether the configured directions provider can be used."""
    provider = settings.routing_provider
    if provider == "osrm":
        if not settings.osrm_base_url:
            return {"provider": provider, "configured": False, "message": "Set BINROUTE_OSRM_BASE_URL."}
        try:
            healthy = _get_osrm_health_check()()
            return {"provider": provider, "configured": True, "healthy": healthy}
        except Exception as e:
            return {"provider": provider, "configured": True, "healthy": False, "error": str(e)}

    configured = bool(settings.google_maps_api_key)
    result = {"provider": provider, "configured": configured}
    if not configured:
        result["message"] = "Set BINROUTE_GOOGLE_MAPS_API_KEY."
    return result


@router.get("/health/store", status_code=status.HTTP_200_OK)
def health_store(request: Request) -> dict:
    """Check that the shared bin store can be read."""
    registry = request.app.state.client_registry
    try:
        registry.store.get(registry.key)
        return {"backend": settings.store_backend, "key": registry.key, "readable": True}
    except Exception as exc:
        return {"backend": settings.store_backend, "key": registry.key, "readable": False, "error": str(exc)}
