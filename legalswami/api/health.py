"""
Health check and root endpoint routes.
"""

from fastapi import APIRouter, Depends

from legalswami.config import VERSION
from legalswami.credentials.pool import CredentialPool
from legalswami.dependencies import get_credential_pool, get_model_dispatcher
from legalswami.models import HealthResponse, PublicStatusResponse, RootResponse
from legalswami.routing.dispatcher import ModelDispatcher

router = APIRouter(
    tags=["health"],
)


@router.get(
    "/",
    response_model=RootResponse,
    summary="Service information",
    description="Returns basic service information and API documentation links",
)
async def root() -> RootResponse:
    """Root endpoint with service information."""
    return RootResponse(
        message="Welcome to the LegalSwami API",
        version=VERSION,
        docs={"swagger": "/docs", "redoc": "/redoc"},
    )


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health check",
    description="""
    Check whether the service can answer questions.

    Returns 'healthy' if at least one upstream credential is available.
    Returns 'degraded' if the credential pool is empty; every chat request
    would then fail until credentials are configured.
    """,
)
async def health(
    pool: CredentialPool = Depends(get_credential_pool),
    dispatcher: ModelDispatcher = Depends(get_model_dispatcher),
) -> HealthResponse:
    return HealthResponse(
        status="healthy" if pool.is_ready else "degraded",
        keys_available=pool.available_count,
        current_model=await dispatcher.get_current_model(),
        models_total=len(dispatcher.available_models),
        version=VERSION,
    )


@router.get(
    "/api/v1/public/status",
    response_model=PublicStatusResponse,
    summary="Public status",
)
async def public_status() -> PublicStatusResponse:
    return PublicStatusResponse(status="online", service="LegalSwami Backend", version=VERSION)
