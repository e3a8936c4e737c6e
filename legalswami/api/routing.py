"""
Model routing and credential pool administration routes.
"""

from fastapi import APIRouter, Depends

from legalswami.credentials.pool import CredentialPool
from legalswami.dependencies import get_credential_pool, get_model_dispatcher
from legalswami.models import CredentialPoolStatus, ModelCounters, ModelStatusResponse, SwitchModelRequest
from legalswami.routing.dispatcher import ModelDispatcher

router = APIRouter(
    prefix="/api/v1",
    tags=["routing"],
    responses={
        404: {"description": "Model not found"},
    },
)


async def _model_status(dispatcher: ModelDispatcher) -> ModelStatusResponse:
    statistics = await dispatcher.get_statistics()
    return ModelStatusResponse(
        current_model=await dispatcher.get_current_model(),
        models=dispatcher.available_models,
        statistics={model: ModelCounters(**counters) for model, counters in statistics.items()},
        fallback_enabled=dispatcher.fallback_enabled,
    )


@router.get(
    "/models",
    response_model=ModelStatusResponse,
    summary="Get model routing status",
    description="""
    Get the configured models and how they are doing.

    Returns:
    - The model tried first on the next request
    - The full fallback order
    - Per-model success totals and consecutive failure counts
    """,
)
async def get_models(
    dispatcher: ModelDispatcher = Depends(get_model_dispatcher),
) -> ModelStatusResponse:
    return await _model_status(dispatcher)


@router.post(
    "/models/switch",
    response_model=ModelStatusResponse,
    summary="Force the current model",
    description="Point the dispatcher at a configured model. Unknown names return 404.",
)
async def switch_model(
    request: SwitchModelRequest,
    dispatcher: ModelDispatcher = Depends(get_model_dispatcher),
) -> ModelStatusResponse:
    await dispatcher.switch_to_model(request.model)
    return await _model_status(dispatcher)


@router.post(
    "/models/reset-failures",
    response_model=ModelStatusResponse,
    summary="Reset model failure counts",
)
async def reset_failures(
    dispatcher: ModelDispatcher = Depends(get_model_dispatcher),
) -> ModelStatusResponse:
    await dispatcher.reset_failure_counts()
    return await _model_status(dispatcher)


@router.get(
    "/keys/status",
    response_model=CredentialPoolStatus,
    summary="Get credential pool status",
    description="Number of live upstream credentials and their masked previews.",
)
async def get_key_status(
    pool: CredentialPool = Depends(get_credential_pool),
) -> CredentialPoolStatus:
    return CredentialPoolStatus(ready=pool.is_ready, available=pool.available_count, previews=pool.previews())
