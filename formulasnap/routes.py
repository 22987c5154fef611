from typing import Any

from fastapi import APIRouter

from formulasnap import handlers
from formulasnap.schemas import (
    AvailableModelsResponse,
    BalanceResponse,
    OpenUrlRequest,
    RecognizeRequest,
    RecognizeResponse,
    SaveSettingsRequest,
    SaveSettingsResponse,
    SettingsResponse,
    TestResult,
    TestSiliconFlowRequest,
    TestSimpleTexRequest,
)
from formulasnap.store import get_store
from formulasnap.usage import get_usage_tracker

router = APIRouter()


@router.get("/api/settings", response_model=SettingsResponse, response_model_exclude_none=True)
async def get_settings() -> dict[str, Any]:
    return await handlers.handle_get_settings(get_store(), get_usage_tracker())


@router.post("/api/settings", response_model=SaveSettingsResponse, response_model_exclude_none=True)
async def save_settings(payload: SaveSettingsRequest) -> dict[str, Any]:
    return await handlers.handle_save_settings(
        get_store(),
        simpletex_token=payload.simpletex_token,
        siliconflow_key=payload.siliconflow_key,
        simpletex_model=payload.simpletex_model,
        voucher_models_text=payload.voucher_models_text,
    )


@router.post("/api/test/simpletex", response_model=TestResult, response_model_exclude_none=True)
async def test_simpletex(payload: TestSimpleTexRequest) -> dict[str, Any]:
    return await handlers.handle_test_simpletex(get_store(), payload.token)


@router.post("/api/test/siliconflow", response_model=TestResult, response_model_exclude_none=True)
async def test_siliconflow(payload: TestSiliconFlowRequest) -> dict[str, Any]:
    return await handlers.handle_test_siliconflow(get_store(), payload.api_key)


@router.get("/api/models", response_model=AvailableModelsResponse, response_model_exclude_none=True)
async def get_available_models() -> dict[str, Any]:
    return await handlers.handle_get_available_models(get_store(), get_usage_tracker())


@router.get("/api/balance", response_model=BalanceResponse, response_model_exclude_none=True)
async def get_sf_balance() -> dict[str, Any]:
    return await handlers.handle_get_sf_balance(get_store())


@router.post("/api/recognize", response_model=RecognizeResponse, response_model_exclude_none=True)
async def recognize(payload: RecognizeRequest) -> dict[str, Any]:
    return await handlers.handle_recognize(
        get_store(),
        get_usage_tracker(),
        image=payload.image,
        mode=payload.mode,
        model_id=payload.model_id,
    )


@router.post("/api/open-url")
async def open_external_url(payload: OpenUrlRequest) -> dict[str, Any]:
    return await handlers.handle_open_external_url(payload.url)
