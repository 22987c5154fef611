"""Core handler functions with no FastAPI types. Used by both REST routes and WebSocket."""

import asyncio
import logging
import webbrowser
from typing import Any
from urllib.parse import urlparse

from formulasnap import catalog, validation
from formulasnap.errors import ValidationError
from formulasnap.i18n import t
from formulasnap.models import Mode, RecognitionRequest
from formulasnap.providers import siliconflow, simpletex
from formulasnap.recognition import recognize
from formulasnap.store import (
    SILICONFLOW_KEY,
    SIMPLETEX_MODEL,
    SIMPLETEX_TOKEN,
    VOUCHER_MODELS,
    SettingsStore,
)
from formulasnap.usage import UsageTracker

logger = logging.getLogger("formulasnap.handlers")


def parse_voucher_models(text: str) -> list[str]:
    """One model id per line; anything without a ``/`` is not a model id."""
    return [line.strip() for line in text.splitlines() if line.strip() and "/" in line]


def _balance_fields(balance: siliconflow.Balance | None) -> dict[str, str]:
    if balance is None:
        return {}
    return {"sf_balance": balance.total, "sf_charge_balance": balance.charge}


async def handle_get_settings(store: SettingsStore, usage: UsageTracker) -> dict[str, Any]:
    sf_key = store.get_string(SILICONFLOW_KEY)
    balance = await siliconflow.fetch_balance(sf_key)
    return {
        "has_key": bool(sf_key),
        "has_simpletex": bool(store.get_string(SIMPLETEX_TOKEN)),
        "simpletex_model": store.get_string(SIMPLETEX_MODEL) or catalog.DEFAULT_SIMPLETEX_MODEL,
        "simpletex_models": [
            {"id": m.id, "name": m.name, "free_per_day": m.free_per_day}
            for m in catalog.SIMPLETEX_MODELS
        ],
        "simpletex_usage_by_model": usage.usage_by_model([m.id for m in catalog.SIMPLETEX_MODELS]),
        **_balance_fields(balance),
        "voucher_models": store.get_list(VOUCHER_MODELS),
    }


async def handle_save_settings(
    store: SettingsStore,
    simpletex_token: str | None = None,
    siliconflow_key: str | None = None,
    simpletex_model: str | None = None,
    voucher_models_text: str | None = None,
) -> dict[str, Any]:
    errors: list[str] = []

    if simpletex_token:
        if await validation.validate_simpletex_token(simpletex_token):
            store.set(SIMPLETEX_TOKEN, simpletex_token)
        else:
            store.set(SIMPLETEX_TOKEN, "")
            errors.append(t("settings.simpletex_token_invalid"))

    if siliconflow_key:
        if await validation.validate_siliconflow_key(siliconflow_key):
            store.set(SILICONFLOW_KEY, siliconflow_key)
        else:
            store.set(SILICONFLOW_KEY, "")
            errors.append(t("settings.siliconflow_key_invalid"))

    if simpletex_model is not None:
        store.set(SIMPLETEX_MODEL, simpletex_model)
    if voucher_models_text is not None:
        store.set(VOUCHER_MODELS, parse_voucher_models(voucher_models_text))

    if errors:
        logger.warning("Rejected credentials on save: %s", "; ".join(errors))
        return {"ok": False, "errors": errors}
    return {"ok": True}


async def handle_test_simpletex(store: SettingsStore, token: str | None = None) -> dict[str, Any]:
    result = await validation.probe_simpletex(token or store.get_string(SIMPLETEX_TOKEN))
    return result.to_dict()


async def handle_test_siliconflow(store: SettingsStore, api_key: str | None = None) -> dict[str, Any]:
    result = await validation.probe_siliconflow(api_key or store.get_string(SILICONFLOW_KEY))
    return result.to_dict()


async def handle_get_available_models(store: SettingsStore, usage: UsageTracker) -> dict[str, Any]:
    st_valid = bool(store.get_string(SIMPLETEX_TOKEN))
    sf_key = store.get_string(SILICONFLOW_KEY)
    voucher_models = store.get_list(VOUCHER_MODELS)

    models: list[dict[str, Any]] = []
    for model in catalog.SIMPLETEX_MODELS:
        models.append({
            "id": f"simpletex:{model.id}",
            "name": model.name,
            "provider": simpletex.label(),
            "modes": [mode.value for mode in model.modes],
            "available": st_valid,
            "free_per_day": model.free_per_day,
            "usage_today": usage.usage_today(model.id),
            "pricing": t("pricing.free_per_day", count=model.free_per_day),
        })

    balance = await siliconflow.fetch_balance(sf_key)
    sf_models = await catalog.list_vision_models(sf_key)
    for model in sf_models:
        entry: dict[str, Any] = {
            "id": f"siliconflow:{model.id}",
            "name": model.display_name,
            "provider": siliconflow.label(),
            "modes": [mode.value for mode in model.modes],
            "available": True,
            "pricing": model.pricing_label(),
            "free": model.free,
            "voucher": model.id in voucher_models,
        }
        if balance is not None:
            entry["charge_balance"] = balance.charge
            entry["total_balance"] = balance.total
        models.append(entry)

    response: dict[str, Any] = {"models": models, **_balance_fields(balance)}
    if balance is not None:
        response["voucher_balance"] = balance.voucher
    return response


async def handle_get_sf_balance(store: SettingsStore) -> dict[str, Any]:
    sf_key = store.get_string(SILICONFLOW_KEY)
    balance = await siliconflow.fetch_balance(sf_key)
    if balance is None:
        return {}
    return {
        "charge_balance": balance.charge,
        "total_balance": balance.total,
        "voucher_balance": balance.voucher,
    }


async def handle_recognize(
    store: SettingsStore,
    usage: UsageTracker,
    image: str,
    mode: str,
    model_id: str,
) -> dict[str, Any]:
    image = (image or "").strip()
    if not image:
        raise ValidationError("errors.image_missing")
    request = RecognitionRequest(image=image, mode=Mode.parse(mode), model_selector=(model_id or "").strip())
    result = await recognize(
        request,
        simpletex_token=store.get_string(SIMPLETEX_TOKEN),
        siliconflow_key=store.get_string(SILICONFLOW_KEY),
        usage=usage,
    )
    return result.to_dict()


async def handle_open_external_url(url: str) -> dict[str, Any]:
    url = (url or "").strip()
    if urlparse(url).scheme not in ("http", "https"):
        raise ValidationError("errors.invalid_url", url=url)
    opened = await asyncio.to_thread(webbrowser.open, url)
    return {"ok": opened}
