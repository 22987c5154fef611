import base64
import binascii
import json
from typing import Any, Callable

import httpx

from formulasnap.errors import (
    AuthError,
    ProviderError,
    QuotaExhausted,
    RecognitionError,
    ValidationError,
)
from formulasnap.providers import is_success, json_body
from formulasnap.providers.base import RecognitionProvider
from formulasnap.util import first_present, strip_data_url

UNAUTHORIZED = "req_unauthorized"
NO_VALID_RESOURCE = "resource_no_valid"

# The same logical error type shows up at different places depending on
# the endpoint and failure; first match wins.
ERROR_TYPE_PATHS: tuple[tuple[str, ...], ...] = (
    ("res", "errType"),
    ("err_info", "err_type"),
    ("errType",),
)

PROBE_MODEL = "latex_ocr_turbo"

# 50x50 PNG, white background with a black square.
TEST_IMAGE_B64 = (
    "iVBORw0KGgoAAAANSUhEUgAAADIAAAAyCAIAAACRXR/mAAAASklEQVR4nO3OsQ3AIBAAsd9/abIAzSkFCNkTeNaV5nRgT6vQKrQKrUKr"
    "0CqeaM0/WlpaWlpaWlpaWlpaR2gVWoVWoVVoFVrFpa0PK6QKSH2kFl4AAAAASUVORK5CYII="
)


def error_type(payload: Any) -> str | None:
    return first_present(payload, ERROR_TYPE_PATHS)


def error_for_code(code: str) -> RecognitionError:
    if code == UNAUTHORIZED:
        return AuthError("errors.simpletex_unauthorized")
    if code == NO_VALID_RESOURCE:
        return QuotaExhausted("errors.simpletex_quota")
    return ProviderError("errors.simpletex_failed", code=code)


def decode_image(image: str) -> bytes:
    payload = strip_data_url(image).strip()
    if not payload:
        raise ValidationError("errors.image_missing")
    try:
        return base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("errors.image_decode", detail=str(exc)) from exc


# --- Result shapes ---

def _info_string(res: dict) -> str | None:
    info = res.get("info")
    return info if isinstance(info, str) else None


def _info_object(res: dict) -> str | None:
    info = res.get("info")
    if not isinstance(info, dict):
        return None
    for field in ("markdown", "text"):
        if isinstance(info.get(field), str):
            return info[field]
    return json.dumps(info, ensure_ascii=False)


def _top_level(res: dict) -> str | None:
    for field in ("markdown", "latex"):
        if isinstance(res.get(field), str):
            return res[field]
    return None


RESULT_SHAPES: tuple[Callable[[dict], str | None], ...] = (
    _info_string,
    _info_object,
    _top_level,
)


def extract_text(res: Any) -> str:
    if not isinstance(res, dict):
        return ""
    for shape in RESULT_SHAPES:
        text = shape(res)
        if text is not None:
            return text
    return ""


class SimpleTexProvider(RecognitionProvider):
    provider_id = "simpletex"
    label_key = "models.simpletex_provider"
    api_base_setting = "SIMPLETEX_API_BASE"

    def auth_headers(self, credential: str) -> dict[str, str]:
        return {"token": credential}

    async def upload(
        self,
        token: str,
        image_bytes: bytes,
        model_id: str,
        rec_mode: str | None = None,
        filename: str = "image.png",
    ) -> httpx.Response:
        data = {"rec_mode": rec_mode} if rec_mode else None
        return await self.post(
            model_id,
            token,
            data=data,
            files={"file": (filename, image_bytes, "image/png")},
        )

    def raise_on_error(self, response: httpx.Response) -> None:
        """Raise the matching taxonomy error if the HTTP status is not 2xx."""
        if is_success(response):
            return
        if response.status_code == 401:
            raise error_for_code(UNAUTHORIZED)
        try:
            code = error_type(response.json())
        except ValueError:
            code = None
        if code in (UNAUTHORIZED, NO_VALID_RESOURCE):
            raise error_for_code(code)
        raise ProviderError("errors.simpletex_http", status=response.status_code)

    async def recognize(
        self,
        token: str,
        image: str,
        model_id: str,
        rec_mode: str | None = None,
    ) -> tuple[str, float]:
        image_bytes = decode_image(image)
        response = await self.upload(token, image_bytes, model_id, rec_mode)
        self.raise_on_error(response)

        payload = json_body(response)
        if not isinstance(payload, dict):
            raise ProviderError("errors.bad_response", detail=type(payload).__name__)
        if payload.get("status") is not True:
            raise error_for_code(error_type(payload) or "unknown")

        res = payload.get("res") or {}
        conf = res.get("conf") if isinstance(res, dict) else None
        confidence = float(conf) if isinstance(conf, (int, float)) else 0.0
        return extract_text(res), confidence


# Module-level singleton
_provider = SimpleTexProvider()


def label() -> str:
    return _provider.label


async def recognize(token: str, image: str, model_id: str, rec_mode: str | None = None) -> tuple[str, float]:
    return await _provider.recognize(token, image, model_id, rec_mode)


async def upload_test_image(token: str) -> httpx.Response:
    return await _provider.upload(token, base64.b64decode(TEST_IMAGE_B64), PROBE_MODEL, filename="test.png")
