import logging
from dataclasses import dataclass
from typing import Any

import httpx

from formulasnap.errors import AuthError, ProviderError, RecognitionError, ValidationError
from formulasnap.providers import is_success, json_body
from formulasnap.providers.base import RecognitionProvider
from formulasnap.util import first_present, lookup_path

logger = logging.getLogger("formulasnap.providers.siliconflow")

MAX_TOKENS = 4096

ERROR_MESSAGE_PATHS: tuple[tuple[str, ...], ...] = (
    ("message",),
    ("error", "message"),
)

# Vision models reject tiny images with e.g. "height:12 and width:40 must be larger than 28".
IMAGE_TOO_SMALL_MARKERS = ("height", "width", "must be larger")


@dataclass(frozen=True)
class Balance:
    charge: str
    total: str

    @property
    def voucher(self) -> str:
        """Promotional balance: whatever of the total was not paid for."""
        return f"{_to_float(self.total) - _to_float(self.charge):.4f}"


def _to_float(value: str) -> float:
    try:
        return float(value)
    except ValueError:
        return 0.0


def _balance_field(data: Any, *paths: tuple[str, ...]) -> str | None:
    for path in paths:
        value = lookup_path(data, path)
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
    return None


def parse_balance(payload: Any) -> Balance:
    charge = _balance_field(payload, ("data", "chargeBalance")) or "0"
    total = _balance_field(payload, ("data", "totalBalance"), ("data", "balance")) or "0"
    return Balance(charge=charge, total=total)


def parse_total_balance(payload: Any) -> str | None:
    return _balance_field(payload, ("data", "totalBalance"), ("data", "balance"))


def build_chat_body(model_id: str, image_url: str, prompt: str) -> dict[str, Any]:
    return {
        "model": model_id,
        "messages": [
            {
                "role": "user",
                "content": [
                    {"type": "image_url", "image_url": {"url": image_url, "detail": "high"}},
                    {"type": "text", "text": prompt},
                ],
            },
        ],
        "max_tokens": MAX_TOKENS,
    }


def extract_content(payload: Any) -> str:
    choices = payload.get("choices") if isinstance(payload, dict) else None
    first = choices[0] if isinstance(choices, list) and choices else {}
    content = lookup_path(first, ("message", "content"))
    return content.strip() if isinstance(content, str) else ""


class SiliconFlowProvider(RecognitionProvider):
    provider_id = "siliconflow"
    label_key = "models.siliconflow_provider"
    api_base_setting = "SILICONFLOW_API_BASE"

    def auth_headers(self, credential: str) -> dict[str, str]:
        return {"Authorization": f"Bearer {credential}"}

    def raise_on_error(self, response: httpx.Response) -> None:
        """Raise the matching taxonomy error if the HTTP status is not 2xx."""
        if is_success(response):
            return
        try:
            payload = response.json()
        except ValueError:
            payload = None

        message = first_present(payload, ERROR_MESSAGE_PATHS)
        error_cls = AuthError if response.status_code == 401 else ProviderError
        if not message:
            raise error_cls("errors.api_failed", status=response.status_code)
        lowered = message.lower()
        if all(marker in lowered for marker in IMAGE_TOO_SMALL_MARKERS):
            raise ValidationError("errors.image_too_small")
        raise error_cls("errors.provider_message", message=message)

    async def chat_completion(self, api_key: str, image_url: str, model_id: str, prompt: str) -> str:
        response = await self.post(
            "chat/completions",
            api_key,
            headers={"Content-Type": "application/json"},
            json=build_chat_body(model_id, image_url, prompt),
        )
        self.raise_on_error(response)
        return extract_content(json_body(response))

    async def list_chat_model_ids(self, api_key: str) -> list[str]:
        response = await self.get("models", api_key, params={"sub_type": "chat"})
        self.raise_on_error(response)
        payload = json_body(response)
        entries = payload.get("data") if isinstance(payload, dict) else None
        return [
            entry["id"]
            for entry in entries or []
            if isinstance(entry, dict) and isinstance(entry.get("id"), str)
        ]

    async def fetch_user_info(self, api_key: str) -> httpx.Response:
        return await self.get("user/info", api_key)

    async def fetch_balance(self, api_key: str) -> Balance | None:
        if not api_key:
            return None
        try:
            response = await self.fetch_user_info(api_key)
            if not is_success(response):
                return None
            return parse_balance(json_body(response))
        except RecognitionError as exc:
            logger.warning("Could not fetch SiliconFlow balance: %s", exc)
            return None


# Module-level singleton
_provider = SiliconFlowProvider()


def label() -> str:
    return _provider.label


async def chat_completion(api_key: str, image_url: str, model_id: str, prompt: str) -> str:
    return await _provider.chat_completion(api_key, image_url, model_id, prompt)


async def list_chat_model_ids(api_key: str) -> list[str]:
    return await _provider.list_chat_model_ids(api_key)


async def fetch_user_info(api_key: str) -> httpx.Response:
    return await _provider.fetch_user_info(api_key)


async def fetch_balance(api_key: str) -> Balance | None:
    return await _provider.fetch_balance(api_key)
