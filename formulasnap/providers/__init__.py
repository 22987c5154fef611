from typing import Any

import httpx

from formulasnap.errors import NotConfigured, ProviderError


def ensure_credential(value: str | None, not_configured_key: str) -> str:
    if not value:
        raise NotConfigured(not_configured_key)
    return value


def to_data_url(image_b64: str, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{image_b64}"


def as_image_url(image: str) -> str:
    """Pass data URLs through, wrap bare base64 as a PNG data URL."""
    if image.startswith("data:"):
        return image
    return to_data_url(image)


def is_success(response: httpx.Response) -> bool:
    return 200 <= response.status_code < 300


def json_body(response: httpx.Response) -> Any:
    """Decode a JSON body, reporting undecodable payloads as a provider error."""
    try:
        return response.json()
    except ValueError as exc:
        raise ProviderError("errors.bad_response", detail=str(exc)) from exc
