"""Credential checks used when settings are saved or tested.

Only an explicit auth failure invalidates a SimpleTex token; a server
error or exhausted quota leaves it in place.
"""

import logging
from dataclasses import dataclass
from typing import Any

from formulasnap.errors import NetworkError
from formulasnap.i18n import t
from formulasnap.providers import is_success, siliconflow, simpletex

logger = logging.getLogger("formulasnap.validation")


@dataclass
class ProbeResult:
    ok: bool
    error: str | None = None
    balance: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"ok": self.ok}
        if self.error is not None:
            result["error"] = self.error
        if self.balance is not None:
            result["balance"] = self.balance
        return result


def _json_or_none(response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


async def validate_simpletex_token(token: str) -> bool:
    try:
        response = await simpletex.upload_test_image(token)
    except NetworkError:
        return False
    if response.status_code == 401:
        return False
    return simpletex.error_type(_json_or_none(response)) != simpletex.UNAUTHORIZED


async def validate_siliconflow_key(api_key: str) -> bool:
    try:
        response = await siliconflow.fetch_user_info(api_key)
    except NetworkError:
        return False
    return is_success(response)


def _simpletex_error(code: str | None) -> str | None:
    if code == simpletex.UNAUTHORIZED:
        return t("probe.token_invalid")
    if code == simpletex.NO_VALID_RESOURCE:
        return t("probe.no_resource")
    return None


async def probe_simpletex(token: str) -> ProbeResult:
    """Recognize the test image and explain any failure."""
    if not token:
        return ProbeResult(ok=False, error=t("probe.token_missing"))
    try:
        response = await simpletex.upload_test_image(token)
    except NetworkError as exc:
        return ProbeResult(ok=False, error=t("probe.network_error", detail=exc.params.get("detail", "")))

    if response.status_code == 401:
        return ProbeResult(ok=False, error=t("probe.token_invalid"))

    payload = _json_or_none(response)
    code = simpletex.error_type(payload)
    if not is_success(response):
        error = _simpletex_error(code) or t("probe.server_error", status=response.status_code)
        return ProbeResult(ok=False, error=error)

    if not isinstance(payload, dict) or payload.get("status") is not True:
        error = _simpletex_error(code) or code or t("probe.unknown_error")
        return ProbeResult(ok=False, error=error)

    logger.info("SimpleTex token verified")
    return ProbeResult(ok=True)


async def probe_siliconflow(api_key: str) -> ProbeResult:
    """Query account info; reports the total balance on success."""
    if not api_key:
        return ProbeResult(ok=False, error=t("probe.key_missing"))
    try:
        response = await siliconflow.fetch_user_info(api_key)
    except NetworkError as exc:
        return ProbeResult(ok=False, error=t("probe.network_error", detail=exc.params.get("detail", "")))

    if response.status_code == 401:
        return ProbeResult(ok=False, error=t("probe.key_invalid"))
    if not is_success(response):
        return ProbeResult(ok=False, error=t("probe.http_status", status=response.status_code))

    return ProbeResult(ok=True, balance=siliconflow.parse_total_balance(_json_or_none(response)))
