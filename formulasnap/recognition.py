"""Recognition pipeline: resolve the provider, recognize, verify formulas.

SiliconFlow formula results get a second pass in which the model checks
its own transcription against the image.  That pass can only improve a
result: if it fails, the first transcription is returned unverified.
"""

import logging
from dataclasses import dataclass

from formulasnap.catalog import (
    DEFAULT_SIMPLETEX_MODEL,
    GENERAL_SIMPLETEX_MODEL,
    simpletex_display_name,
)
from formulasnap.errors import NoModelSelected, RecognitionError, ValidationError
from formulasnap.i18n import t
from formulasnap.models import Mode, RecognitionRequest, RecognitionResult
from formulasnap.prompts import recognition_prompt, verification_prompt
from formulasnap.providers import as_image_url, ensure_credential
from formulasnap.providers import siliconflow, simpletex
from formulasnap.usage import UsageTracker
from formulasnap.util import normalize_whitespace

logger = logging.getLogger("formulasnap.recognition")

SIMPLETEX = "simpletex"
SILICONFLOW = "siliconflow"
PROVIDERS = (SIMPLETEX, SILICONFLOW)


# --- Provider resolution ---

@dataclass(frozen=True)
class ExplicitSelector:
    provider: str
    model_id: str


@dataclass(frozen=True)
class FallbackSimpleTex:
    provider: str = SIMPLETEX
    model_id: str = DEFAULT_SIMPLETEX_MODEL


@dataclass(frozen=True)
class FallbackSiliconFlow:
    provider: str = SILICONFLOW
    model_id: str = ""


Resolution = ExplicitSelector | FallbackSimpleTex | FallbackSiliconFlow


def resolve_selector(selector: str, mode: Mode, has_simpletex_token: bool) -> Resolution:
    """Turn a ``provider:model`` selector into a provider and model.

    Without a ``:`` the selector names no provider: formulas go to the
    SimpleTex standard model when a token is configured, everything else
    to SiliconFlow with no model chosen.
    """
    if ":" in selector:
        provider, model_id = selector.split(":", 1)
        if provider not in PROVIDERS:
            raise ValidationError("errors.unknown_provider", provider=provider)
        return ExplicitSelector(provider=provider, model_id=model_id)
    if has_simpletex_token and mode is Mode.FORMULA:
        return FallbackSimpleTex()
    return FallbackSiliconFlow()


# --- Verification ---

def reconcile(primary: str, secondary: str, model_label: str) -> RecognitionResult:
    """Combine a formula and its re-check into the final result."""
    if not secondary:
        return RecognitionResult(text=primary, model_label=model_label, verified=False)
    if normalize_whitespace(primary) == normalize_whitespace(secondary):
        return RecognitionResult(text=primary, model_label=model_label, verified=True, corrected=False)
    return RecognitionResult(
        text=secondary,
        model_label=model_label,
        verified=False,
        corrected=True,
        original_text=primary,
    )


async def verify_formula(api_key: str, image_url: str, model_id: str, primary: str) -> RecognitionResult:
    try:
        secondary = await siliconflow.chat_completion(api_key, image_url, model_id, verification_prompt(primary))
    except RecognitionError as exc:
        logger.warning("Verification pass with %s failed, keeping first result: %s", model_id, exc)
        secondary = ""
    result = reconcile(primary, secondary, model_id)
    if result.corrected:
        logger.info("Verification pass with %s corrected the formula", model_id)
    return result


# --- Provider paths ---

async def recognize_with_simpletex(
    token: str,
    image: str,
    mode: Mode,
    model_id: str,
    usage: UsageTracker,
) -> RecognitionResult:
    token = ensure_credential(token, "errors.simpletex_not_configured")
    rec_mode = None
    if model_id == GENERAL_SIMPLETEX_MODEL:
        rec_mode = "formula" if mode is Mode.FORMULA else "document"

    text, confidence = await simpletex.recognize(token, image, model_id, rec_mode)
    usage.increment(model_id)
    logger.info("SimpleTex %s recognized %d chars (confidence %.2f)", model_id, len(text), confidence)
    return RecognitionResult(
        text=text,
        model_label=t("recognition.simpletex_label", name=simpletex_display_name(model_id)),
    )


async def recognize_with_siliconflow(
    api_key: str,
    image: str,
    mode: Mode,
    model_id: str,
) -> RecognitionResult:
    api_key = ensure_credential(api_key, "errors.siliconflow_not_configured")
    image_url = as_image_url(image)

    primary = await siliconflow.chat_completion(api_key, image_url, model_id, recognition_prompt(mode))
    if not primary:
        return RecognitionResult(text="", model_label=model_id, verified=False)
    if mode is not Mode.FORMULA:
        return RecognitionResult(text=primary, model_label=model_id)
    return await verify_formula(api_key, image_url, model_id, primary)


async def recognize(
    request: RecognitionRequest,
    *,
    simpletex_token: str,
    siliconflow_key: str,
    usage: UsageTracker,
) -> RecognitionResult:
    resolution = resolve_selector(request.model_selector, request.mode, bool(simpletex_token))
    if not resolution.model_id:
        raise NoModelSelected()
    logger.debug("Recognizing %s with %s:%s", request.mode.value, resolution.provider, resolution.model_id)

    if resolution.provider == SIMPLETEX:
        return await recognize_with_simpletex(
            simpletex_token, request.image, request.mode, resolution.model_id, usage,
        )
    return await recognize_with_siliconflow(
        siliconflow_key, request.image, request.mode, resolution.model_id,
    )
