"""Which models can serve a recognition request, and how to present them."""

import logging
from dataclasses import dataclass
from typing import Callable

from formulasnap.errors import RecognitionError
from formulasnap.i18n import t
from formulasnap.models import Mode
from formulasnap.pricing import fetch_pricing_map
from formulasnap.providers import siliconflow

logger = logging.getLogger("formulasnap.catalog")

Predicate = Callable[[str], bool]


# --- SimpleTex: fixed model table ---

@dataclass(frozen=True)
class SimpleTexModel:
    id: str
    free_per_day: int
    mode: Mode

    @property
    def name(self) -> str:
        return t(f"models.simpletex.{self.id}")

    @property
    def modes(self) -> tuple[Mode, ...]:
        # The general model switches between formula and document recognition.
        if self.mode is Mode.DOCUMENT:
            return (Mode.FORMULA, Mode.OCR, Mode.DOCUMENT)
        return (self.mode,)


SIMPLETEX_MODELS: tuple[SimpleTexModel, ...] = (
    SimpleTexModel("latex_ocr", 500, Mode.FORMULA),
    SimpleTexModel("latex_ocr_turbo", 2000, Mode.FORMULA),
    SimpleTexModel("simpletex_ocr", 50, Mode.DOCUMENT),
)

DEFAULT_SIMPLETEX_MODEL = "latex_ocr"
GENERAL_SIMPLETEX_MODEL = "simpletex_ocr"


def find_simpletex_model(model_id: str) -> SimpleTexModel | None:
    return next((m for m in SIMPLETEX_MODELS if m.id == model_id), None)


def simpletex_display_name(model_id: str) -> str:
    model = find_simpletex_model(model_id)
    return model.name if model else model_id


# --- SiliconFlow: classification rules ---

def _upper_contains(token: str) -> Predicate:
    return lambda model_id: token in model_id.upper()


def _contains(token: str) -> Predicate:
    return lambda model_id: token in model_id


def _glm_vision(model_id: str) -> bool:
    """GLM vision variants are named like ``THUDM/GLM-4.1V``."""
    last = model_id.rsplit("/", 1)[-1]
    return last.startswith("GLM-") and last.endswith("V")


# Ordered (rule name, predicate); the first matching rule decides.
VISION_RULES: tuple[tuple[str, Predicate], ...] = (
    ("vl", _upper_contains("VL")),
    ("ocr", _upper_contains("OCR")),
    ("paddleocr", _upper_contains("PADDLEOCR")),
    ("omni", _upper_contains("OMNI")),
    ("captioner", _upper_contains("CAPTIONER")),
    ("vl2", _contains("vl2")),
    ("kimi-k2.5", _contains("Kimi-K2.5")),
    ("glm-v", _glm_vision),
)

OCR_ONLY_RULES: tuple[tuple[str, Predicate], ...] = (
    ("paddleocr", _upper_contains("PADDLEOCR")),
    ("deepseek-ocr", _upper_contains("DEEPSEEK-OCR")),
    ("captioner", _upper_contains("CAPTIONER")),
)


def first_matching_rule(rules: tuple[tuple[str, Predicate], ...], model_id: str) -> str | None:
    return next((name for name, matches in rules if matches(model_id)), None)


@dataclass(frozen=True)
class ModelClassification:
    vision_rule: str | None
    ocr_only_rule: str | None

    @property
    def vision(self) -> bool:
        return self.vision_rule is not None

    @property
    def ocr_only(self) -> bool:
        return self.ocr_only_rule is not None

    @property
    def modes(self) -> tuple[Mode, ...]:
        if self.ocr_only:
            return (Mode.OCR,)
        return (Mode.FORMULA, Mode.OCR)


def classify_model(model_id: str) -> ModelClassification:
    return ModelClassification(
        vision_rule=first_matching_rule(VISION_RULES, model_id),
        ocr_only_rule=first_matching_rule(OCR_ONLY_RULES, model_id),
    )


def is_vision_model(model_id: str) -> bool:
    return classify_model(model_id).vision


def is_ocr_only_model(model_id: str) -> bool:
    return classify_model(model_id).ocr_only


def model_display_name(model_id: str) -> str:
    is_pro = model_id.startswith("Pro/")
    stripped = model_id[len("Pro/"):] if is_pro else model_id
    name = stripped.rsplit("/", 1)[-1].removesuffix("-Instruct")
    return f"{name} (Pro)" if is_pro else name


# --- SiliconFlow: catalog ---

@dataclass(frozen=True)
class Pricing:
    input_price: float
    output_price: float

    @property
    def is_free(self) -> bool:
        return self.input_price == 0.0 and self.output_price == 0.0


@dataclass(frozen=True)
class ProviderModel:
    id: str
    display_name: str
    pricing: Pricing | None
    modes: tuple[Mode, ...]

    @property
    def free(self) -> bool:
        # Unknown pricing is never free.
        return self.pricing is not None and self.pricing.is_free

    @property
    def sort_price(self) -> float:
        # Unknown pricing sorts as 0 among the non-free models.
        return self.pricing.input_price if self.pricing else 0.0

    def pricing_label(self) -> str:
        if self.pricing is None:
            return t("pricing.unknown")
        if self.pricing.is_free:
            return t("pricing.free")
        return t(
            "pricing.priced",
            input=f"{self.pricing.input_price:g}",
            output=f"{self.pricing.output_price:g}",
        )


def build_catalog(
    model_ids: list[str],
    pricing_map: dict[str, tuple[float, float]],
) -> list[ProviderModel]:
    """Vision models only, free first, then by ascending input price."""
    models: list[ProviderModel] = []
    for model_id in model_ids:
        classification = classify_model(model_id)
        if not classification.vision:
            continue
        price = pricing_map.get(model_id)
        models.append(ProviderModel(
            id=model_id,
            display_name=model_display_name(model_id),
            pricing=Pricing(*price) if price and min(price) >= 0 else None,
            modes=classification.modes,
        ))
    # list.sort is stable: ties keep the provider's listing order.
    models.sort(key=lambda m: (not m.free, m.sort_price))
    return models


async def list_vision_models(
    api_key: str,
    pricing_map: dict[str, tuple[float, float]] | None = None,
) -> list[ProviderModel]:
    if not api_key:
        return []
    try:
        model_ids = await siliconflow.list_chat_model_ids(api_key)
    except RecognitionError as exc:
        logger.warning("Could not list SiliconFlow models: %s", exc)
        return []
    if pricing_map is None:
        pricing_map = await fetch_pricing_map()
    return build_catalog(model_ids, pricing_map)
