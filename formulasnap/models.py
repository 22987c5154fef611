"""Domain types shared by the recognition pipeline."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from formulasnap.errors import ValidationError


class Mode(str, Enum):
    FORMULA = "formula"
    OCR = "ocr"
    DOCUMENT = "document"

    @classmethod
    def parse(cls, raw: str) -> "Mode":
        try:
            return cls(raw)
        except ValueError:
            raise ValidationError("errors.unknown_mode", mode=raw) from None


@dataclass(frozen=True)
class RecognitionRequest:
    image: str             # base64 payload or data URL
    mode: Mode
    model_selector: str    # "provider:modelId" or a bare model id


@dataclass
class RecognitionResult:
    text: str
    model_label: str
    verified: bool | None = None
    corrected: bool | None = None
    original_text: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire shape: unset optional fields are left out."""
        result: dict[str, Any] = {"text": self.text, "model": self.model_label}
        if self.verified is not None:
            result["verified"] = self.verified
        if self.corrected is not None:
            result["corrected"] = self.corrected
        if self.original_text is not None:
            result["original_text"] = self.original_text
        return result
