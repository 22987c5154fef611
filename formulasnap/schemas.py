from pydantic import BaseModel


class SimpleTexModelInfo(BaseModel):
    id: str
    name: str
    free_per_day: int


class SettingsResponse(BaseModel):
    has_key: bool
    has_simpletex: bool
    simpletex_model: str
    simpletex_models: list[SimpleTexModelInfo]
    simpletex_usage_by_model: dict[str, int]
    sf_balance: str | None = None
    sf_charge_balance: str | None = None
    voucher_models: list[str]


class SaveSettingsRequest(BaseModel):
    simpletex_token: str | None = None
    siliconflow_key: str | None = None
    simpletex_model: str | None = None
    voucher_models_text: str | None = None


class SaveSettingsResponse(BaseModel):
    ok: bool
    errors: list[str] | None = None


class TestSimpleTexRequest(BaseModel):
    token: str | None = None


class TestSiliconFlowRequest(BaseModel):
    api_key: str | None = None


class TestResult(BaseModel):
    ok: bool
    error: str | None = None
    balance: str | None = None


class AvailableModel(BaseModel):
    id: str
    name: str
    provider: str
    modes: list[str]
    available: bool
    free_per_day: int | None = None
    usage_today: int | None = None
    pricing: str | None = None
    free: bool | None = None
    voucher: bool | None = None
    charge_balance: str | None = None
    total_balance: str | None = None


class AvailableModelsResponse(BaseModel):
    models: list[AvailableModel]
    sf_balance: str | None = None
    sf_charge_balance: str | None = None
    voucher_balance: str | None = None


class BalanceResponse(BaseModel):
    charge_balance: str | None = None
    total_balance: str | None = None
    voucher_balance: str | None = None


class RecognizeRequest(BaseModel):
    image: str
    mode: str = "formula"
    model_id: str = ""


class RecognizeResponse(BaseModel):
    text: str
    model: str
    verified: bool | None = None
    corrected: bool | None = None
    original_text: str | None = None


class OpenUrlRequest(BaseModel):
    url: str
