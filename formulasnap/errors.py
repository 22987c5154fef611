"""User-facing error taxonomy.

Every failure a command can report is one of these.  ``str(exc)`` is the
localized message shown to the user; ``status_code`` is what the REST
surface answers with.
"""

from formulasnap.i18n import t


class RecognitionError(Exception):
    status_code: int = 502
    error_type: str = "provider_error"
    default_key: str = "errors.provider_message"

    def __init__(self, key: str | None = None, **params: object) -> None:
        self.key = key or self.default_key
        self.params = params
        super().__init__(t(self.key, **params))

    @property
    def message(self) -> str:
        return str(self)


class NotConfigured(RecognitionError):
    status_code = 400
    error_type = "not_configured"


class AuthError(RecognitionError):
    status_code = 401
    error_type = "auth_error"


class QuotaExhausted(RecognitionError):
    status_code = 429
    error_type = "quota_exhausted"
    default_key = "errors.simpletex_quota"


class ValidationError(RecognitionError):
    status_code = 422
    error_type = "validation_error"


class ProviderError(RecognitionError):
    status_code = 502
    error_type = "provider_error"


class NetworkError(RecognitionError):
    status_code = 503
    error_type = "network_error"
    default_key = "errors.request_failed"


class NoModelSelected(RecognitionError):
    status_code = 400
    error_type = "no_model_selected"
    default_key = "errors.no_model_selected"
