"""Project-level i18n: reads from ``static/locales/<lang>.json``.

Every user-facing string the service returns (error messages, pricing
labels, model names) goes through here, so the desktop UI can show them
verbatim.

Fallback chain:  overrides → lang → fallback → English defaults.

Usage::

    from formulasnap.i18n import I18n, t

    tr = I18n('zh')                       # Chinese, English fallback
    tr('errors.no_model_selected')        # "未选择模型"

    t('errors.simpletex_http', status=500)   # uses the configured language
"""

import json
from pathlib import Path

from formulasnap.config import settings

LOCALES_DIR = Path(__file__).resolve().parent.parent / 'static' / 'locales'

# Baked-in English defaults; the system works even without any JSON files.
DEFAULTS: dict[str, str] = {
    'errors.simpletex_not_configured':  'SimpleTex token is not configured',
    'errors.siliconflow_not_configured': 'Please configure a SiliconFlow API key in settings first',
    'errors.no_model_selected':         'No model selected',
    'errors.simpletex_unauthorized':    'SimpleTex token is invalid or expired',
    'errors.simpletex_quota':           'SimpleTex quota is used up',
    'errors.simpletex_failed':          'SimpleTex recognition failed: {code}',
    'errors.simpletex_http':            'SimpleTex API error: {status}',
    'errors.request_failed':            'Request failed: {detail}',
    'errors.bad_response':              'Failed to parse response: {detail}',
    'errors.image_missing':             'No image provided',
    'errors.image_decode':              'Base64 decoding failed: {detail}',
    'errors.image_too_small':           'Image is too small: this model requires at least 28×28 pixels, please use a larger image',
    'errors.api_failed':                'API call failed: {status}',
    'errors.provider_message':          '{message}',
    'errors.unknown_mode':              'Unsupported recognition mode: {mode}',
    'errors.unknown_provider':          'Unknown provider: {provider}',
    'errors.invalid_url':               'Cannot open link: {url}',
    'errors.unknown_action':            'Unknown action: {action}',
    'errors.bad_message':               'Malformed message: expected a JSON object',
    'settings.simpletex_token_invalid': 'SimpleTex token is invalid and has been cleared',
    'settings.siliconflow_key_invalid': 'SiliconFlow API key is invalid and has been cleared',
    'probe.token_missing':              'No token entered',
    'probe.key_missing':                'No API key entered',
    'probe.network_error':              'Network error: {detail}',
    'probe.token_invalid':              'Token is invalid or expired',
    'probe.no_resource':                'No resources available (quota used up)',
    'probe.server_error':               'Server error (HTTP {status})',
    'probe.key_invalid':                'API key is invalid',
    'probe.http_status':                'HTTP {status}',
    'probe.unknown_error':              'Unknown error',
    'models.simpletex_provider':        'SimpleTex',
    'models.siliconflow_provider':      'SiliconFlow',
    'models.simpletex.latex_ocr':       'SimpleTex Standard',
    'models.simpletex.latex_ocr_turbo': 'SimpleTex Turbo',
    'models.simpletex.simpletex_ocr':   'SimpleTex General',
    'pricing.free_per_day':             '{count} free per day',
    'pricing.unknown':                  'Price unknown',
    'pricing.free':                     'Free',
    'pricing.priced':                   'In ¥{input} / Out ¥{output}',
    'recognition.simpletex_label':      'SimpleTex ({name})',
}


def _load_json(path: Path) -> dict[str, str]:
    if path.is_file():
        with open(path, encoding='utf-8') as f:
            return json.load(f)
    return {}


class I18n:
    """Simple key→string translator with ``.format()`` interpolation."""

    def __init__(
        self,
        lang: str = 'en',
        fallback: str = 'en',
        locales_dir: Path | str | None = None,
        overrides: dict[str, str] | None = None,
    ) -> None:
        search = Path(locales_dir) if locales_dir else LOCALES_DIR

        self._strings: dict[str, str] = dict(DEFAULTS)
        self._strings.update(_load_json(search / 'en.json'))

        if fallback != 'en':
            self._strings.update(_load_json(search / f'{fallback}.json'))

        if lang not in ('en', fallback):
            self._strings.update(_load_json(search / f'{lang}.json'))

        # Host-specific overrides win
        if overrides:
            self._strings.update(overrides)

    def __call__(self, key: str, **kwargs: object) -> str:
        template = self._strings.get(key, key)
        return template.format(**kwargs) if kwargs else template


_translators: dict[str, I18n] = {}


def translator() -> I18n:
    """Return the cached translator for the configured language."""
    lang = settings.language()
    if lang not in _translators:
        _translators[lang] = I18n(lang)
    return _translators[lang]


def t(key: str, **kwargs: object) -> str:
    return translator()(key, **kwargs)
