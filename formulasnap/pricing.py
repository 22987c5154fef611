"""Best-effort scrape of the public SiliconFlow pricing page.

The page has no API; each model row renders as a link followed by two
price cells (input, output, in ¥ per million tokens).  A free model
shows ``免费`` instead of a number.
"""

import logging
import re

import httpx

from formulasnap.config import settings

logger = logging.getLogger("formulasnap.pricing")

FREE_MARKER = "免费"

PRICE_ROW = re.compile(
    r'href="[^"]*?target=([^"]+)"[^>]*>([^<]+)</a></div>'
    r"<div[^>]*>(" + FREE_MARKER + r"|[\d.]+)</div>"
    r"<div[^>]*>(" + FREE_MARKER + r"|[\d.]+)</div>"
)


def _parse_price(raw: str) -> float | None:
    if raw == FREE_MARKER:
        return 0.0
    try:
        return float(raw)
    except ValueError:
        return None


def parse_pricing_html(html: str) -> dict[str, tuple[float, float]]:
    """Map model id → (input price, output price), in page order."""
    prices: dict[str, tuple[float, float]] = {}
    for match in PRICE_ROW.finditer(html):
        model_id = match.group(2).strip()
        input_price = _parse_price(match.group(3))
        output_price = _parse_price(match.group(4))
        if input_price is None or output_price is None:
            continue
        prices[model_id] = (input_price, output_price)
    return prices


async def fetch_pricing_map() -> dict[str, tuple[float, float]]:
    url = settings.endpoint("SILICONFLOW_PRICING_URL")
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout()) as client:
            response = await client.get(url)
    except httpx.HTTPError as exc:
        logger.warning("Pricing page unavailable: %s", exc)
        return {}

    if not 200 <= response.status_code < 300:
        logger.warning("Pricing page returned HTTP %s", response.status_code)
        return {}

    prices = parse_pricing_html(response.text)
    logger.debug("Scraped %d model prices", len(prices))
    return prices
