# parkdesk/services/receipt_service.py
"""
Receipt dispatch. Posts a finalized receipt to the print bridge.

POST {PRINTER_URL}  body: {"business": ..., "receipt": {...}}
Fire-and-forget: routers schedule send_receipt() as a background task and
answer the desk without waiting. Failures are logged, never raised.
Without PRINTER_URL the receipt is only logged; the API response carries
it so the desk can show it instead.
"""

import httpx
from parkdesk.config import settings
from parkdesk.schemas.records import Receipt
from parkdesk.utils.logger import get_logger

logger = get_logger(__name__)


def receipt_payload(receipt: Receipt) -> dict:
    return {"business": settings.BUSINESS_NAME, "receipt": receipt.model_dump(mode="json")}


async def send_receipt(receipt: Receipt) -> bool:
    """Send a receipt to the printer. Returns True when the printer accepted it."""
    if not settings.PRINTER_URL:
        logger.info(f"[RECEIPT] No printer configured, {receipt.plate} amount={receipt.amount}")
        return False

    try:
        async with httpx.AsyncClient(timeout=settings.PRINTER_TIMEOUT_SECONDS) as client:
            response = await client.post(settings.PRINTER_URL, json=receipt_payload(receipt))
            if response.status_code < 300:
                logger.info(f"[RECEIPT] Printed {receipt.plate} ({'exit' if receipt.is_exit else 'entry'})")
                return True
            logger.warning(f"[RECEIPT] Printer returned HTTP {response.status_code} for {receipt.plate}")
            return False
    except httpx.HTTPError as e:
        logger.error(f"[RECEIPT] Printer unreachable for {receipt.plate}: {e}")
        return False
