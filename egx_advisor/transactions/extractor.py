import re

import structlog
from langchain_core.messages import HumanMessage
from pydantic import ValidationError as PydanticValidationError

from egx_advisor.exceptions import AppError, ValidationError
from egx_advisor.llm.client import LLMClient, parse_llm_json
from egx_advisor.transactions.schemas import ExtractedTransaction

logger = structlog.get_logger()

EXTRACTION_PROMPT = """You are analyzing a screenshot of stock trading transactions. \
Extract ALL transactions visible in the image.

For each transaction, extract:
- Type: "buy" or "sell"
- Number of shares
- Price per share (in EGP)
- Date (format: DD MMM YY, e.g., "08 Jan 26")
- Time (format: HH:MM AM/PM, e.g., "02:21PM")
- Status: "Fulfilled" or "Cancelled"

IMPORTANT:
- Only extract FULFILLED transactions (ignore Cancelled ones)
- Extract the exact numbers as shown
- Prices are in EGP (Egyptian Pounds)
- Lines look like: "Buy • 113 shares @ EGP 98.460 Fulfilled"

Return ONLY a JSON array with this exact structure:
[
  {"type": "buy", "shares": 113, "price": 98.46, "date": "05 Jan 26", "time": "01:45PM", \
"status": "Fulfilled"}
]

Return an empty array [] if no fulfilled transactions are found.
Respond ONLY with a valid JSON array, no markdown formatting."""

EXTRACTION_FAILED = "Failed to extract transactions from image"

_DATA_URL_PREFIX = re.compile(r"^data:(image/\w+);base64,")
DEFAULT_MIME_TYPE = "image/png"


def split_data_url(image: str) -> tuple[str, str]:
    """Return (mime type, bare base64 payload), accepting plain base64 too."""
    match = _DATA_URL_PREFIX.match(image)
    if match is None:
        return DEFAULT_MIME_TYPE, image
    return match.group(1), image[match.end() :]


class TransactionExtractor:
    def __init__(self, llm: LLMClient) -> None:
        self._llm = llm

    async def extract(self, image: str) -> list[ExtractedTransaction]:
        """Send a screenshot to the vision model and parse the order lines it reads."""
        if not image:
            raise ValidationError("image (base64) required")

        mime_type, b64_image = split_data_url(image)
        message = HumanMessage(
            content=[
                {"type": "text", "text": EXTRACTION_PROMPT},
                {
                    "type": "image_url",
                    "image_url": {"url": f"data:{mime_type};base64,{b64_image}"},
                },
            ]
        )

        logger.info("transaction_extraction_started", mime_type=mime_type)
        try:
            raw_text = await self._llm.invoke([message])
            items = parse_llm_json(raw_text)
        except Exception as exc:
            logger.error("transaction_extraction_failed", error=str(exc))
            raise AppError(EXTRACTION_FAILED, code="EXTRACTION_FAILED") from exc

        if not isinstance(items, list):
            logger.error("transaction_extraction_not_array")
            raise AppError(EXTRACTION_FAILED, code="EXTRACTION_FAILED")

        transactions: list[ExtractedTransaction] = []
        for idx, item in enumerate(items):
            try:
                transactions.append(ExtractedTransaction.model_validate(item))
            except PydanticValidationError as exc:
                logger.warning("transaction_item_skipped", index=idx, reason=str(exc))

        logger.info("transaction_extraction_completed", count=len(transactions))
        return transactions
