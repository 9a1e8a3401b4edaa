"""Security helpers: PII masking for safe logging."""
import re

EMAIL_PATTERN = re.compile(r"[\w.+-]+@[\w-]+\.[\w.-]+")
LONG_NUMBER_PATTERN = re.compile(r"\b\d{10,}\b")

def mask_pii(text: str) -> str:
    if not text:
        return ""
    masked = EMAIL_PATTERN.sub("[EMAIL]", text)
    masked = LONG_NUMBER_PATTERN.sub("[REDACTED]", masked)
    return masked

def preview(text: str, limit: int = 80) -> str:
    """Masked, single-line excerpt of customer text for log lines."""
    masked = mask_pii(text).replace("\n", " ")
    if len(masked) > limit:
        return masked[:limit] + "..."
    return masked
