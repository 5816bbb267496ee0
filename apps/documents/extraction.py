"""
Best-effort field extraction for insurance documents.

Text comes from the first few PDF pages (PyMuPDF) or from plain text input,
then each field is filled by its own ordered pattern rules; the first match
in document order wins. Nothing here raises: unreadable input yields an
empty ExtractionResult.
"""
import logging
import re
from dataclasses import asdict, dataclass
from typing import Optional

import fitz
from django.conf import settings

logger = logging.getLogger(__name__)

# Column widths of the Document fields these values land in
FIELD_MAX_LENGTHS = {
    'insurance_type': 50,
    'policy_number': 50,
    'provider': 255,
    'premium': 50,
    'due_date': 50,
}

INSURANCE_TYPES = ('health', 'auto', 'car', 'life', 'home', 'property', 'general', 'liability')

POLICY_NUMBER_RE = re.compile(
    r'policy\s*(?:#|number|num|no)?[:.\s]*([A-Za-z0-9-]{5,20})',
    re.IGNORECASE,
)

# Label is case-insensitive, the provider name itself must be capitalized
PROVIDER_RE = re.compile(
    r"(?i:provided by|issued by|insurer|carrier|provider|company)[:.\s]*"
    r"([A-Z][\w&'-]*(?:[ \t]+(?:&|[A-Z][\w&'-]*))*)"
)
CORPORATE_SUFFIXES = {'inc', 'llc', 'ltd', 'co', 'corp', 'corporation', 'company'}

PREMIUM_RE = re.compile(
    r'(?:premium|payment|cost)[:.\s]*[$€£₹]?\s*(\d[\d,]*(?:\.\d+)?)',
    re.IGNORECASE,
)

DUE_DATE_RE = re.compile(
    r'(?:due date|payment due|expiration date|expiry date|renewal date)[:.\s]*(?:on\s+)?'
    r'(\d{1,2}[/.-]\d{1,2}[/.-]\d{2,4}'
    r'|\d{4}-\d{1,2}-\d{1,2}'
    r'|[A-Za-z]{3,9}\.?\s+\d{1,2},?\s+\d{4})',
    re.IGNORECASE,
)


@dataclass(frozen=True)
class ExtractionResult:
    insurance_type: Optional[str] = None
    policy_number: Optional[str] = None
    provider: Optional[str] = None
    premium: Optional[str] = None
    due_date: Optional[str] = None

    def as_dict(self):
        return asdict(self)

    @property
    def is_empty(self):
        return not any(self.as_dict().values())


def find_insurance_type(text):
    lowered = text.lower()
    for term in INSURANCE_TYPES:
        if re.search(rf'\b{term}\b', lowered):
            return term.title()
    return None


def find_policy_number(text):
    match = POLICY_NUMBER_RE.search(text)
    return match.group(1).strip() if match else None


def find_provider(text):
    for match in PROVIDER_RE.finditer(text):
        words = []
        for word in match.group(1).split():
            if word.rstrip('.').lower() in CORPORATE_SUFFIXES:
                break
            words.append(word)
        name = ' '.join(words).strip(" &")
        if name:
            return name
    return None


def find_premium(text):
    match = PREMIUM_RE.search(text)
    return match.group(1).strip() if match else None


def find_due_date(text):
    match = DUE_DATE_RE.search(text)
    return ' '.join(match.group(1).split()) if match else None


def fit_to_columns(fields):
    """Replace values longer than their Document column with None."""
    fitted = {}
    for name, value in fields.items():
        if value is not None and len(value) > FIELD_MAX_LENGTHS[name]:
            logger.info("Dropping extracted %s of length %d", name, len(value))
            value = None
        fitted[name] = value
    return fitted


class FieldExtractor:
    def __init__(self, max_pages=None, max_chars=None):
        self.max_pages = max_pages or settings.EXTRACTION_MAX_PAGES
        self.max_chars = max_chars or settings.EXTRACTION_MAX_CHARS

    def extract_text(self, content):
        """
        Text of a PDF (first `max_pages` pages) or of UTF-8 text input,
        capped at `max_chars`. Raises on unreadable content.
        """
        if isinstance(content, (bytearray, memoryview)):
            content = bytes(content)

        if isinstance(content, str):
            text = content
        elif content.lstrip()[:5] == b'%PDF-':
            with fitz.open(stream=content, filetype='pdf') as pdf:
                pages = [pdf[i].get_text() for i in range(min(pdf.page_count, self.max_pages))]
            text = '\n'.join(pages)
        else:
            text = content.decode('utf-8')

        return text[:self.max_chars]

    def extract(self, content):
        try:
            text = self.extract_text(content)
            result = ExtractionResult(**fit_to_columns({
                'insurance_type': find_insurance_type(text),
                'policy_number': find_policy_number(text),
                'provider': find_provider(text),
                'premium': find_premium(text),
                'due_date': find_due_date(text),
            }))
        except Exception as e:
            logger.warning("Field extraction failed, continuing without fields: %s", e, exc_info=True)
            return ExtractionResult()

        logger.debug("Extracted fields: %s", result.as_dict())
        return result


def extract(content):
    """Module-level shortcut using configured limits."""
    return FieldExtractor().extract(content)
