# events/sanitizers.py
"""
Input sanitization for the registration backend.

All user-generated content should pass through these functions
before being stored or rendered.
"""
import re
from typing import Optional

import bleach


# Allowed HTML tags for event descriptions
ALLOWED_TAGS = [
    'p', 'br', 'strong', 'em', 'u', 'a', 'ul', 'ol', 'li', 'blockquote', 'code',
]

ALLOWED_ATTRIBUTES = {
    'a': ['href', 'title'],
}

CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]')


def sanitize_text(text: Optional[str], max_length: Optional[int] = None, strip: bool = True) -> str:
    """
    Sanitize plain text input (names, e-mails).

    - Strips leading/trailing whitespace
    - Removes markup and control characters
    - Enforces maximum length
    - Returns empty string for None input
    """
    if text is None:
        return ""

    text = bleach.clean(text, tags=[], attributes={}, strip=True)
    # bleach escapes bare ampersands and angle brackets; names are not HTML
    text = text.replace("&amp;", "&").replace("&lt;", "<").replace("&gt;", ">")
    text = CONTROL_CHARS.sub('', text)

    if strip:
        text = text.strip()

    if max_length and len(text) > max_length:
        text = text[:max_length]

    return text


def sanitize_html(html: Optional[str], max_length: Optional[int] = None) -> str:
    """Sanitize HTML content, keeping a small formatting subset."""
    if html is None:
        return ""

    clean = bleach.clean(
        html.strip(),
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        strip=True,
    )

    if max_length and len(clean) > max_length:
        clean = clean[:max_length]

    return clean
