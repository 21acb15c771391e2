"""Plain-text extraction from rich-text labels and connector sign detection."""

import re
from typing import Optional

from bs4 import BeautifulSoup

NEGATIVE_SIGN = "-"


def extract_plain_text(rich_text: Optional[str], inject_spacing: bool = True) -> str:
    """Strip markup from a board caption or note body.

    With ``inject_spacing`` every element gets a trailing space before its
    text is joined, so ``<p>foo</p><p>bar</p>`` reads ``foo bar `` rather
    than ``foobar``. Runs of whitespace are collapsed to a
    single space; leading and trailing spaces are left for callers to trim.
    """
    if not rich_text:
        return ""

    soup = BeautifulSoup(rich_text, "html.parser")
    if inject_spacing:
        # Document order: an element rewritten here detaches its descendants,
        # so later rewrites of those descendants no longer touch the soup.
        for element in soup.find_all(True):
            element.string = element.get_text() + " "
    return re.sub(r"\s{2,}", " ", soup.get_text())


def is_negative_caption(caption: Optional[str]) -> bool:
    return extract_plain_text(caption, inject_spacing=True).strip() == NEGATIVE_SIGN
