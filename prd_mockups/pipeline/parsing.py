"""
Extraction of delimited HTML designs from raw model output.

The model is asked to wrap each design as::

    <DESIGN id="1" title="Some title">
    <!DOCTYPE html>...</html>
    </DESIGN>

Extraction is a plain left-to-right scan. It does not parse HTML, so the
content of a block is passed through untouched.
"""

import logging
from typing import List, Optional, Tuple

from prd_mockups.models import Design

logger = logging.getLogger(__name__)


OPEN_PREFIX = '<DESIGN id="'
TITLE_SEPARATOR = '" title="'
OPEN_SUFFIX = '">'
CLOSE_TAG = "</DESIGN>"

FALLBACK_ID = "1"
FALLBACK_TITLE = "Result"

_DIGITS = frozenset("0123456789")


class DesignExtractor:
    """Scans raw model text for <DESIGN> blocks."""

    def _read_opening_tag(self, text: str, start: int) -> Optional[Tuple[str, str, int]]:
        """
        Read an opening tag beginning at ``start``.

        Returns:
            (id, title, end) where ``end`` is the index just past ``">``,
            or None if the tag is malformed.
        """
        if not text.startswith(OPEN_PREFIX, start):
            return None

        pos = start + len(OPEN_PREFIX)
        id_start = pos
        while pos < len(text) and text[pos] in _DIGITS:
            pos += 1
        if pos == id_start:
            return None
        design_id = text[id_start:pos]

        if not text.startswith(TITLE_SEPARATOR, pos):
            return None
        pos += len(TITLE_SEPARATOR)

        # Title runs to the next double quote; no escaping.
        title_end = text.find('"', pos)
        if title_end <= pos:
            return None
        title = text[pos:title_end]

        if not text.startswith(OPEN_SUFFIX, title_end):
            return None
        return design_id, title, title_end + len(OPEN_SUFFIX)

    def scan(self, text: str) -> List[Design]:
        """
        Find all well-formed, non-nested blocks in document order.

        Each opening tag pairs with the nearest following closing tag.
        """
        designs: List[Design] = []
        pos = 0

        while True:
            start = text.find(OPEN_PREFIX, pos)
            if start == -1:
                break

            opening = self._read_opening_tag(text, start)
            if opening is None:
                pos = start + 1
                continue

            design_id, title, body_start = opening
            close = text.find(CLOSE_TAG, body_start)
            if close == -1:
                # Nothing after this point can be closed either.
                break

            designs.append(Design(
                id=design_id,
                title=title,
                html=text[body_start:close].strip()
            ))
            pos = close + len(CLOSE_TAG)

        return designs

    def extract(self, raw_text: str) -> List[Design]:
        """
        Extract designs from a raw model response.

        Args:
            raw_text: Unmodified model output.

        Returns:
            At least one Design. When no block is found, a single fallback
            design carries the whole untrimmed response as its html.
        """
        designs = self.scan(raw_text)
        if designs:
            return designs

        logger.warning(
            "No <DESIGN> blocks found in model response (%d chars); returning raw text",
            len(raw_text)
        )
        return [Design(id=FALLBACK_ID, title=FALLBACK_TITLE, html=raw_text)]


def extract_designs(raw_text: str) -> List[Design]:
    """Extract designs from raw model text (see DesignExtractor.extract)."""
    return DesignExtractor().extract(raw_text)
