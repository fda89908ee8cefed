"""HTML Sanitization Engine for user-authored rich text.

Academy texts (terms and conditions, data protection notices, authorization
documents, wiki lessons, landing page descriptions) are written by staff in a
rich-text editor and rendered as markup. This module removes the script
execution vectors from that markup while leaving the formatting alone:

- `<script>` elements are dropped together with their content.
- Event handler attributes (any name starting with `on`) are dropped.
- Attributes whose value uses the `javascript:` scheme are dropped.
- Attributes whose value uses the `data:` scheme are dropped, unless the
  payload is an image (`data:image/...`), so inline pictures survive.

No other element is filtered. Tables, images, iframes and formatting pass
through untouched.

Plain-text fields (titles, labels) go through `bleach` instead, with an
allowlist that defaults to no markup at all.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

import bleach
from bs4 import BeautifulSoup
from bs4.dammit import EntitySubstitution
from bs4.formatter import HTMLFormatter

logger = logging.getLogger("aulaguard.sanitizer")

# innerHTML-style output: <img ...> instead of <img .../>, and only &, < and >
# escaped so accented text is not turned into named entities. Raw text
# elements are written back unescaped, otherwise every pass would escape
# their content once more.
_RAW_TEXT_ELEMENTS = {"script", "style", "xmp", "iframe", "noembed", "noframes", "plaintext"}

_HTML_NAMESPACE = "http://www.w3.org/1999/xhtml"


class _InnerHTMLFormatter(HTMLFormatter):
    """Escapes text everywhere except inside HTML raw text elements.

    An SVG or MathML `<style>` holds ordinary text: its entities were
    decoded by the parser and must be escaped again on output.
    """

    def substitute(self, ns):
        parent = getattr(ns, "parent", None)
        if (
            parent is not None
            and parent.name in self.cdata_containing_tags
            and parent.namespace not in (None, _HTML_NAMESPACE)
        ):
            return self.entity_substitution(ns)
        return super().substitute(ns)


_FORMATTER = _InnerHTMLFormatter(
    entity_substitution=EntitySubstitution.substitute_xml,
    void_element_close_prefix=None,
    cdata_containing_tags=_RAW_TEXT_ELEMENTS,
)


@dataclass(frozen=True)
class SanitizationRules:
    """The policy table applied to every parsed fragment.

    Attributes:
        removed_elements (Tuple[str, ...]): Tag names removed with their content.
        event_handler_prefix (str): Attribute name prefix marking inline
            event handlers. Compared case-insensitively.
        blocked_schemes (Tuple[str, ...]): Value prefixes that remove the
            attribute carrying them.
        data_scheme (str): The `data:` URI prefix.
        allowed_data_prefixes (Tuple[str, ...]): `data:` payloads that are kept.
    """
    removed_elements: Tuple[str, ...] = ("script",)
    event_handler_prefix: str = "on"
    blocked_schemes: Tuple[str, ...] = ("javascript:",)
    data_scheme: str = "data:"
    allowed_data_prefixes: Tuple[str, ...] = ("data:image",)

    def is_dangerous(self, name: str, value: Any) -> bool:
        """Tells whether an attribute must be removed."""
        if name.lower().startswith(self.event_handler_prefix):
            return True

        folded = str(value).strip().lower()
        if folded.startswith(self.blocked_schemes):
            return True
        if folded.startswith(self.data_scheme):
            return not folded.startswith(self.allowed_data_prefixes)
        return False


DEFAULT_RULES = SanitizationRules()


def sanitize_html(html: Optional[str], rules: SanitizationRules = DEFAULT_RULES) -> str:
    """Returns a copy of `html` that is safe to render as markup.

    The input is parsed with the HTML5 algorithm (html5lib), so tag soup,
    unclosed elements and bare text are all accepted. Only the children of
    the document body are serialized back, which is what a browser would
    give for `body.innerHTML`.

    Args:
        html (Optional[str]): Untrusted HTML fragment. None counts as empty.
        rules (SanitizationRules): Policy table. Defaults to `DEFAULT_RULES`.

    Returns:
        str: The sanitized fragment. An empty string if the input is empty
        or if parsing fails (the raw input is never returned).
    """
    if not html:
        return ""

    try:
        soup = BeautifulSoup(str(html), "html5lib", multi_valued_attributes=None)

        for element in soup.find_all(list(rules.removed_elements)):
            element.decompose()

        for element in soup.find_all(True):
            for name in list(element.attrs):
                if rules.is_dangerous(name, element.attrs[name]):
                    logger.debug(f"Stripped attribute {name!r} from <{element.name}>")
                    del element[name]

        if soup.body is None:
            return ""
        return soup.body.decode_contents(formatter=_FORMATTER)
    except Exception as e:
        logger.error(f"❌ Error sanitizing HTML, returning empty content: {e}", exc_info=True)
        return ""


class SanitizerEngine:
    """Sanitizes rich text, plain-text fields and whole records."""

    def __init__(
        self,
        rules: SanitizationRules = DEFAULT_RULES,
        plain_tags: Optional[List[str]] = None,
        plain_attributes: Optional[Dict[str, List[str]]] = None,
    ):
        """Initializes the engine.

        Args:
            rules (SanitizationRules): Policy table for rich text.
            plain_tags (List[str], optional): Tags tolerated in plain-text
                fields. Defaults to none.
            plain_attributes (Dict[str, List[str]], optional): Attributes
                tolerated on those tags. Defaults to none.
        """
        self.rules = rules
        self.plain_tags = list(plain_tags or [])
        self.plain_attributes = dict(plain_attributes or {})

    def sanitize(self, html: Optional[str]) -> str:
        """Sanitizes a rich-text fragment with this engine's rules."""
        return sanitize_html(html, self.rules)

    def strip_markup(self, text: Optional[str]) -> str:
        """Cleans a field that is meant to be plain text.

        Disallowed tags are stripped (their text content is kept) and the
        remaining text is escaped, so the result can be placed in markup
        as-is.
        """
        if not text:
            return ""
        cleaned = bleach.clean(
            str(text),
            tags=set(self.plain_tags),
            attributes=self.plain_attributes,
            strip=True,
        )
        return cleaned.strip()

    def clean_payload(self, data: dict, fields: list = None) -> dict:
        """Recursively sanitizes the rich-text values of a record.

        Args:
            data (dict): The record, for instance a landing page with its
                custom fields.
            fields (list, optional): Keys whose string values are rich text.
                If None, every string value is sanitized.

        Returns:
            dict: A new dictionary with sanitized values. The original record
            is left unmodified.
        """
        cleaned = data.copy()

        for key, value in cleaned.items():
            if isinstance(value, dict):
                cleaned[key] = self.clean_payload(value, fields)
            elif isinstance(value, list):
                cleaned[key] = self._clean_list(key, value, fields)
            elif isinstance(value, str) and self._wants(key, fields):
                cleaned[key] = self.sanitize(value)

        return cleaned

    def _clean_list(self, key: str, items: list, fields: Optional[list]) -> list:
        cleaned = []
        for item in items:
            if isinstance(item, dict):
                cleaned.append(self.clean_payload(item, fields))
            elif isinstance(item, list):
                cleaned.append(self._clean_list(key, item, fields))
            elif isinstance(item, str) and self._wants(key, fields):
                cleaned.append(self.sanitize(item))
            else:
                cleaned.append(item)
        return cleaned

    @staticmethod
    def _wants(key: str, fields: Optional[list]) -> bool:
        return not fields or key in fields
