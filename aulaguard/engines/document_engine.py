"""Academy Document Rendering Engine.

Document templates (terms and conditions, data protection, authorizations)
are rich text with `#{NAME}#` placeholders that are filled with academy and
student data. Rendering always follows the same order:

1.  **Substitute**: placeholders are replaced with HTML-escaped values.
2.  **Sanitize**: the filled template goes through the HTML sanitizer.

Sanitizing last means a placeholder value can never smuggle an executable
vector into the rendered document.
"""

import html
import logging
import re
from typing import Dict, List, Optional

from aulaguard.app.config import AcademyProfile, DocumentSection, RenderedSection, StudentInfo
from aulaguard.engines.sanitizer_engine import SanitizerEngine

logger = logging.getLogger("aulaguard.documents")

PLACEHOLDER_RE = re.compile(r"#\{([A-Z0-9_]+)\}#")


def build_placeholder_context(
    academy: AcademyProfile, student: Optional[StudentInfo] = None
) -> Dict[str, str]:
    """Collects the values of every known placeholder.

    Args:
        academy (AcademyProfile): The academy issuing the document.
        student (StudentInfo, optional): The student the document is for.
            Student and tutor placeholders are empty without one.

    Returns:
        Dict[str, str]: Placeholder name (without delimiters) to raw value.
    """
    address = f"{academy.address or ''}, {academy.postal_code or ''} {academy.population or ''}"
    context = {
        "ACADEMY_NAME": academy.public_name or "",
        "ACADEMY_EMAIL": academy.contact_email or "",
        "ACADEMY_SEPA_CREDITOR_NAME": academy.sepa_creditor_name or "",
        "ACADEMY_ADDRESS": address,
        "ACADEMY_NIF": academy.nif or "",
        "STUDENT_FULL_NAME": "",
        "TUTOR_1_FULL_NAME": "",
        "TUTOR_1_NIF": "",
    }

    if student is not None:
        context["STUDENT_FULL_NAME"] = f"{student.first_name or ''} {student.last_name or ''}".strip()
        if student.tutors:
            first_tutor = student.tutors[0]
            context["TUTOR_1_FULL_NAME"] = first_tutor.full_name or ""
            context["TUTOR_1_NIF"] = first_tutor.nif or ""

    return context


def replace_placeholders(text: Optional[str], context: Dict[str, Optional[str]]) -> str:
    """Fills `#{NAME}#` tokens from `context`.

    Values are HTML-escaped since they are data, not markup. Tokens with no
    entry in `context` are left as written.
    """
    if not text:
        return ""

    def _substitute(match: re.Match) -> str:
        name = match.group(1)
        if name not in context:
            return match.group(0)
        return html.escape(context[name] or "")

    return PLACEHOLDER_RE.sub(_substitute, text)


class DocumentEngine:
    """Renders academy document sections into sanitized markup."""

    def __init__(self, sanitizer: SanitizerEngine):
        self.sanitizer = sanitizer

    def render_section(self, section: DocumentSection, context: Dict[str, str]) -> RenderedSection:
        """Renders one section: plain-text title, sanitized body."""
        filled = replace_placeholders(section.text, context)
        return RenderedSection(
            title=self.sanitizer.strip_markup(section.title),
            html=self.sanitizer.sanitize(filled),
        )

    def render_document(
        self,
        sections: List[DocumentSection],
        academy: AcademyProfile,
        student: Optional[StudentInfo] = None,
    ) -> List[RenderedSection]:
        """Renders all sections of a document with a shared placeholder context.

        Args:
            sections (List[DocumentSection]): Sections in display order.
            academy (AcademyProfile): Academy data for ACADEMY_* placeholders.
            student (StudentInfo, optional): Student data for STUDENT_* and
                TUTOR_* placeholders.

        Returns:
            List[RenderedSection]: One rendered section per input, same order.
        """
        context = build_placeholder_context(academy, student)
        logger.info(f"📄 Rendering document with {len(sections)} section(s)")
        return [self.render_section(section, context) for section in sections]
