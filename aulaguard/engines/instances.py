"""Global service registry and initialization manager.

This module acts as a singleton container for the application's engines.
It reads the global `policy` to decide which services are instantiated.

Architecture Note:
    - **Core Service** (Sanitizer) is mandatory and always initializes. It
      cannot be disabled by policy: a missing sanitizer would fail open.
    - **Optional Service** (Documents) is conditional on the `policy` state.
      If the policy disables it, its global instance remains `None`.
"""

import logging
from aulaguard.app.policy import policy
from aulaguard.engines.sanitizer_engine import SanitizerEngine
from aulaguard.engines.document_engine import DocumentEngine

logger = logging.getLogger("aulaguard.services")

# Global Instances
# These are populated by initialize_services() at startup.
sanitizer_service = None
document_service = None

def initialize_services():
    """Bootstraps the engines from the active sanitization policy.

    1.  **Mandatory**: Builds the `SanitizerEngine` with the policy table and
        the plain-text allowlist.
    2.  **Conditional**: Builds the `DocumentEngine` only if
        `policy.documents_enabled`.

    Raises:
        Exception: If an engine fails to initialize. The application must not
            start with a broken sanitizer.
    """
    global sanitizer_service, document_service

    try:
        logger.info("⚡ Initializing Global Services...")

        # 1. Core Service (ALWAYS REQUIRED)
        sanitizer_service = SanitizerEngine(
            rules=policy.rules,
            plain_tags=policy.plain_tags,
            plain_attributes=policy.plain_attributes,
        )
        logger.info("✅ SanitizerEngine: Ready")

        # 2. Documents (Conditional)
        if policy.documents_enabled:
            document_service = DocumentEngine(sanitizer_service)
            logger.info("✅ DocumentEngine: Ready")
        else:
            document_service = None
            logger.info("⚪ DocumentEngine: Disabled by Policy")

    except Exception as e:
        logger.critical(f"❌ Failed to initialize services: {e}")
        raise e
