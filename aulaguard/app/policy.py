"""Sanitization Policy Loader.

This module loads the rich-text safety policy of the academy platform from a
YAML file (`aulaguard.yaml`). The file can tune the sanitizer's policy table,
the plain-text allowlist and the optional services without touching the
environment.

Typical Usage:
    from aulaguard.app.policy import policy
    engine = SanitizerEngine(policy.rules, policy.plain_tags, policy.plain_attributes)
"""

import yaml
import os
import logging
from typing import Dict, List, Tuple

from aulaguard.app.config import settings
from aulaguard.engines.sanitizer_engine import DEFAULT_RULES, SanitizationRules

logger = logging.getLogger("aulaguard.policy")

class AulaGuardPolicy:
    """A wrapper around the YAML policy file enforcing default behaviors.

    Missing or malformed settings fall back to the defaults, which are the
    platform's reference sanitization policy. The policy can never be made
    empty by accident: a broken file means defaults, not "no rules", and
    `removed_elements` / `blocked_schemes` can add entries but never drop
    the default ones.
    """

    def __init__(self, config_path: str = "aulaguard.yaml"):
        """Initializes the policy engine.

        Args:
            config_path (str): Path to the policy file.
                Defaults to "aulaguard.yaml" in the working directory.
        """
        self.config_path = config_path
        self._config = {}
        self.reload()

    def reload(self):
        """Loads or reloads the policy from disk.

        If the file is missing or invalid, `_default_config()` is used and the
        problem is logged. The application keeps running with safe defaults.
        """
        if not os.path.exists(self.config_path):
            logger.warning(f"⚠️ Policy file not found at {self.config_path}. Using Defaults.")
            self._config = self._default_config()
            return

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
            if not isinstance(loaded, dict):
                raise ValueError("top level of the policy file must be a mapping")
            self._config = loaded
            logger.info(f"✅ Sanitization Policy loaded from {self.config_path}")
        except Exception as e:
            logger.critical(f"❌ Failed to load sanitization policy: {e}")
            self._config = self._default_config()

    def _default_config(self):
        """Returns the hardcoded configuration used when no file can be read."""
        return {
            "services": {
                "documents": True
            },
            "sanitization": {
                "removed_elements": list(DEFAULT_RULES.removed_elements),
                "event_handler_prefix": DEFAULT_RULES.event_handler_prefix,
                "blocked_schemes": list(DEFAULT_RULES.blocked_schemes),
                "allowed_data_prefixes": list(DEFAULT_RULES.allowed_data_prefixes),
            },
            "plain_text": {
                "allowed_tags": [],
                "allowed_attributes": {}
            }
        }

    def _section(self, name: str) -> dict:
        section = self._config.get(name) or {}
        return section if isinstance(section, dict) else {}

    def _string_list(self, section: str, key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
        value = self._section(section).get(key)
        if value is None:
            return default
        if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
            logger.warning(f"⚠️ Ignoring malformed policy value {section}.{key}: {value!r}")
            return default
        return tuple(v.strip().lower() for v in value)

    def _extended_list(self, section: str, key: str, default: Tuple[str, ...]) -> Tuple[str, ...]:
        """Like `_string_list`, but the defaults can only be extended, never dropped."""
        configured = self._string_list(section, key, default)
        missing = [v for v in default if v not in configured]
        if missing:
            logger.warning(f"⚠️ Policy value {section}.{key} cannot drop {missing}; keeping them")
        return default + tuple(v for v in configured if v not in default)

    # --- Service Toggles ---
    @property
    def documents_enabled(self) -> bool:
        """Feature flag: Enable/Disable the document rendering engine."""
        return bool(self._section("services").get("documents", True))

    # --- Rich Text ---
    @property
    def rules(self) -> SanitizationRules:
        """Builds the sanitizer's policy table from the `sanitization` section."""
        prefix = self._section("sanitization").get("event_handler_prefix")
        if not isinstance(prefix, str) or not prefix.strip():
            prefix = DEFAULT_RULES.event_handler_prefix

        return SanitizationRules(
            removed_elements=self._extended_list(
                "sanitization", "removed_elements", DEFAULT_RULES.removed_elements
            ),
            event_handler_prefix=prefix.strip().lower(),
            blocked_schemes=self._extended_list(
                "sanitization", "blocked_schemes", DEFAULT_RULES.blocked_schemes
            ),
            allowed_data_prefixes=self._string_list(
                "sanitization", "allowed_data_prefixes", DEFAULT_RULES.allowed_data_prefixes
            ),
        )

    # --- Plain Text ---
    @property
    def plain_tags(self) -> List[str]:
        """Returns the allowlist of HTML tags for plain-text fields."""
        return list(self._string_list("plain_text", "allowed_tags", ()))

    @property
    def plain_attributes(self) -> Dict[str, List[str]]:
        """Returns the allowlist of attributes per tag for plain-text fields."""
        value = self._section("plain_text").get("allowed_attributes") or {}
        if not isinstance(value, dict):
            logger.warning(f"⚠️ Ignoring malformed policy value plain_text.allowed_attributes: {value!r}")
            return {}
        return {str(tag): list(attrs or []) for tag, attrs in value.items()}

policy = AulaGuardPolicy(settings.POLICY_PATH)
