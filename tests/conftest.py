"""Shared test configuration.

Points the policy loader at the repository's sample policy before any
application module is imported, so tests do not depend on the working
directory.
"""

import os

_REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

os.environ.setdefault("POLICY_PATH", os.path.join(_REPO_ROOT, "aulaguard.yaml"))
