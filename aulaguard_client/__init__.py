from aulaguard_client.client import AulaGuardAPIError, AulaGuardClient, AulaGuardError

__all__ = ["AulaGuardClient", "AulaGuardError", "AulaGuardAPIError"]
