"""Identity provider port — outbound interface for external OAuth identities."""

from typing import Protocol

from domain.model.user import ExternalClaims


class IdentityProvider(Protocol):
    """Port for exchanging an external bearer token for verified claims.

    A single attempt per call; implementations never retry.
    """

    def exchange(self, external_token: str) -> ExternalClaims:
        """Return verified claims. Raise VerificationError on any failure."""
        ...
