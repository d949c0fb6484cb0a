"""In-memory implementation of IdentityProvider for testing."""

from domain.model.errors import VerificationError
from domain.model.user import ExternalClaims


class FakeIdentityProvider:
    def __init__(self):
        self.tokens: dict[str, ExternalClaims] = {}
        self.calls: list[str] = []

    def register(self, token: str, claims: ExternalClaims) -> None:
        self.tokens[token] = claims

    def exchange(self, external_token: str) -> ExternalClaims:
        self.calls.append(external_token)
        claims = self.tokens.get(external_token)
        if claims is None:
            raise VerificationError("Unknown external token")
        return claims
