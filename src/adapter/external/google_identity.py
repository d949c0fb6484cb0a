"""Google identity adapter.

Implements IdentityProvider by calling Google's OAuth2 userinfo endpoint
with the caller's access token. One attempt per exchange, no retries.

API Documentation: https://developers.google.com/identity/openid-connect/openid-connect#obtainuserinfo
"""

import logging

import httpx

from domain.model.errors import VerificationError
from domain.model.user import ExternalClaims
from utils.config import GOOGLE_USERINFO_URL, Settings

logger = logging.getLogger(__name__)

API_TIMEOUT_SECONDS = 10.0


class GoogleIdentityAdapter:
    """Adapter that verifies Google access tokens via the userinfo endpoint."""

    def __init__(
        self,
        userinfo_url: str = GOOGLE_USERINFO_URL,
        timeout: float = API_TIMEOUT_SECONDS,
        client: httpx.Client | None = None,
    ):
        self.userinfo_url = userinfo_url
        self.timeout = timeout
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "GoogleIdentityAdapter":
        return cls(
            userinfo_url=settings.google_userinfo_url,
            timeout=settings.identity_timeout_seconds,
        )

    def _get(self, external_token: str) -> httpx.Response:
        headers = {"Authorization": f"Bearer {external_token}"}
        if self._client is not None:
            return self._client.get(self.userinfo_url, headers=headers, timeout=self.timeout)
        with httpx.Client(timeout=self.timeout) as client:
            return client.get(self.userinfo_url, headers=headers)

    def exchange(self, external_token: str) -> ExternalClaims:
        """Exchange a Google access token for verified profile claims.

        Raises:
            VerificationError: non-200 status, transport failure, non-JSON
                body, or a payload missing required claims
        """
        if not external_token:
            raise VerificationError("Missing external token")

        try:
            response = self._get(external_token)
        except httpx.RequestError as e:
            logger.warning(
                "Google userinfo request error",
                extra={"error_type": type(e).__name__},
            )
            raise VerificationError("Google userinfo request failed") from e

        if response.status_code != httpx.codes.OK:
            logger.warning(
                "Google userinfo rejected token",
                extra={"status_code": response.status_code},
            )
            raise VerificationError(
                f"Failed to get user info from Google: {response.status_code}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            logger.warning("Google userinfo returned non-JSON body")
            raise VerificationError("Malformed userinfo response") from e

        claims = ExternalClaims.from_payload(payload)
        logger.debug("Google token verified", extra={"externalId": claims.external_id})
        return claims
