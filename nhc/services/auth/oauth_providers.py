"""
OAuth2 identity providers.

Each provider turns an authorization code from the frontend into a
normalized profile with two calls: code -> access token, then access
token -> profile.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import parse_qs

import httpx

logger = logging.getLogger(__name__)


class OAuthError(Exception):
    """Base class for provider failures."""

    def __init__(self, provider: str, message: str):
        super().__init__(message)
        self.provider = provider
        self.message = message


class OAuthExchangeError(OAuthError):
    """The provider rejected the authorization code."""


class OAuthProfileError(OAuthError):
    """The provider could not return the user's profile."""


@dataclass(frozen=True)
class OAuthProfile:
    provider: str
    subject: str
    email: Optional[str]
    first_name: str
    last_name: str
    picture: Optional[str]
    email_verified: bool


class OAuthProvider:
    """
    Shared HTTP plumbing for OAuth2 providers.

    Subclasses implement exchange_code() and fetch_profile().
    """

    name: str = ""
    display_name: str = ""

    def __init__(
        self,
        client_secret: Optional[str],
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the provider.

        Args:
            client_secret: OAuth client secret for this application
            timeout: Request timeout in seconds
            transport: Custom httpx transport (tests use httpx.MockTransport)
        """
        self._client_secret = client_secret
        self._timeout = timeout
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)

    @property
    def configured(self) -> bool:
        return bool(self._client_secret)

    async def authenticate(self, code: str, client_id: str, redirect_uri: str) -> OAuthProfile:
        """Exchange the code and fetch the profile in one step."""
        access_token = await self.exchange_code(code, client_id, redirect_uri)
        return await self.fetch_profile(access_token)

    async def exchange_code(self, code: str, client_id: str, redirect_uri: str) -> str:
        raise NotImplementedError

    async def fetch_profile(self, access_token: str) -> OAuthProfile:
        raise NotImplementedError

    def _error_message(self, response: httpx.Response) -> str:
        """Best-effort human message from a provider error reply."""
        try:
            data = response.json()
        except ValueError:
            return response.text or f"{self.display_name} returned {response.status_code}"

        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict):
            return error.get("message") or str(error)
        if isinstance(data, dict):
            return data.get("error_description") or error or str(data)
        return str(data)

    def _json_body(self, response: httpx.Response, error_class) -> Dict[str, Any]:
        """Decode a successful reply, raising error_class when it is not a JSON object."""
        try:
            data = response.json()
        except ValueError:
            data = None
        if not isinstance(data, dict):
            logger.warning(f"{self.display_name} returned a malformed reply")
            raise error_class(self.name, f"{self.display_name} returned a malformed reply")
        return data


class FacebookOAuthProvider(OAuthProvider):
    """Facebook Login via the Graph API."""

    name = "facebook"
    display_name = "Facebook"

    GRAPH_URL = "https://graph.facebook.com/v19.0"
    PROFILE_FIELDS = "id,first_name,last_name,email"

    async def exchange_code(self, code: str, client_id: str, redirect_uri: str) -> str:
        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.GRAPH_URL}/oauth/access_token",
                    params={
                        "code": code,
                        "client_id": client_id,
                        "client_secret": self._client_secret,
                        "redirect_uri": redirect_uri,
                    },
                )
        except httpx.HTTPError as e:
            raise OAuthExchangeError(self.name, f"Could not reach Facebook: {e}")

        if response.status_code != 200:
            message = self._error_message(response)
            logger.warning(f"Facebook token exchange failed: {message}")
            raise OAuthExchangeError(self.name, message)

        # Older Graph versions answer with a query string instead of JSON
        try:
            data: Dict[str, Any] = response.json()
        except ValueError:
            data = {k: v[0] for k, v in parse_qs(response.text).items()}
        if not isinstance(data, dict):
            raise OAuthExchangeError(self.name, "Facebook returned a malformed reply")

        access_token = data.get("access_token")
        if not access_token:
            raise OAuthExchangeError(self.name, "Facebook did not return an access token")
        return access_token

    async def fetch_profile(self, access_token: str) -> OAuthProfile:
        try:
            async with self._client() as client:
                response = await client.get(
                    f"{self.GRAPH_URL}/me",
                    params={"access_token": access_token, "fields": self.PROFILE_FIELDS},
                )
        except httpx.HTTPError as e:
            raise OAuthProfileError(self.name, f"Could not reach Facebook: {e}")

        if response.status_code != 200:
            message = self._error_message(response)
            logger.warning(f"Facebook profile fetch failed: {message}")
            raise OAuthProfileError(self.name, message)

        data = self._json_body(response, OAuthProfileError)
        subject = str(data.get("id") or "")
        if not subject:
            raise OAuthProfileError(self.name, "Facebook profile has no id")

        return OAuthProfile(
            provider=self.name,
            subject=subject,
            email=data.get("email"),
            first_name=data.get("first_name", ""),
            last_name=data.get("last_name", ""),
            picture=f"{self.GRAPH_URL}/{subject}/picture?type=large",
            # Facebook only shares confirmed addresses
            email_verified=True,
        )


class GoogleOAuthProvider(OAuthProvider):
    """Google Sign-In via OpenID Connect."""

    name = "google"
    display_name = "Google"

    TOKEN_URL = "https://oauth2.googleapis.com/token"
    USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

    async def exchange_code(self, code: str, client_id: str, redirect_uri: str) -> str:
        try:
            async with self._client() as client:
                response = await client.post(
                    self.TOKEN_URL,
                    data={
                        "code": code,
                        "client_id": client_id,
                        "client_secret": self._client_secret,
                        "redirect_uri": redirect_uri,
                        "grant_type": "authorization_code",
                    },
                )
        except httpx.HTTPError as e:
            raise OAuthExchangeError(self.name, f"Could not reach Google: {e}")

        if response.status_code != 200:
            message = self._error_message(response)
            logger.warning(f"Google token exchange failed: {message}")
            raise OAuthExchangeError(self.name, message)

        access_token = self._json_body(response, OAuthExchangeError).get("access_token")
        if not access_token:
            raise OAuthExchangeError(self.name, "Google did not return an access token")
        return access_token

    async def fetch_profile(self, access_token: str) -> OAuthProfile:
        try:
            async with self._client() as client:
                response = await client.get(
                    self.USERINFO_URL,
                    headers={"Authorization": f"Bearer {access_token}"},
                )
        except httpx.HTTPError as e:
            raise OAuthProfileError(self.name, f"Could not reach Google: {e}")

        if response.status_code != 200:
            message = self._error_message(response)
            logger.warning(f"Google profile fetch failed: {message}")
            raise OAuthProfileError(self.name, message)

        data = self._json_body(response, OAuthProfileError)
        subject = str(data.get("sub") or "")
        if not subject:
            raise OAuthProfileError(self.name, "Google profile has no subject")

        return OAuthProfile(
            provider=self.name,
            subject=subject,
            email=data.get("email"),
            first_name=data.get("given_name", ""),
            last_name=data.get("family_name", ""),
            picture=_large_google_picture(data.get("picture")),
            email_verified=str(data.get("email_verified", "")).lower() == "true",
        )


def _large_google_picture(url: Optional[str]) -> Optional[str]:
    """Ask for a 200px avatar instead of the default thumbnail."""
    if not url:
        return None
    return url.replace("sz=50", "sz=200").replace("=s96-c", "=s200-c")
