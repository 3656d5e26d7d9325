"""
OAuth 1.0a three-legged authorization, driven from the console.

OAuth1Flow asks the provider for a temporary token, sends the user's
browser to the authorization page, catches the redirect on a local
CallbackReceiver, swaps the verifier for an access token and then hands
a signed OAuth1Session to the provider's request function.

Request signing (HMAC-SHA1) is done by requests-oauthlib.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import parse_qs, urlparse

import requests
from requests_oauthlib import OAuth1Session

from browser import DefaultBrowserLauncher
from oauth1_listener import AuthorizationDenied, CallbackReceiver

logger = logging.getLogger(__name__)

# Query parameters providers use to report that the user refused access
DENIAL_PARAMS = ("oauth_problem", "denied")


@dataclass(frozen=True)
class OAuth1Credentials:
    consumer_key: str
    consumer_secret: str

    @property
    def is_complete(self) -> bool:
        return bool(self.consumer_key) and bool(self.consumer_secret)


@dataclass(frozen=True)
class OAuth1Token:
    token: str = ""
    secret: str = ""

    @property
    def is_valid(self) -> bool:
        return bool(self.token) and bool(self.secret)


@dataclass(frozen=True)
class OAuth1Provider:
    """Endpoints of one OAuth 1.0a provider plus the API call to make once authorized."""

    name: str
    request_token_url: str
    authorization_url: str
    access_token_url: str
    callback_uri: str
    api_base_url: str
    request: Callable[[OAuth1Session, "OAuth1Provider"], Any]


class OAuth1Flow:
    def __init__(
        self,
        provider: OAuth1Provider,
        credentials: OAuth1Credentials,
        token: Optional[OAuth1Token] = None,
        launcher=None,
        wait_timeout: Optional[float] = None,
        session_factory=OAuth1Session,
    ):
        self.provider = provider
        self.credentials = credentials
        self.token = token or OAuth1Token()
        self.launcher = launcher or DefaultBrowserLauncher()
        self.wait_timeout = wait_timeout
        self.session_factory = session_factory

        self.receiver: Optional[CallbackReceiver] = None
        self._oauth: Optional[OAuth1Session] = None
        self._request_token: Optional[str] = None

    @property
    def is_enabled(self) -> bool:
        return self.credentials.is_complete

    def run(self):
        """Authorize if needed, then make the provider's API request."""
        name = self.provider.name

        if not self.is_enabled:
            logger.warning(
                f"Skipped {name} session sample because app key or secret is empty. "
                "Set LINKEDIN_CONSUMER_KEY and LINKEDIN_CONSUMER_SECRET in .env"
            )
            return

        logger.info(f"🚀 Running {name} session sample...")

        if not self.token.is_valid:
            self.do_authorization()

        if not self.token.is_valid:
            logger.error(f"❌ {name} authorization did not complete, skipping API request")
            return

        with self.api_session() as session:
            self.provider.request(session, self.provider)

    def do_authorization(self) -> bool:
        """
        Open the callback listener, send the browser to the provider and
        block until the redirect has been handled.

        Waits forever unless ``wait_timeout`` is set. Returns True once a
        valid access token is held.
        """
        with CallbackReceiver(self.provider.callback_uri, self.token_from_redirected_uri) as receiver:
            self.receiver = receiver
            try:
                try:
                    auth_url = self.build_authorization_url()
                except (ValueError, requests.exceptions.RequestException) as e:
                    logger.error(f"❌ Error: {e}")
                    return False

                logger.info(f"🌐 Opening browser in URI:\n{auth_url}")
                try:
                    self.launcher.open(auth_url)
                except OSError as e:
                    logger.warning(f"⚠️  Could not open a browser ({e}), open this URL manually:\n{auth_url}")

                # A redirect still being exchanged at the deadline is allowed to finish
                if not receiver.wait(self.wait_timeout) and not receiver.cancel():
                    logger.error(f"❌ No authorization redirect received within {self.wait_timeout} seconds")
                    return False
                if receiver.error is not None:
                    return False
            finally:
                if self._oauth is not None:
                    self._oauth.close()
                    self._oauth = None

        return self.token.is_valid

    def build_authorization_url(self) -> str:
        """Fetch a temporary token and return the provider URL the user must visit."""
        callback_uri = self.receiver.callback_uri if self.receiver else self.provider.callback_uri
        self._oauth = self.session_factory(
            self.credentials.consumer_key,
            client_secret=self.credentials.consumer_secret,
            callback_uri=callback_uri,
        )

        logger.info("🔑 Requesting temporary token...")
        temporary = self._oauth.fetch_request_token(self.provider.request_token_url)
        self._request_token = temporary.get("oauth_token")

        return self._oauth.authorization_url(self.provider.authorization_url)

    def token_from_redirected_uri(self, url: str):
        """Validate the browser redirect and exchange its verifier for an access token."""
        params = parse_qs(urlparse(url).query)

        for key in DENIAL_PARAMS:
            if key in params:
                raise AuthorizationDenied(f"provider reported {key}={params[key][0]}")

        if self._oauth is None or not self._request_token:
            raise ValueError("Redirect received before a temporary token was requested")

        token = params.get("oauth_token", [""])[0]
        verifier = params.get("oauth_verifier", [""])[0]
        if not token:
            raise ValueError("Redirected URI is missing the 'oauth_token' parameter")
        if token != self._request_token:
            raise ValueError("Redirected URI parameter 'oauth_token' does not match temporary token")
        if not verifier:
            raise ValueError("Redirected URI is missing the 'oauth_verifier' parameter")

        logger.info("🔑 Exchanging verifier for access token...")
        access = self._oauth.fetch_access_token(self.provider.access_token_url, verifier=verifier)

        access_token = OAuth1Token(access.get("oauth_token", ""), access.get("oauth_token_secret", ""))
        if not access_token.is_valid:
            raise ValueError("Access token response is missing 'oauth_token' or 'oauth_token_secret'")

        self.token = access_token
        logger.info("✓ Access token obtained")

    def api_session(self) -> OAuth1Session:
        """Session that signs every request with the consumer and access token secrets."""
        if not self.token.is_valid:
            raise ValueError("Cannot sign API requests without a valid access token")

        return self.session_factory(
            self.credentials.consumer_key,
            client_secret=self.credentials.consumer_secret,
            resource_owner_key=self.token.token,
            resource_owner_secret=self.token.secret,
        )
