"""Shared fixtures: an in-memory OAuth provider and a loopback 'browser'."""

import logging
import time

import pytest
import requests
from requests.adapters import BaseAdapter
from requests_oauthlib import OAuth1Session

from oauth1_session import OAuth1Provider

PROVIDER_BASE = "https://provider.test"
REQUEST_TOKEN_URL = f"{PROVIDER_BASE}/oauth/request_token"
AUTHORIZE_URL = f"{PROVIDER_BASE}/oauth/authorize"
ACCESS_TOKEN_URL = f"{PROVIDER_BASE}/oauth/access_token"
API_BASE_URL = f"{PROVIDER_BASE}/v1/people/"

FORM = "application/x-www-form-urlencoded"


class FakeProviderAdapter(BaseAdapter):
    """requests transport answering from a routing table and recording every request."""

    request_token_url = REQUEST_TOKEN_URL
    access_token_url = ACCESS_TOKEN_URL
    profile_url = f"{API_BASE_URL}~"

    def __init__(self):
        super().__init__()
        self.routes = {
            ("POST", REQUEST_TOKEN_URL): (200, "oauth_token=T&oauth_token_secret=TS&oauth_callback_confirmed=true", FORM),
            ("POST", ACCESS_TOKEN_URL): (200, "oauth_token=AT&oauth_token_secret=ATS", FORM),
            ("GET", f"{API_BASE_URL}~"): (200, '{"id": "abc123", "firstName": "Ada"}', "application/json"),
        }
        self.delays = {}
        self.requests = []

    def send(self, request, **kwargs):
        self.requests.append(request)
        route = (request.method, request.url.split("?")[0])
        time.sleep(self.delays.get(route, 0))
        status, body, content_type = self.routes.get(
            route,
            (404, "not found", "text/plain"),
        )

        response = requests.Response()
        response.status_code = status
        response.reason = "OK" if status < 400 else "Error"
        response._content = body.encode("utf-8")
        response.encoding = "utf-8"
        response.headers["Content-Type"] = content_type
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass

    def requests_to(self, url):
        return [r for r in self.requests if r.url.split("?")[0] == url]


@pytest.fixture
def provider_adapter():
    return FakeProviderAdapter()


@pytest.fixture
def session_factory(provider_adapter):
    """Real OAuth1Session (real signing) whose HTTPS traffic goes to the fake provider."""

    def _factory(*args, **kwargs):
        session = OAuth1Session(*args, **kwargs)
        session.mount("https://", provider_adapter)
        return session

    return _factory


def get_profile(session, provider):
    resp = session.get(f"{provider.api_base_url}~", params={"format": "json"})
    resp.raise_for_status()
    return resp.json()


@pytest.fixture
def make_provider():
    """Provider description pointing at the fake provider, listening on a free loopback port."""

    def _make(request=get_profile, callback_uri="http://127.0.0.1:0/"):
        return OAuth1Provider(
            name="Test",
            request_token_url=REQUEST_TOKEN_URL,
            authorization_url=AUTHORIZE_URL,
            access_token_url=ACCESS_TOKEN_URL,
            callback_uri=callback_uri,
            api_base_url=API_BASE_URL,
            request=request,
        )

    return _make


@pytest.fixture
def browse():
    """Plain HTTP client for hitting the loopback listener, ignoring proxy env vars."""
    client = requests.Session()
    client.trust_env = False

    def _browse(url, method="GET"):
        return client.request(method, url, timeout=10)

    yield _browse
    client.close()


@pytest.fixture(autouse=True)
def _info_logs(caplog):
    caplog.set_level(logging.INFO)
