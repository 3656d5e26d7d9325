"""Tests for the LinkedIn profile request."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from linkedin_oauth import linkedin_provider
from linkedin_profile import fetch_profile, person_urn_from_profile


def _session(payload=None, error=None):
    resp = MagicMock()
    resp.json.return_value = payload
    if error is not None:
        resp.raise_for_status.side_effect = error
    session = MagicMock()
    session.get.return_value = resp
    return session


def test_fetch_profile_requests_people_me_and_prints(capsys):
    payload = {"id": "abc123", "firstName": "Ada", "lastName": "Lovelace"}
    session = _session(payload)

    profile = fetch_profile(session, linkedin_provider())

    session.get.assert_called_once_with("https://api.linkedin.com/v1/people/~?format=json")
    assert profile == payload
    out = capsys.readouterr().out
    assert f"Information: {json.dumps(payload)}" in out
    assert "Person URN: urn:li:person:abc123" in out


def test_fetch_profile_without_id_prints_no_urn(capsys):
    fetch_profile(_session({"firstName": "Ada"}), linkedin_provider())

    assert "Person URN" not in capsys.readouterr().out


def test_http_errors_propagate():
    session = _session(error=requests.exceptions.HTTPError("401 Client Error"))

    with pytest.raises(requests.exceptions.HTTPError):
        fetch_profile(session, linkedin_provider())


def test_invalid_json_propagates():
    session = _session()
    session.get.return_value.json.side_effect = ValueError("Expecting value")

    with pytest.raises(ValueError):
        fetch_profile(session, linkedin_provider())


@pytest.mark.parametrize(
    "profile,expected",
    [
        ({"id": "abc"}, "urn:li:person:abc"),
        ({"id": "urn:li:person:abc"}, "urn:li:person:abc"),
        ({"id": 12345}, "urn:li:person:12345"),
        ({"id": ""}, None),
        ({}, None),
        ([1, 2], None),
    ],
)
def test_person_urn_from_profile(profile, expected):
    assert person_urn_from_profile(profile) == expected
