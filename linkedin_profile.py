import json
import logging
from urllib.parse import urljoin

logger = logging.getLogger(__name__)

PROFILE_RESOURCE = "~?format=json"


def person_urn_from_profile(profile):
    """Build the member's Person URN from the profile 'id', if there is one."""
    if not isinstance(profile, dict):
        return None
    person_id = str(profile.get("id") or "")
    if not person_id:
        return None
    return person_id if person_id.startswith("urn:li:person:") else f"urn:li:person:{person_id}"


def fetch_profile(session, provider):
    """GET the authorized member's profile with a signed session and print it."""
    url = urljoin(provider.api_base_url, PROFILE_RESOURCE)

    logger.info("📤 Requesting user information...")
    resp = session.get(url)
    resp.raise_for_status()
    profile = resp.json()

    print(f"Information: {json.dumps(profile)}")
    person_urn = person_urn_from_profile(profile)
    if person_urn:
        print(f"Person URN: {person_urn}")

    return profile
