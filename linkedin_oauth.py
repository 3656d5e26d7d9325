import logging
import sys

from browser import select_launcher
from config import DEFAULT_CALLBACK_URI, load_settings
from linkedin_profile import fetch_profile
from logging_config import setup_logging
from oauth1_session import OAuth1Credentials, OAuth1Flow, OAuth1Provider, OAuth1Token

logger = logging.getLogger(__name__)

REQUEST_TOKEN_URL = "https://api.linkedin.com/uas/oauth/requestToken"
AUTHORIZE_URL = "https://www.linkedin.com/uas/oauth/authenticate"
ACCESS_TOKEN_URL = "https://api.linkedin.com/uas/oauth/accessToken"
API_BASE_URL = "https://api.linkedin.com/v1/people/"


def linkedin_provider(callback_uri=DEFAULT_CALLBACK_URI):
    return OAuth1Provider(
        name="LinkedIn",
        request_token_url=REQUEST_TOKEN_URL,
        authorization_url=AUTHORIZE_URL,
        access_token_url=ACCESS_TOKEN_URL,
        callback_uri=callback_uri,
        api_base_url=API_BASE_URL,
        request=fetch_profile,
    )


def build_linkedin_flow(settings):
    """Wire settings into an OAuth1Flow for LinkedIn."""
    return OAuth1Flow(
        linkedin_provider(settings.callback_uri),
        OAuth1Credentials(settings.consumer_key, settings.consumer_secret),
        token=OAuth1Token(settings.access_token, settings.access_token_secret),
        launcher=select_launcher(settings.browser),
        wait_timeout=settings.callback_timeout,
    )


def main():
    try:
        settings = load_settings()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    log_file = setup_logging(settings.log_dir, settings.log_level)
    logger.info("Running oauth1 sample...")
    logger.info(f"Log file: {log_file}")

    try:
        build_linkedin_flow(settings).run()
    except KeyboardInterrupt:
        logger.warning("Authorization interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.critical(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)

    logger.info("Done.")


if __name__ == "__main__":
    main()
