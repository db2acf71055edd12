from typing import Any, Dict

import requests

from wp_contentful.migrators.contentful_migrator import error_details, get_content_type, get_environment
from .errors import MigrationError
from .logger import get_logger

logger = get_logger(__name__)


class PreFlightCheckError(MigrationError):
    """Custom exception for pre-flight check failures."""
    pass


def run_contentful_pre_flight_checks(config: Dict[str, Any]) -> None:
    """
    Verifies that the Contentful environment is correctly configured for migration.

    Args:
        config: The application configuration dictionary.

    Raises:
        PreFlightCheckError: If any check fails.
    """
    logger.info("Running pre-flight checks...")

    ctf = config.get("contentful", {})
    if not ctf.get("access_token"):
        raise PreFlightCheckError("Contentful access token not found in the configuration.")

    # Check 1: Verify access token, space and environment
    try:
        get_environment(ctf)
    except requests.HTTPError as e:
        status = e.response.status_code if e.response is not None else None
        if status == 401:
            raise PreFlightCheckError("The Contentful access token is invalid or has expired.") from e
        if status == 404:
            raise PreFlightCheckError(
                f"Space '{ctf.get('space_id')}' or environment '{ctf.get('environment')}' was not found."
            ) from e
        raise PreFlightCheckError(f"Unexpected error checking the Contentful environment: {error_details(e)}") from e
    except requests.RequestException as e:
        raise PreFlightCheckError(f"Network error connecting to Contentful: {e}") from e

    # Check 2: Verify the content types the migration writes to
    for role, content_type_id in ctf.get("content_types", {}).items():
        try:
            get_content_type(ctf, content_type_id)
        except requests.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise PreFlightCheckError(
                    f"Content type '{content_type_id}' ({role}) does not exist in this environment."
                ) from e
            raise PreFlightCheckError(f"Unexpected error checking content type '{content_type_id}': {error_details(e)}") from e
        except requests.RequestException as e:
            raise PreFlightCheckError(f"Network error connecting to Contentful: {e}") from e

    logger.info("Pre-flight checks passed successfully.")
