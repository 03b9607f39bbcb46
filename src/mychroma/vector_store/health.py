import logging

import requests

from .client import API_PREFIX

logger = logging.getLogger(__name__)

DEFAULT_HEALTH_TIMEOUT = 5.0


def check_health(base_url: str, timeout: float = DEFAULT_HEALTH_TIMEOUT) -> bool:
    """
    Check whether a Chroma server is up and ready to execute requests.

    Args:
        base_url: Server base address, e.g. ``http://localhost:8000``
        timeout: Connect and read timeout in seconds

    Returns:
        True only when the health endpoint answers 200 with
        ``is_executor_ready`` set to true
    """
    health_url = f"{base_url.rstrip('/')}{API_PREFIX}/healthcheck"

    try:
        response = requests.get(
            health_url,
            headers={"accept": "application/json"},
            timeout=timeout,
            allow_redirects=True,
        )
    except requests.exceptions.RequestException as e:
        logger.warning(f"Health check request to {health_url} failed: {e}")
        return False

    if response.status_code != 200 or not response.text:
        logger.warning(
            f"Health check at {health_url} returned status {response.status_code}"
        )
        return False

    try:
        data = response.json()
    except ValueError:
        logger.warning(f"Health check at {health_url} returned non-JSON body")
        return False

    return isinstance(data, dict) and data.get("is_executor_ready") is True
