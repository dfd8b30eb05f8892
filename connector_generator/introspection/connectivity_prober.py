"""Reachability checks against a base URL."""
import logging

import requests

from connector_generator.schema.models import ProbeResult

logger = logging.getLogger(__name__)


class ConnectivityProber:
    """Issues single best-effort GET requests and reports the outcome"""

    # Tried in order when checking that credentials are accepted
    AUTH_CHECK_PATHS = ["", "/", "/api", "/health", "/ping"]

    def __init__(self, session: requests.Session, timeout: int = 30):
        """
        Initialize ConnectivityProber

        Args:
            session: Session built by create_session
            timeout: Per-request timeout in seconds
        """
        self.session = session
        self.timeout = timeout

    def test_connectivity(self, base_url: str) -> ProbeResult:
        """
        Check that the API answers at all

        Any HTTP status counts as reachable; transport failures are
        returned as a failed result, never raised.
        """
        try:
            response = self.session.get(base_url, timeout=self.timeout)
            logger.info(f"{base_url} answered with {response.status_code}")
            return ProbeResult(
                is_success=True,
                status_code=response.status_code,
                content=response.text,
                headers=dict(response.headers),
            )
        except requests.exceptions.Timeout:
            logger.debug(f"Timeout reaching {base_url}")
            return ProbeResult(is_success=False, error_message="Request timeout")
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.debug(f"Could not reach {base_url}: {e}")
            return ProbeResult(is_success=False, error_message=str(e))

    def test_authentication(self, base_url: str) -> ProbeResult:
        """
        Check that the session credentials are accepted

        Returns the first 2xx result, otherwise the last attempt.
        """
        base = base_url.rstrip("/")
        last_result = None

        for path in self.AUTH_CHECK_PATHS:
            url = f"{base}{path}" if path else base_url
            try:
                response = self.session.get(url, timeout=self.timeout)
                last_result = ProbeResult(
                    is_success=response.ok,
                    status_code=response.status_code,
                    content=response.text,
                )
                if response.ok:
                    logger.info(f"Authentication accepted at {url}")
                    return last_result
            except (requests.exceptions.RequestException, ValueError) as e:
                logger.debug(f"Authentication check failed for {url}: {e}")
                last_result = ProbeResult(is_success=False, error_message=str(e))

        return last_result or ProbeResult(is_success=False, error_message="All test URLs failed")
