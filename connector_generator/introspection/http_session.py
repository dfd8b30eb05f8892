"""Builds the authenticated HTTP session shared by every probe of a run."""
import logging
from typing import Optional

import requests
import urllib3
from requests.auth import HTTPBasicAuth
from urllib3.exceptions import InsecureRequestWarning

from connector_generator.config import GeneratorSettings
from connector_generator.schema.models import ApiConfiguration, AuthenticationType

logger = logging.getLogger(__name__)


def create_session(
    config: ApiConfiguration,
    settings: Optional[GeneratorSettings] = None,
) -> requests.Session:
    """
    Create a session carrying the configured authentication

    Args:
        config: Run configuration (authentication parameters are read from it)
        settings: Generator settings (user agent, TLS verification)

    Returns:
        A fresh requests.Session; the caller owns and closes it
    """
    settings = settings or GeneratorSettings()

    session = requests.Session()
    session.verify = settings.verify_ssl
    if not settings.verify_ssl:
        urllib3.disable_warnings(InsecureRequestWarning)

    session.headers.update({
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    })

    _apply_authentication(session, config)
    return session


def _apply_authentication(session: requests.Session, config: ApiConfiguration) -> None:
    auth_type = config.auth_type

    if auth_type == AuthenticationType.API_KEY:
        if config.api_key:
            session.headers[config.api_key_header or "X-API-Key"] = config.api_key

    elif auth_type == AuthenticationType.BEARER_TOKEN:
        if config.bearer_token:
            session.headers["Authorization"] = f"Bearer {config.bearer_token}"

    elif auth_type == AuthenticationType.BASIC_AUTH:
        if config.username and config.password:
            session.auth = HTTPBasicAuth(config.username, config.password)

    elif auth_type == AuthenticationType.OAUTH2:
        # No token exchange while probing: client credentials go out as basic auth
        if config.client_id and config.client_secret:
            session.auth = HTTPBasicAuth(config.client_id, config.client_secret)

    logger.debug(f"Session authentication: {auth_type.value}")
