"""
Registration Template - Renders the factories that build a ready client

Supports:
- No-auth, static bearer token and OAuth client-credentials factories
- Fully custom options (timeout, headers, TLS, extra httpx.Auth)
- Cached OAuth token with a single retry after 401
"""

from typing import List, Set

from connector_generator.builder.client_template import client_class_name
from connector_generator.builder.contract_template import contract_class_name
from connector_generator.builder.source import docstring, string_literal
from connector_generator.schema.models import GeneratedFileType

REGISTRATION_TEMPLATE = '''{module_doc}

import time
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from .{stem}_api import Http{contract}
from .{stem}_client import {client}

DEFAULT_BASE_URL = {base_url}


@dataclass
class ConnectorOptions:
    """Transport settings for a {client}."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0
    user_agent: str = {user_agent}
    headers: Dict[str, str] = field(default_factory=dict)
    verify_ssl: bool = True


class BearerTokenAuth(httpx.Auth):
    """Sends a static bearer token with every request."""

    def __init__(self, token: str):
        self.token = token

    def auth_flow(self, request):
        request.headers["Authorization"] = f"Bearer {{self.token}}"
        yield request


class ClientCredentialsAuth(httpx.Auth):
    """OAuth2 client-credentials flow; the token is cached until it expires."""

    requires_response_body = True

    # Renew slightly before the server-side expiry
    EXPIRY_MARGIN = 60

    def __init__(
        self,
        token_endpoint: str,
        client_id: str,
        client_secret: str,
        scope: Optional[str] = None,
    ):
        self.token_endpoint = token_endpoint
        self.client_id = client_id
        self.client_secret = client_secret
        self.scope = scope
        self._access_token: Optional[str] = None
        self._expires_at = 0.0

    def auth_flow(self, request):
        if self._access_token is None or time.monotonic() >= self._expires_at:
            yield from self._refresh_token()

        request.headers["Authorization"] = f"Bearer {{self._access_token}}"
        response = yield request

        if response.status_code == 401:
            # stale or revoked token: renew once and replay
            yield from self._refresh_token()
            request.headers["Authorization"] = f"Bearer {{self._access_token}}"
            yield request

    def _refresh_token(self):
        data = {{
            "grant_type": "client_credentials",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
        }}
        if self.scope:
            data["scope"] = self.scope

        response = yield httpx.Request("POST", self.token_endpoint, data=data)
        response.raise_for_status()

        payload = response.json()
        self._access_token = payload["access_token"]
        expires_in = int(payload.get("expires_in", 3600))
        self._expires_at = time.monotonic() + max(expires_in - self.EXPIRY_MARGIN, 0)


def create_{stem}_client(base_url: str = DEFAULT_BASE_URL) -> {client}:
    """Client without authentication."""
    return create_{stem}_client_from_options(ConnectorOptions(base_url=base_url))


def create_{stem}_client_with_token(base_url: str, api_token: str) -> {client}:
    """Client sending `Authorization: Bearer <api_token>`."""
    return create_{stem}_client_from_options(
        ConnectorOptions(base_url=base_url),
        auth=BearerTokenAuth(api_token),
    )


def create_{stem}_client_with_oauth(
    base_url: str,
    client_id: str,
    client_secret: str,
    token_endpoint: str,
    scope: Optional[str] = None,
) -> {client}:
    """Client authenticating with the OAuth2 client-credentials grant."""
    return create_{stem}_client_from_options(
        ConnectorOptions(base_url=base_url),
        auth=ClientCredentialsAuth(token_endpoint, client_id, client_secret, scope),
    )


def create_{stem}_client_from_options(
    options: ConnectorOptions,
    auth: Optional[httpx.Auth] = None,
) -> {client}:
    """Client built from explicit options; the client owns and closes its transport."""
    headers = {{"Accept": "application/json", "User-Agent": options.user_agent}}
    headers.update(options.headers)

    http = httpx.AsyncClient(
        base_url=options.base_url,
        timeout=options.timeout,
        headers=headers,
        auth=auth,
        verify=options.verify_ssl,
    )
    return {client}(Http{contract}(http), http)
'''


def render_registration(api_name: str, module_stem: str, base_url: str) -> str:
    """Render <api>_registration.py"""
    return REGISTRATION_TEMPLATE.format(
        module_doc=docstring(f"Factories for {client_class_name(api_name)}. Generated, do not edit.", indent=""),
        stem=module_stem,
        contract=contract_class_name(api_name),
        client=client_class_name(api_name),
        base_url=string_literal(base_url),
        user_agent=string_literal(f"{module_stem.replace('_', '-')}-client/1.0"),
    )


def render_package(api_name: str, module_stem: str, file_types: Set[GeneratedFileType]) -> str:
    """Render the root __init__.py, re-exporting whatever artifacts were generated."""
    contract = contract_class_name(api_name)
    client = client_class_name(api_name)
    lines = [docstring(f"Generated connector for the {api_name} API.", indent=""), ""]
    exported: List[str] = []

    if GeneratedFileType.CONTRACT in file_types:
        lines.append(f"from .{module_stem}_api import Http{contract}, {contract}")
        exported.extend([contract, f"Http{contract}"])

    if GeneratedFileType.CLIENT in file_types:
        lines.append(f"from .{module_stem}_client import {client}")
        exported.append(client)

    if GeneratedFileType.REGISTRATION in file_types:
        factories = [
            f"create_{module_stem}_client",
            f"create_{module_stem}_client_from_options",
            f"create_{module_stem}_client_with_oauth",
            f"create_{module_stem}_client_with_token",
        ]
        lines.append(f"from .{module_stem}_registration import (")
        lines.extend(f"    {name}," for name in ["ConnectorOptions"] + factories)
        lines.append(")")
        exported.append("ConnectorOptions")
        exported.extend(factories)

    if GeneratedFileType.MODEL in file_types:
        lines.append("from .models import *  # noqa: F401,F403")

    if exported:
        lines.extend(["", "__all__ = ["])
        lines.extend(f"    {string_literal(name)}," for name in exported)
        lines.append("]")

    return "\n".join(lines) + "\n"
