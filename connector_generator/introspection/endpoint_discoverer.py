"""
Endpoint Discoverer - Finds the operations exposed by an unknown REST API

Strategies (run in order, results merged):
- Discovery document: first OpenAPI/Swagger document found at a known location
- Common paths: GET probes of a catalogue of conventional resource paths
- RESTful expansion: create/read/update/delete siblings of list endpoints

Deduplication is by (method, path), first seen wins. A failed probe only
means "not found"; discovery itself never raises.
"""

import json
import logging
from typing import Any, Iterable, List

import requests

from connector_generator.builder.naming import singularize
from connector_generator.schema.models import ApiConfiguration, ApiEndpoint, HttpMethod

logger = logging.getLogger(__name__)

SUPPORTED_METHODS = {m.value for m in HttpMethod}


class EndpointDiscoverer:
    """
    Discovers endpoints of the API behind a base URL

    Usage:
    ```python
    discoverer = EndpointDiscoverer(session)
    config.endpoints = discoverer.discover(config)
    print(f"Found {len(config.endpoints)} endpoints")
    ```
    """

    # Common swagger/openapi document locations
    DOCUMENT_LOCATIONS = [
        "/swagger.json",
        "/swagger/v1/swagger.json",
        "/api/swagger.json",
        "/openapi.json",
        "/api-docs",
        "/docs.json",
        "/v1/swagger.json",
        "/docs/openapi.json",
        "/v3/api-docs",
    ]

    # Conventional resource paths probed with GET
    COMMON_PATHS = [
        "/api", "/v1", "/v2", "/v3",
        "/users", "/user", "/customers", "/customer",
        "/products", "/product", "/items", "/item",
        "/orders", "/order", "/transactions", "/transaction",
        "/posts", "/post", "/articles", "/article",
        "/auth", "/login", "/token",
        "/health", "/status", "/ping", "/version",
    ]

    def __init__(self, session: requests.Session, timeout: int = 30):
        """
        Initialize EndpointDiscoverer

        Args:
            session: Session built by create_session
            timeout: Per-request timeout in seconds
        """
        self.session = session
        self.timeout = timeout

    def discover(self, config: ApiConfiguration) -> List[ApiEndpoint]:
        """
        Run every strategy and merge the results

        Endpoints already present in the configuration come first.

        Returns:
            Endpoints without duplicate (method, path) pairs
        """
        base_url = config.base_url.rstrip("/")
        endpoints: List[ApiEndpoint] = list(config.endpoints)

        document_endpoints = self.discover_from_document(base_url)
        endpoints.extend(document_endpoints)

        common_endpoints = self.discover_common_paths(base_url)
        endpoints.extend(common_endpoints)

        endpoints.extend(expand_restful_endpoints(endpoints))

        result = deduplicate_endpoints(endpoints)
        logger.info(
            f"Discovered {len(result)} endpoints "
            f"(document: {len(document_endpoints)}, probed: {len(common_endpoints)})"
        )
        return result

    def discover_from_document(self, base_url: str) -> List[ApiEndpoint]:
        """Parse the first discovery document found; later locations are not tried."""
        for location in self.DOCUMENT_LOCATIONS:
            url = f"{base_url}{location}"
            try:
                logger.debug(f"Trying discovery document: {url}")
                response = self.session.get(url, timeout=self.timeout)
            except (requests.exceptions.RequestException, ValueError) as e:
                logger.debug(f"Failed to fetch {location}: {e}")
                continue

            if response.ok:
                logger.info(f"Found discovery document at {location}")
                return parse_discovery_document(response.text)

        return []

    def discover_common_paths(self, base_url: str) -> List[ApiEndpoint]:
        """Probe the path catalogue; 2xx and 401 both mean the path exists."""
        endpoints = []

        for path in self.COMMON_PATHS:
            try:
                response = self.session.get(f"{base_url}{path}", timeout=self.timeout)
            except (requests.exceptions.RequestException, ValueError) as e:
                logger.debug(f"Probe of {path} failed: {e}")
                continue

            if response.ok or response.status_code == 401:
                logger.debug(f"Found {path} ({response.status_code})")
                endpoints.append(ApiEndpoint(
                    method="GET",
                    path=path,
                    description=f"GET {path}",
                    status_code=response.status_code,
                ))

        return endpoints


def parse_discovery_document(content: str) -> List[ApiEndpoint]:
    """
    Parse an OpenAPI/Swagger-shaped JSON document

    Only the `paths` object is read: path -> lower-case verb -> operation.
    A malformed document yields no endpoints.
    """
    try:
        document = json.loads(content)
    except ValueError as e:
        logger.warning(f"Invalid discovery document: {e}")
        return []

    if not isinstance(document, dict):
        return []

    paths = document.get("paths")
    if not isinstance(paths, dict):
        return []

    endpoints = []
    for path, path_item in paths.items():
        if not isinstance(path_item, dict):
            continue

        for method, operation in path_item.items():
            if method.upper() not in SUPPORTED_METHODS:
                continue

            endpoints.append(ApiEndpoint(
                method=method.upper(),
                path=path,
                description=_operation_description(operation),
            ))

    return endpoints


def expand_restful_endpoints(endpoints: Iterable[ApiEndpoint]) -> List[ApiEndpoint]:
    """
    Add conventional CRUD siblings for every GET list endpoint

    /users -> POST /users, GET/PUT/PATCH/DELETE /users/{id}
    Only keys not already present are returned.
    """
    existing = list(endpoints)
    seen = {e.key for e in existing}
    base_paths = [e.path for e in existing if e.method.upper() == "GET" and not e.has_path_parameters()]

    added = []
    for base_path in base_paths:
        resource = singularize(base_path.strip("/")) or "item"
        item_path = f"{base_path.rstrip('/')}/{{id}}"
        candidates = [
            ("POST", base_path, f"Create new {resource}"),
            ("GET", item_path, f"Get {resource} by ID"),
            ("PUT", item_path, f"Update {resource}"),
            ("PATCH", item_path, f"Partially update {resource}"),
            ("DELETE", item_path, f"Delete {resource}"),
        ]

        for method, path, description in candidates:
            if (method, path) in seen:
                continue
            seen.add((method, path))
            added.append(ApiEndpoint(method=method, path=path, description=description))

    return added


def deduplicate_endpoints(endpoints: Iterable[ApiEndpoint]) -> List[ApiEndpoint]:
    """Drop repeated (method, path) pairs, keeping the first occurrence."""
    seen = set()
    result = []
    for endpoint in endpoints:
        if endpoint.key in seen:
            continue
        seen.add(endpoint.key)
        result.append(endpoint)
    return result


def _operation_description(operation: Any) -> str:
    if not isinstance(operation, dict):
        return ""

    for key in ("summary", "description", "operationId"):
        value = operation.get(key)
        if isinstance(value, str) and value:
            return value

    return ""
