"""
API Introspection Module

Finds out what an unknown REST API looks like.
Supports:
- Connectivity and credential checks
- OpenAPI/Swagger document discovery
- Common-path probing and RESTful expansion
- JSON schema inference from sampled responses
"""

from .connectivity_prober import ConnectivityProber
from .endpoint_discoverer import EndpointDiscoverer
from .http_session import create_session
from .schema_inferencer import SchemaInferencer, analyze_json_response, find_schema

__all__ = [
    "ConnectivityProber",
    "EndpointDiscoverer",
    "SchemaInferencer",
    "analyze_json_response",
    "create_session",
    "find_schema",
]
