"""
Schema Inferencer - Builds structural models from sampled JSON responses

Supports:
- Object and array (collection) responses
- Nested object/array-of-object models, extracted recursively
- String refinement (date-time, UUID, URI) and integer widening
- First-seen-wins deduplication of model names across endpoints
"""

import json
import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

import requests

from connector_generator.builder.naming import (
    path_segments,
    pluralize,
    resource_segment,
    safe_identifier,
    safe_type_name,
    singularize,
    to_snake_case,
)
from connector_generator.builder.source import IMPORTABLE_NAMES
from connector_generator.introspection.json_types import (
    JsonKind,
    ScalarType,
    classify_number,
    classify_string,
    json_kind,
)
from connector_generator.schema.models import (
    ApiConfiguration,
    ApiEndpoint,
    PropertyKind,
    SchemaModel,
    SchemaProperty,
)

logger = logging.getLogger(__name__)

# Attribute names a pydantic BaseModel already defines
RESERVED_FIELD_NAMES = {
    "construct",
    "copy",
    "dict",
    "fields",
    "from_orm",
    "json",
    "model_config",
    "model_fields",
    "parse_obj",
    "parse_file",
    "parse_raw",
    "schema",
    "schema_json",
    "update_forward_refs",
    "validate",
}

# Lower-case names a generated model module imports (date, datetime); a field
# with the same name would shadow the type in later annotations
RESERVED_FIELD_NAMES.update(
    name for names in IMPORTABLE_NAMES.values() for name in names if name.islower()
)


class SchemaInferencer:
    """Samples GET endpoints and infers a model per JSON response"""

    def __init__(self, session: requests.Session, timeout: int = 30, max_samples: int = 10):
        """
        Initialize SchemaInferencer

        Args:
            session: Session built by create_session
            timeout: Per-request timeout in seconds
            max_samples: Maximum number of endpoints fetched
        """
        self.session = session
        self.timeout = timeout
        self.max_samples = max_samples

    def infer(self, config: ApiConfiguration) -> List[SchemaModel]:
        """
        Infer one model per sampled endpoint

        Failed or non-JSON responses are skipped; a model name already
        produced by an earlier endpoint is kept.
        """
        schemas: Dict[str, SchemaModel] = {}
        base_url = config.base_url.rstrip("/")

        for endpoint in self.sample_endpoints(config.endpoints):
            content = self._fetch(f"{base_url}{endpoint.path}")
            if content is None:
                continue

            model = analyze_json_response(content, endpoint.path)
            if model is None:
                logger.debug(f"No schema from {endpoint.path}")
                continue

            if model.name in schemas:
                logger.debug(f"Model {model.name} already inferred, ignoring {endpoint.path}")
                continue

            schemas[model.name] = model

        logger.info(f"Inferred {len(schemas)} schemas")
        return list(schemas.values())

    def sample_endpoints(self, endpoints: Iterable[ApiEndpoint]) -> List[ApiEndpoint]:
        """GET endpoints without path parameters, in order, up to max_samples."""
        candidates = [
            e for e in endpoints
            if e.method.upper() == "GET" and not e.has_path_parameters()
        ]
        return candidates[: self.max_samples]

    def _fetch(self, url: str) -> Optional[str]:
        try:
            response = self.session.get(url, timeout=self.timeout)
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.debug(f"Sampling {url} failed: {e}")
            return None

        if not response.ok:
            logger.debug(f"Sampling {url} returned {response.status_code}")
            return None

        return response.text


def is_json(content: Optional[str]) -> bool:
    """Cheap syntactic check: trimmed text wrapped in {} or []."""
    if not content or not content.strip():
        return False

    text = content.strip()
    return (text.startswith("{") and text.endswith("}")) or (
        text.startswith("[") and text.endswith("]")
    )


def analyze_json_response(content: str, path: str) -> Optional[SchemaModel]:
    """
    Infer the model for one response body

    Arrays become a collection model (plural name, singular element type);
    an empty array or an array of scalars yields no model.
    """
    if not is_json(content):
        return None

    try:
        data = json.loads(content)
    except ValueError as e:
        logger.debug(f"Invalid JSON from {path}: {e}")
        return None

    model_name = model_name_from_path(path)
    kind = json_kind(data)

    if kind == JsonKind.ARRAY:
        if not data or json_kind(data[0]) != JsonKind.OBJECT:
            return None

        element = infer_model(data[0], singularize(model_name))
        return SchemaModel(
            name=pluralize(model_name),
            original_name=model_name,
            properties=element.properties,
            is_collection=True,
            description=f"Collection of {element.name} items",
            element_name=element.name,
        )

    if kind == JsonKind.OBJECT:
        return infer_model(data, model_name)

    return None


def model_name_from_path(path: str) -> str:
    """
    Name a model after the last path segment that is not a placeholder

    A trailing version segment (/api/v2) defers to the segment before it.
    """
    if not path_segments(path):
        return "ApiResponse"
    return safe_type_name(resource_segment(path), fallback="Item")


def infer_model(data: Dict[str, Any], model_name: str) -> SchemaModel:
    """Infer a model from a JSON object, recursing into nested objects."""
    name = safe_type_name(model_name)
    model = SchemaModel(name=name, original_name=model_name)

    for key, value in data.items():
        prop = infer_property(key, value)
        prop.name = _unique_name(prop.name, model.properties)
        model.properties[prop.name] = prop

    return model


def infer_property(key: str, value: Any) -> SchemaProperty:
    """Classify one JSON property."""
    name = property_name(key)
    kind = json_kind(value)

    if kind == JsonKind.STRING or kind == JsonKind.NUMBER or kind == JsonKind.BOOLEAN:
        scalar = _scalar_type(kind, value)
        return SchemaProperty(
            name=name,
            original_name=key,
            kind=scalar.kind,
            python_type=scalar.python_type,
            format=scalar.format,
        )

    if kind == JsonKind.NULL:
        # One sample only: nothing to widen from
        return SchemaProperty(
            name=name,
            original_name=key,
            kind=PropertyKind.NULL,
            python_type="Any",
            is_nullable=True,
        )

    if kind == JsonKind.ARRAY:
        return _infer_array_property(name, key, value)

    if kind == JsonKind.OBJECT:
        nested = infer_model(value, safe_type_name(key, fallback="Item"))
        return SchemaProperty(
            name=name,
            original_name=key,
            kind=PropertyKind.OBJECT,
            python_type=nested.name,
            nested_model=nested,
        )

    raise ValueError(f"Unhandled JSON kind: {kind}")


def property_name(key: str) -> str:
    """Python attribute name for a wire property name."""
    name = to_snake_case(key)
    if not name:
        return "field"
    if name[0].isdigit():
        name = f"field_{name}"
    if name in RESERVED_FIELD_NAMES:
        name = f"{name}_"
    return safe_identifier(name)


def find_schema(resource: str, schemas: Mapping[str, SchemaModel]) -> Optional[SchemaModel]:
    """
    Find the schema serving a resource segment

    Matches the schema name case-insensitively against the resource, its
    singular and its plural form; the first schema in order wins.
    """
    if not resource:
        return None

    candidates = {resource.lower(), singularize(resource).lower(), pluralize(resource).lower()}
    for schema in schemas.values():
        if schema.name.lower() in candidates:
            return schema
    return None


def _infer_array_property(name: str, key: str, items: List[Any]) -> SchemaProperty:
    if not items:
        return SchemaProperty(
            name=name,
            original_name=key,
            kind=PropertyKind.ARRAY,
            python_type="List[Any]",
            is_collection=True,
            item_kind=PropertyKind.UNKNOWN,
        )

    first = items[0]
    if json_kind(first) == JsonKind.OBJECT:
        nested = infer_model(first, singularize(safe_type_name(key, fallback="Item")))
        return SchemaProperty(
            name=name,
            original_name=key,
            kind=PropertyKind.ARRAY,
            python_type=f"List[{nested.name}]",
            is_collection=True,
            item_kind=PropertyKind.OBJECT,
            nested_model=nested,
        )

    item_kind, item_type = _element_type(first)
    return SchemaProperty(
        name=name,
        original_name=key,
        kind=PropertyKind.ARRAY,
        python_type=f"List[{item_type}]",
        is_collection=True,
        item_kind=item_kind,
    )


def _element_type(value: Any):
    kind = json_kind(value)

    if kind == JsonKind.STRING or kind == JsonKind.NUMBER or kind == JsonKind.BOOLEAN:
        scalar = _scalar_type(kind, value)
        return scalar.kind, scalar.python_type
    if kind == JsonKind.NULL:
        return PropertyKind.NULL, "Any"
    if kind == JsonKind.ARRAY:
        if not value:
            return PropertyKind.ARRAY, "List[Any]"
        _, inner = _element_type(value[0])
        return PropertyKind.ARRAY, f"List[{inner}]"
    # objects nested inside nested arrays stay untyped
    return PropertyKind.OBJECT, "Dict[str, Any]"


def _scalar_type(kind: JsonKind, value: Any) -> ScalarType:
    if kind == JsonKind.STRING:
        return classify_string(value)
    if kind == JsonKind.NUMBER:
        return classify_number(value)
    return ScalarType(PropertyKind.BOOLEAN, None, "bool")


def _unique_name(name: str, existing: Mapping[str, SchemaProperty]) -> str:
    if name not in existing:
        return name

    suffix = 2
    while f"{name}_{suffix}" in existing:
        suffix += 1
    return f"{name}_{suffix}"
