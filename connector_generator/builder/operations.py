"""
Operation planning - derives method names, parameters and return types

One Operation is planned per endpoint; the contract, implementation and
client templates all render from the same plan so their signatures agree.
"""

import re
from dataclasses import dataclass, field
from typing import List, Mapping, Optional, Set

from connector_generator.builder.naming import (
    pluralize,
    resource_segment,
    safe_identifier,
    safe_type_name,
    singularize,
    to_snake_case,
)
from connector_generator.introspection.schema_inferencer import find_schema
from connector_generator.schema.models import ApiEndpoint, SchemaModel

PLACEHOLDER_PATTERN = re.compile(r"\{([^}/]+)\}|:([A-Za-z_][A-Za-z0-9_]*)")

BODY_METHODS = {"POST", "PUT", "PATCH"}

OPERATION_PREFIXES = {
    "POST": "create",
    "PUT": "update",
    "PATCH": "update_partial",
    "DELETE": "delete",
}


@dataclass
class Parameter:
    """A parameter of a generated operation"""
    name: str  # python name
    annotation: str
    original_name: Optional[str] = None  # placeholder name in the path


@dataclass
class Operation:
    """Everything the templates need to render one endpoint"""
    name: str
    method: str
    path: str
    path_template: str  # path with placeholders renamed to parameter names
    return_type: str
    description: str = ""
    parameters: List[Parameter] = field(default_factory=list)
    model: Optional[SchemaModel] = None

    @property
    def body(self) -> Optional[Parameter]:
        return next((p for p in self.parameters if p.original_name is None), None)

    @property
    def path_parameters(self) -> List[Parameter]:
        return [p for p in self.parameters if p.original_name is not None]

    @property
    def returns_list(self) -> bool:
        return self.return_type.startswith("List[")

    def signature(self) -> str:
        """Parameter list including self, e.g. `self, user_id: int`"""
        parts = ["self"] + [f"{p.name}: {p.annotation}" for p in self.parameters]
        return ", ".join(parts)

    def call_arguments(self) -> str:
        return ", ".join(p.name for p in self.parameters)


def plan_operations(
    endpoints: List[ApiEndpoint],
    schemas: Mapping[str, SchemaModel],
) -> List[Operation]:
    """Plan every endpoint in order; repeated names get _2, _3 suffixes."""
    used: Set[str] = set()
    operations = []

    for endpoint in endpoints:
        operation = plan_operation(endpoint, schemas)

        if operation.name in used:
            suffix = 2
            while f"{operation.name}_{suffix}" in used:
                suffix += 1
            operation.name = f"{operation.name}_{suffix}"

        used.add(operation.name)
        operations.append(operation)

    return operations


def plan_operation(endpoint: ApiEndpoint, schemas: Mapping[str, SchemaModel]) -> Operation:
    method = endpoint.method.upper()
    resource = resource_name(endpoint.path)
    has_placeholder = bool(path_placeholders(endpoint.path))
    model = find_schema(resource, schemas)

    parameters = [
        Parameter(name=_parameter_name(p), annotation=parameter_type(p), original_name=p)
        for p in path_placeholders(endpoint.path)
    ]
    if method in BODY_METHODS:
        parameters.append(Parameter(name="body", annotation=model.type_name if model else "Any"))

    return Operation(
        name=operation_name(method, resource, has_placeholder),
        method=method,
        path=endpoint.path,
        path_template=_path_template(endpoint.path),
        return_type=return_type(method, has_placeholder, model),
        description=endpoint.description or f"{method} {endpoint.path}",
        parameters=parameters,
        model=model,
    )


def resource_name(path: str) -> str:
    """Resource segment of a path, PascalCased (/api/v1 -> Api)."""
    return safe_type_name(resource_segment(path), fallback="Resource")


def operation_name(method: str, resource: str, has_placeholder: bool) -> str:
    """
    Examples:
        GET /users       -> get_all_users
        GET /users/{id}  -> get_user
        PATCH /users/{id} -> update_partial_user
    """
    method = method.upper()
    if method == "GET":
        if has_placeholder:
            return f"get_{to_snake_case(singularize(resource))}"
        return f"get_all_{to_snake_case(pluralize(resource))}"

    prefix = OPERATION_PREFIXES.get(method, method.lower())
    return f"{prefix}_{to_snake_case(singularize(resource))}"


def parameter_type(name: str) -> str:
    """Type of a path placeholder, guessed from its name."""
    lowered = name.lower()
    if lowered.endswith(("guid", "uuid")):
        return "UUID"
    if lowered.endswith("id"):
        return "int"
    return "str"


def return_type(method: str, has_placeholder: bool, model: Optional[SchemaModel]) -> str:
    method = method.upper()
    if method == "DELETE":
        return "bool"

    if model is None:
        if method == "GET" and not has_placeholder:
            return "List[Any]"
        return "Any"

    if method == "GET" and not has_placeholder:
        return f"List[{model.type_name}]"
    return model.type_name


def path_placeholders(path: str) -> List[str]:
    """Placeholder names in path order ({id} and :id forms)."""
    return [m.group(1) or m.group(2) for m in PLACEHOLDER_PATTERN.finditer(path)]


def _parameter_name(placeholder: str) -> str:
    return safe_identifier(to_snake_case(placeholder), fallback="param")


def _path_template(path: str) -> str:
    def rename(match):
        return "{" + _parameter_name(match.group(1) or match.group(2)) + "}"

    return PLACEHOLDER_PATTERN.sub(rename, path)
