"""Models describing an API under discovery and the artifacts generated for it."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class AuthenticationType(str, Enum):
    """Authentication applied to discovery requests"""
    NONE = "none"
    API_KEY = "api_key"
    BEARER_TOKEN = "bearer_token"
    BASIC_AUTH = "basic_auth"
    OAUTH2 = "oauth2"


class HttpMethod(str, Enum):
    """HTTP methods a generated client can call"""
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class PropertyKind(str, Enum):
    """Kind inferred for a sampled JSON value"""
    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATETIME = "date-time"
    UUID = "uuid"
    URI = "uri"
    NULL = "null"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


class GeneratedFileType(str, Enum):
    """Kind of generated artifact"""
    MODEL = "model"
    CONTRACT = "contract"
    CLIENT = "client"
    REGISTRATION = "registration"
    PACKAGE = "package"


@dataclass
class ApiEndpoint:
    """A single operation of the API (method + path template)."""

    method: str  # GET / POST / PUT / PATCH / DELETE
    path: str  # /users/{id}
    description: Optional[str] = None
    status_code: Optional[int] = None

    @property
    def key(self) -> Tuple[str, str]:
        """Identity of the endpoint inside a configuration."""
        return (self.method.upper(), self.path)

    def has_path_parameters(self) -> bool:
        """Check if the path carries a {param} or :param placeholder"""
        return "{" in self.path or ":" in self.path

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "method": self.method,
            "path": self.path,
            "description": self.description,
            "status_code": self.status_code,
        }


@dataclass
class SchemaProperty:
    """A single property of an inferred model"""

    name: str  # python attribute name (snake_case)
    original_name: str  # name on the wire
    kind: PropertyKind
    python_type: str  # type expression used in generated code
    is_nullable: bool = False
    is_collection: bool = False
    format: Optional[str] = None  # "int32", "int64", "decimal", "date-time", "uuid", "uri"
    item_kind: Optional[PropertyKind] = None  # element kind for arrays
    nested_model: Optional["SchemaModel"] = None
    description: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "name": self.name,
            "original_name": self.original_name,
            "kind": self.kind.value,
            "python_type": self.python_type,
            "is_nullable": self.is_nullable,
            "is_collection": self.is_collection,
            "format": self.format,
            "item_kind": self.item_kind.value if self.item_kind else None,
            "nested_model": self.nested_model.to_dict() if self.nested_model else None,
        }


@dataclass
class SchemaModel:
    """Structural description of a JSON payload"""

    name: str
    original_name: str
    properties: Dict[str, SchemaProperty] = field(default_factory=dict)
    is_collection: bool = False
    description: Optional[str] = None
    element_name: Optional[str] = None  # record type of a collection model

    @property
    def type_name(self) -> str:
        """Name of the record type emitted for this model."""
        return self.element_name or self.name

    def nested_models(self) -> List["SchemaModel"]:
        """Direct nested models, in property order."""
        return [p.nested_model for p in self.properties.values() if p.nested_model is not None]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation"""
        return {
            "name": self.name,
            "original_name": self.original_name,
            "is_collection": self.is_collection,
            "element_name": self.element_name,
            "description": self.description,
            "properties": {k: v.to_dict() for k, v in self.properties.items()},
        }


@dataclass
class ApiConfiguration:
    """Everything known about one generation run."""

    base_url: str = ""
    api_name: str = ""
    package_name: str = ""
    output_path: str = ""

    # Authentication
    auth_type: AuthenticationType = AuthenticationType.NONE
    api_key: Optional[str] = None
    api_key_header: str = "X-API-Key"
    bearer_token: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    token_endpoint: Optional[str] = None
    scope: Optional[str] = None

    # Discovery
    endpoints: List[ApiEndpoint] = field(default_factory=list)
    schemas: Dict[str, SchemaModel] = field(default_factory=dict)

    # Generation options
    generate_models: bool = True
    generate_contract: bool = True
    generate_client: bool = True
    generate_registration: bool = True
    use_frozen_models: bool = True
    use_optional_types: bool = True


@dataclass
class ProbeResult:
    """Outcome of a single probe request"""

    is_success: bool
    status_code: int = 0
    content: Optional[str] = None
    error_message: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class GeneratedFile:
    """One generated artifact, written verbatim by the file writer."""

    file_name: str
    content: str
    relative_path: str = ""
    file_type: GeneratedFileType = GeneratedFileType.MODEL


@dataclass
class GenerationResult:
    """Outcome of a generation pass"""

    is_success: bool
    error_message: Optional[str] = None
    generated_files: List[GeneratedFile] = field(default_factory=list)


@dataclass
class PipelineReport:
    """Counts reported at the end of a run"""

    endpoints_found: int = 0
    schemas_inferred: int = 0
    files_written: int = 0
    output_path: str = ""
    connectivity: Optional[ProbeResult] = None
