"""
Unit tests for code generation

Tests:
- Artifact set per generation flag
- Model rendering (fields, aliases, optional, frozen, nested models)
- Contract, client and registration structure
- Failure handling
"""

import ast
import importlib
from datetime import date
from typing import List

import pytest
from unittest.mock import patch

from connector_generator.builder.code_generator import CodeGenerator
from connector_generator.exporter.file_writer import FileWriter
from connector_generator.introspection.schema_inferencer import analyze_json_response
from connector_generator.schema.models import ApiConfiguration, ApiEndpoint, GeneratedFileType


def files_by_path(result):
    return {
        f"{f.relative_path}/{f.file_name}" if f.relative_path else f.file_name: f
        for f in result.generated_files
    }


def class_fields(source, class_name):
    """Annotated assignments of a class in generated source"""
    tree = ast.parse(source)
    cls = next(n for n in tree.body if isinstance(n, ast.ClassDef) and n.name == class_name)
    return {n.target.id: n for n in cls.body if isinstance(n, ast.AnnAssign)}


def method_names(source, class_name):
    tree = ast.parse(source)
    cls = next(n for n in tree.body if isinstance(n, ast.ClassDef) and n.name == class_name)
    return [n.name for n in cls.body if isinstance(n, (ast.FunctionDef, ast.AsyncFunctionDef))]


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def users_schema():
    return analyze_json_response(
        '[{"id": 1, "userName": "ann", "email": null, "tags": ["a"], '
        '"address": {"city": "Lisbon", "geo": {"lat": "1.0"}}}]',
        "/users",
    )


@pytest.fixture
def config(users_schema):
    return ApiConfiguration(
        base_url="https://api.example.com",
        api_name="Example",
        endpoints=[
            ApiEndpoint("GET", "/users", "List users"),
            ApiEndpoint("POST", "/users", "Create new user"),
            ApiEndpoint("GET", "/users/{id}", "Get user by ID"),
            ApiEndpoint("PUT", "/users/{id}"),
            ApiEndpoint("PATCH", "/users/{id}"),
            ApiEndpoint("DELETE", "/users/{id}"),
            ApiEndpoint("GET", "/health"),
        ],
        schemas={users_schema.name: users_schema},
    )


# ============================================================================
# TEST: Artifact set
# ============================================================================


class TestArtifacts:
    """Tests for which files are generated"""

    def test_full_generation(self, config):
        """Test every artifact is generated and is valid Python"""
        result = CodeGenerator().generate(config)

        assert result.is_success is True
        files = files_by_path(result)
        assert set(files) == {
            "models/user.py",
            "models/address.py",
            "models/geo.py",
            "models/__init__.py",
            "example_api.py",
            "example_client.py",
            "example_registration.py",
            "__init__.py",
        }
        for generated in result.generated_files:
            ast.parse(generated.content)

    def test_file_types(self, config):
        result = CodeGenerator().generate(config)
        files = files_by_path(result)

        assert files["models/user.py"].file_type == GeneratedFileType.MODEL
        assert files["example_api.py"].file_type == GeneratedFileType.CONTRACT
        assert files["example_client.py"].file_type == GeneratedFileType.CLIENT
        assert files["example_registration.py"].file_type == GeneratedFileType.REGISTRATION
        assert files["__init__.py"].file_type == GeneratedFileType.PACKAGE

    def test_models_disabled_contract_enabled(self, config):
        """Test no model files and one untyped contract when models are off"""
        config.generate_models = False
        config.generate_client = False

        result = CodeGenerator().generate(config)

        types = [f.file_type for f in result.generated_files]
        assert GeneratedFileType.MODEL not in types
        assert types.count(GeneratedFileType.CONTRACT) == 1

        contract = files_by_path(result)["example_api.py"].content
        ast.parse(contract)
        assert "from .models" not in contract
        assert "async def get_all_users(self) -> List[Any]:" in contract
        assert "async def get_user(self, id: int) -> Any:" in contract

    def test_nothing_to_generate(self):
        """Test an empty configuration produces no files"""
        result = CodeGenerator().generate(ApiConfiguration(base_url="https://x.io", api_name="X"))

        assert result.is_success is True
        assert result.generated_files == []

    def test_client_requires_contract(self, config):
        config.generate_contract = False

        names = set(files_by_path(CodeGenerator().generate(config)))

        assert "example_client.py" not in names
        assert "example_registration.py" not in names
        assert "models/user.py" in names

    def test_generation_is_deterministic(self, config):
        first = CodeGenerator().generate(config)
        second = CodeGenerator().generate(config)

        assert first.generated_files == second.generated_files

    @patch("connector_generator.builder.code_generator.render_contract")
    def test_failure_returns_failed_result(self, mock_render, config):
        """Test unexpected errors yield a failed result with no files"""
        mock_render.side_effect = RuntimeError("template exploded")

        result = CodeGenerator().generate(config)

        assert result.is_success is False
        assert result.error_message == "template exploded"
        assert result.generated_files == []


# ============================================================================
# TEST: Models
# ============================================================================


class TestModels:
    """Tests for generated pydantic models"""

    def test_scalar_and_nested_fields(self):
        """Test N scalar properties plus one nested object give N+1 fields"""
        schema = analyze_json_response(
            '{"id": 1, "name": "Ann", "active": true, "customer": {"code": "C1"}}',
            "/orders/latest",
        )
        config = ApiConfiguration(base_url="https://x.io", api_name="X", schemas={schema.name: schema})

        files = files_by_path(CodeGenerator().generate(config))

        fields = class_fields(files["models/latest.py"].content, "Latest")
        assert len(fields) == 4
        assert isinstance(fields["customer"].annotation, ast.Constant)
        assert fields["customer"].annotation.value == "Customer"
        assert "Customer" in [
            n.name for n in ast.parse(files["models/customer.py"].content).body
            if isinstance(n, ast.ClassDef)
        ]
        assert "from .customer import Customer" in files["models/latest.py"].content

    def test_collection_alias(self, config):
        content = files_by_path(CodeGenerator().generate(config))["models/user.py"].content

        assert "class User(BaseModel):" in content
        assert "Users = List[User]" in content

    def test_aliases_and_optional_fields(self, config):
        content = files_by_path(CodeGenerator().generate(config))["models/user.py"].content

        assert 'user_name: str = Field(alias="userName")' in content
        assert "email: Optional[Any] = None" in content
        assert "tags: List[str]" in content
        assert 'address: "Address"' in content

    def test_frozen_switch(self, config):
        frozen = files_by_path(CodeGenerator().generate(config))["models/user.py"].content
        assert "frozen=True" in frozen

        config.use_frozen_models = False
        mutable = files_by_path(CodeGenerator().generate(config))["models/user.py"].content
        assert "frozen=True" not in mutable
        assert "populate_by_name=True" in mutable

    def test_optional_switch(self, config):
        config.use_optional_types = False

        content = files_by_path(CodeGenerator().generate(config))["models/user.py"].content

        assert "email: Any" in content
        assert "Optional" not in content

    def test_models_package_exports(self, config):
        content = files_by_path(CodeGenerator().generate(config))["models/__init__.py"].content

        assert "from .user import User, Users" in content
        assert "from .address import Address" in content
        assert '"Geo",' in content
        assert "User.model_rebuild()" in content

    def test_nested_names_are_emitted_once(self):
        """Test the first nested model with a given name wins"""
        schema = analyze_json_response(
            '{"billing": {"address": {"street": "a"}}, "shipping": {"address": {"city": "b"}}}',
            "/checkout",
        )
        config = ApiConfiguration(base_url="https://x.io", api_name="X", schemas={schema.name: schema})

        result = CodeGenerator().generate(config)
        models = [f for f in result.generated_files if f.file_type == GeneratedFileType.MODEL]

        assert [f.file_name for f in models].count("address.py") == 1
        address = next(f for f in models if f.file_name == "address.py")
        assert "street: str" in address.content

    def test_top_level_schema_wins_over_nested_model(self):
        """Test a nested model never replaces a top-level schema of the same name"""
        posts = analyze_json_response('[{"id": 1, "user": {"id": 2}}]', "/posts")
        users = analyze_json_response('[{"id": 1, "name": "Ann", "email": "ann@example.com"}]', "/users")
        config = ApiConfiguration(
            base_url="https://x.io",
            api_name="X",
            schemas={posts.name: posts, users.name: users},
        )

        files = files_by_path(CodeGenerator().generate(config))

        user = files["models/user.py"].content
        assert set(class_fields(user, "User")) == {"id", "name", "email"}
        assert "Users = List[User]" in user
        assert "from .user import User, Users" in files["models/__init__.py"].content
        assert "from .user import User  # noqa: E402" in files["models/post.py"].content

    def test_field_named_like_imported_type(self):
        """Test date/datetime field names do not shadow the imported types"""
        schema = analyze_json_response('{"Date": "2024-01-15", "updated": "2024-01-16"}', "/events")
        config = ApiConfiguration(base_url="https://x.io", api_name="X", schemas={schema.name: schema})

        content = files_by_path(CodeGenerator().generate(config))["models/events.py"].content

        assert set(class_fields(content, "Events")) == {"date_", "updated"}
        assert 'date_: date = Field(alias="Date")' in content
        assert "updated: date" in content


# ============================================================================
# TEST: Importing generated models
# ============================================================================


class TestGeneratedModelsImport:
    """Tests that load the written models package with pydantic"""

    def test_cyclic_references_import(self, tmp_path, monkeypatch):
        """Test models referring back to each other import and validate"""
        pytest.importorskip("pydantic")
        schema = analyze_json_response(
            '[{"id": 1, "post": {"id": 2, "comments": [{"id": 3}]}}]',
            "/comments",
        )
        config = ApiConfiguration(base_url="https://x.io", api_name="Blog", schemas={schema.name: schema})
        FileWriter().write(CodeGenerator().generate_models(config), tmp_path / "blog_cyclic")
        monkeypatch.syspath_prepend(str(tmp_path))

        models = importlib.import_module("blog_cyclic.models")

        comment = models.Comment.model_validate({"id": 1, "post": {"id": 2, "comments": []}})
        assert isinstance(comment.post, models.Post)
        assert comment.post.comments == []
        assert models.Comments == List[models.Comment]

    def test_date_field_model_imports(self, tmp_path, monkeypatch):
        pytest.importorskip("pydantic")
        schema = analyze_json_response('{"Date": "2024-01-15", "updated": "2024-01-16"}', "/events")
        config = ApiConfiguration(base_url="https://x.io", api_name="X", schemas={schema.name: schema})
        FileWriter().write(CodeGenerator().generate_models(config), tmp_path / "events_dates")
        monkeypatch.syspath_prepend(str(tmp_path))

        models = importlib.import_module("events_dates.models")

        event = models.Events.model_validate({"Date": "2024-01-15", "updated": "2024-01-16"})
        assert event.date_ == date(2024, 1, 15)
        assert event.updated == date(2024, 1, 16)


# ============================================================================
# TEST: Contract, client, registration
# ============================================================================


class TestClientArtifacts:
    """Tests for the contract, client wrapper and registration glue"""

    def test_contract_operations(self, config):
        content = files_by_path(CodeGenerator().generate(config))["example_api.py"].content

        assert method_names(content, "ExampleApi") == [
            "get_all_users",
            "create_user",
            "get_user",
            "update_user",
            "update_partial_user",
            "delete_user",
            "get_all_healths",
        ]
        assert "async def get_all_users(self) -> List[User]:" in content
        assert "async def create_user(self, body: User) -> User:" in content
        assert "async def delete_user(self, id: int) -> bool:" in content
        assert "async def get_all_healths(self) -> List[Any]:" in content
        assert "from .models import User" in content

    def test_http_implementation(self, config):
        content = files_by_path(CodeGenerator().generate(config))["example_api.py"].content

        assert "class HttpExampleApi:" in content
        assert 'await self._http.get(f"/users/{id}")' in content
        assert 'json=body.model_dump(mode="json", by_alias=True)' in content
        assert "return [User.model_validate(item) for item in response.json()]" in content

    def test_client_mirrors_contract(self, config):
        files = files_by_path(CodeGenerator().generate(config))
        contract_methods = method_names(files["example_api.py"].content, "ExampleApi")
        client_methods = method_names(files["example_client.py"].content, "ExampleClient")

        assert client_methods[:4] == ["__init__", "__aenter__", "__aexit__", "aclose"]
        assert client_methods[4:] == contract_methods
        assert "return await self._api.update_user(id, body)" in files["example_client.py"].content

    def test_registration_factories(self, config):
        content = files_by_path(CodeGenerator().generate(config))["example_registration.py"].content
        tree = ast.parse(content)

        functions = [n.name for n in tree.body if isinstance(n, ast.FunctionDef)]
        classes = [n.name for n in tree.body if isinstance(n, ast.ClassDef)]
        assert functions == [
            "create_example_client",
            "create_example_client_with_token",
            "create_example_client_with_oauth",
            "create_example_client_from_options",
        ]
        assert classes == ["ConnectorOptions", "BearerTokenAuth", "ClientCredentialsAuth"]
        assert 'DEFAULT_BASE_URL = "https://api.example.com"' in content

    def test_descriptions_are_escaped(self, config):
        config.endpoints = [ApiEndpoint("GET", "/users", 'List "all" users \\ fast """')]

        content = files_by_path(CodeGenerator().generate(config))["example_api.py"].content

        tree = ast.parse(content)
        protocol = next(n for n in tree.body if isinstance(n, ast.ClassDef) and n.name == "ExampleApi")
        method = next(n for n in protocol.body if isinstance(n, ast.AsyncFunctionDef))
        assert ast.get_docstring(method).startswith('List "all" users \\ fast """')
