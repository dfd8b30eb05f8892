"""
Model Template - Renders inferred schemas as pydantic models

Supports:
- Wire-name aliases via Field(alias=...)
- Optional[...] = None for nullable fields
- Frozen models (ConfigDict(frozen=True))
- Collection aliases (Users = List[User])
- Cross-module references as quoted annotations, imported after the class
"""

from typing import Dict, List, Set

from connector_generator.builder.naming import to_snake_case
from connector_generator.builder.source import (
    docstring,
    import_lines,
    referenced_names,
    string_literal,
)
from connector_generator.schema.models import SchemaModel, SchemaProperty


def model_module_name(model: SchemaModel) -> str:
    """Module (file stem) holding a model's record type."""
    return to_snake_case(model.type_name)


def collect_models(schemas: List[SchemaModel]) -> List[SchemaModel]:
    """
    Top-level schemas followed by their nested models, depth first

    Every record type name appears once. Top-level schemas claim their names
    before any nested model; among the rest the first model with a given
    name wins.
    """
    seen: Dict[str, SchemaModel] = {}
    for schema in schemas:
        seen.setdefault(schema.type_name, schema)
    top_level = list(seen.values())

    def visit(model: SchemaModel):
        for nested in model.nested_models():
            if nested.type_name in seen:
                continue
            seen[nested.type_name] = nested
            visit(nested)

    for schema in top_level:
        visit(schema)

    return list(seen.values())


def render_model(model: SchemaModel, frozen: bool = True, optional_types: bool = True) -> str:
    """Render the module for one model."""
    nested_imports = sorted({
        (model_module_name(n), n.type_name)
        for n in model.nested_models()
        if n.type_name != model.type_name
    })
    forward_names = {name for _, name in nested_imports} | {model.type_name}

    fields = [_render_field(p, optional_types, forward_names) for p in model.properties.values()]
    annotations = [p.python_type for p in model.properties.values()]
    if optional_types and any(p.is_nullable for p in model.properties.values()):
        annotations.append("Optional")
    if model.is_collection:
        annotations.append("List")

    pydantic_names = ["BaseModel", "ConfigDict"]
    if any("Field(" in f for f in fields):
        pydantic_names.append("Field")
    if "AnyUrl" in "".join(annotations):
        pydantic_names.insert(0, "AnyUrl")

    lines = ['"""Generated model. Do not edit by hand."""', ""]
    stdlib = [line for line in import_lines(annotations) if not line.startswith("from pydantic")]
    if stdlib:
        lines.extend(stdlib)
        lines.append("")
    lines.append(f"from pydantic import {', '.join(pydantic_names)}")

    lines.extend(["", "", f"class {model.type_name}(BaseModel):"])
    description = model.description if not model.is_collection else None
    lines.append(docstring(description or f"{model.type_name} record."))
    lines.append("")

    config_args = ["populate_by_name=True"]
    if frozen:
        config_args.append("frozen=True")
    lines.append(f"    model_config = ConfigDict({', '.join(config_args)})")

    if fields:
        lines.append("")
        lines.extend(f"    {f}" for f in fields)

    if model.is_collection and model.name != model.type_name:
        lines.extend(["", "", f"{model.name} = List[{model.type_name}]"])

    if nested_imports:
        # Bound after the class: a nested model may import this module back
        lines.append("")
        lines.extend(
            f"from .{module} import {name}  # noqa: E402" for module, name in nested_imports
        )

    return "\n".join(lines) + "\n"


def render_models_package(models: List[SchemaModel]) -> str:
    """Render models/__init__.py re-exporting every record type and collection alias."""
    lines = ['"""Generated models."""', ""]
    exported = []

    for model in models:
        names = [model.type_name]
        if model.is_collection and model.name != model.type_name:
            names.append(model.name)
        lines.append(f"from .{model_module_name(model)} import {', '.join(names)}")
        exported.extend(names)

    # Every module is loaded now, so quoted cross-module annotations resolve
    if models:
        lines.append("")
        lines.extend(f"{model.type_name}.model_rebuild()" for model in models)

    lines.extend(["", "__all__ = ["])
    lines.extend(f"    {string_literal(name)}," for name in exported)
    lines.append("]")
    return "\n".join(lines) + "\n"


def _render_field(prop: SchemaProperty, optional_types: bool, forward_names: Set[str]) -> str:
    annotation = prop.python_type
    nullable = prop.is_nullable and optional_types
    if nullable:
        annotation = f"Optional[{annotation}]"
    if forward_names & referenced_names([annotation]):
        # not bound yet when the class body runs
        annotation = string_literal(annotation)

    aliased = prop.name != prop.original_name
    if aliased and nullable:
        return f"{prop.name}: {annotation} = Field(default=None, alias={string_literal(prop.original_name)})"
    if aliased:
        return f"{prop.name}: {annotation} = Field(alias={string_literal(prop.original_name)})"
    if nullable:
        return f"{prop.name}: {annotation} = None"
    return f"{prop.name}: {annotation}"
