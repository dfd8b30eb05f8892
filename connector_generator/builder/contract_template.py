"""
Contract Template - Renders the API contract and its HTTP implementation

The contract is a typing.Protocol with one async method per endpoint; the
implementation sends each call through an httpx.AsyncClient.
"""

from typing import List

from connector_generator.builder.operations import Operation
from connector_generator.builder.source import docstring, import_lines, string_literal


def contract_class_name(api_name: str) -> str:
    return f"{api_name}Api"


def model_names(operations: List[Operation]) -> List[str]:
    """Model types referenced by the operations, sorted."""
    return sorted({op.model.type_name for op in operations if op.model is not None})


def operation_annotations(operations: List[Operation]) -> List[str]:
    annotations = []
    for op in operations:
        annotations.append(op.return_type)
        annotations.extend(p.annotation for p in op.parameters)
    return annotations


def render_contract(api_name: str, base_url: str, operations: List[Operation]) -> str:
    """Render <api>_api.py"""
    contract = contract_class_name(api_name)
    models = model_names(operations)

    lines = [docstring(f"Contract for the {api_name} API ({base_url}). Generated, do not edit.", indent=""), ""]
    lines.extend(import_lines(operation_annotations(operations), extra=["Protocol"]))
    lines.extend(["", "import httpx"])
    if models:
        lines.extend(["", f"from .models import {', '.join(models)}"])

    lines.extend(["", "", f"class {contract}(Protocol):"])
    lines.append(docstring(f"Operations exposed by the {api_name} API."))
    for op in operations:
        lines.append("")
        lines.append(f"    async def {op.name}({op.signature()}) -> {op.return_type}:")
        lines.append(docstring(f"{op.description} ({op.method} {op.path})", indent="        "))
        lines.append("        ...")

    lines.extend(["", "", f"class Http{contract}:"])
    lines.append(docstring(f"{contract} implementation backed by httpx.AsyncClient."))
    lines.append("")
    lines.append("    def __init__(self, http: httpx.AsyncClient):")
    lines.append("        self._http = http")
    for op in operations:
        lines.append("")
        lines.append(f"    async def {op.name}({op.signature()}) -> {op.return_type}:")
        lines.extend(_render_call(op))

    return "\n".join(lines) + "\n"


def _render_call(op: Operation) -> List[str]:
    if op.path_parameters:
        url = "f" + string_literal(op.path_template)
    else:
        url = string_literal(op.path)

    arguments = [url]
    if op.body is not None:
        if op.model is not None:
            arguments.append('json=body.model_dump(mode="json", by_alias=True)')
        else:
            arguments.append("json=body")

    call = f"await self._http.{op.method.lower()}({', '.join(arguments)})"
    if op.method == "DELETE":
        return [
            f"        response = {call}",
            "        return response.is_success",
        ]

    lines = [
        f"        response = {call}",
        "        response.raise_for_status()",
    ]
    if op.model is None:
        lines.append("        return response.json()")
    elif op.returns_list:
        lines.append(f"        return [{op.model.type_name}.model_validate(item) for item in response.json()]")
    else:
        lines.append(f"        return {op.model.type_name}.model_validate(response.json())")
    return lines
