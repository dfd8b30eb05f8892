"""Client Template - Renders the client wrapper delegating to the contract."""

from typing import List

from connector_generator.builder.contract_template import (
    contract_class_name,
    model_names,
    operation_annotations,
)
from connector_generator.builder.operations import Operation
from connector_generator.builder.source import docstring, import_lines


def client_class_name(api_name: str) -> str:
    return f"{api_name}Client"


def render_client(api_name: str, module_stem: str, operations: List[Operation]) -> str:
    """
    Render <api>_client.py

    Every method keeps the contract's name and signature and returns the
    contract's result unchanged. The client owns the transport it was given
    and closes it on `aclose()` / `async with` exit.
    """
    contract = contract_class_name(api_name)
    client = client_class_name(api_name)
    models = model_names(operations)

    lines = [docstring(f"Client for the {api_name} API. Generated, do not edit.", indent=""), ""]
    lines.extend(import_lines(operation_annotations(operations), extra=["Optional"]))
    lines.extend(["", "import httpx", ""])
    lines.append(f"from .{module_stem}_api import {contract}")
    if models:
        lines.append(f"from .models import {', '.join(models)}")

    lines.extend(["", "", f"class {client}:"])
    lines.append(docstring(f"High-level client for the {api_name} API."))
    lines.append("")
    lines.append(f"    def __init__(self, api: {contract}, http: Optional[httpx.AsyncClient] = None):")
    lines.append("        self._api = api")
    lines.append("        self._http = http")
    lines.append("")
    lines.append(f'    async def __aenter__(self) -> "{client}":')
    lines.append("        return self")
    lines.append("")
    lines.append("    async def __aexit__(self, exc_type, exc, tb) -> None:")
    lines.append("        await self.aclose()")
    lines.append("")
    lines.append("    async def aclose(self) -> None:")
    lines.append(docstring("Close the underlying transport, if the client owns one.", indent="        "))
    lines.append("        if self._http is not None:")
    lines.append("            await self._http.aclose()")

    for op in operations:
        lines.append("")
        lines.append(f"    async def {op.name}({op.signature()}) -> {op.return_type}:")
        lines.append(docstring(op.description, indent="        "))
        lines.append(f"        return await self._api.{op.name}({op.call_arguments()})")

    return "\n".join(lines) + "\n"
