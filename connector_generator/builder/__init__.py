"""
Code Builder Module

Turns discovered endpoints and inferred schemas into client source files:
- pydantic models
- Protocol contract with an httpx implementation
- Client wrapper and registration factories
"""

from .code_generator import CodeGenerator
from .operations import Operation, plan_operations

__all__ = [
    "CodeGenerator",
    "Operation",
    "plan_operations",
]
