"""Генератор Go сервисов json:api из OpenAPI спецификаций"""

from .generator import JsonApiGenerator, build_schema, build_source
from .internal.types.errors import (
    GeneratorError,
    RouteError,
    SchemaError,
    SchemaTypeError,
    SecurityError,
)

__all__ = [
    "JsonApiGenerator",
    "build_schema",
    "build_source",
    "GeneratorError",
    "RouteError",
    "SchemaError",
    "SchemaTypeError",
    "SecurityError",
]
