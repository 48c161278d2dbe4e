"""Утилиты для генератора"""

from .naming import (
    fallback_helper_name,
    generate_name,
    go_name,
    lower_first,
    method_name,
    operation_name,
    param_name,
    sub_service_name,
    title,
)

__all__ = [
    "fallback_helper_name",
    "generate_name",
    "go_name",
    "lower_first",
    "method_name",
    "operation_name",
    "param_name",
    "sub_service_name",
    "title",
]
