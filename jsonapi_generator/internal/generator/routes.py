"""Маршруты API: имена, разбор шаблона пути и порядок регистрации"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Set, Tuple
from urllib.parse import parse_qsl, urlsplit

from ..types.errors import RouteError, SchemaError
from ..types.schema import Document, Operation, Parameter
from ..utils import generate_name, lower_first, operation_name

logger = logging.getLogger(__name__)

PARAMETER_LOCATIONS = ("path", "query", "header")


def path_len(path: str) -> int:
    """Число сегментов пути (разделители "/" и ".")"""
    return path.count("/") + path.count(".")


def parse_pattern(pattern: str) -> Tuple[str, Tuple[Tuple[str, str], ...]]:
    """
    Разбор шаблона маршрута на путь и статические условия запроса.

    Examples:
        >>> parse_pattern("/beta/payments?filter[status]=valid")
        ('/beta/payments', (('filter[status]', 'valid'),))
    """
    parts = urlsplit(pattern)

    values: Dict[str, str] = {}
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key in values and values[key] != value:
            raise RouteError(
                f"query paths can only handle one query parameter with the same name: "
                f"{key!r} in {pattern!r}"
            )
        values[key] = value

    return parts.path, tuple(sorted(values.items()))


@dataclass(frozen=True)
class Route:
    """Маршрут: одна пара (шаблон, операция)"""

    method: str
    pattern: str
    handler: str
    service_func: str
    request_type: str
    response_type: str
    response_type_impl: str
    path: str
    query_values: Tuple[Tuple[str, str], ...] = ()
    parameters: Tuple[Parameter, ...] = ()
    operation: Operation = field(default=None, compare=False, repr=False)

    def specificity(self) -> Tuple[int, int, int]:
        """
        Ключ сортировки: более конкретные маршруты раньше.

        Длинный путь конкретнее, путь без параметров конкретнее,
        больше условий запроса - конкретнее.
        """
        return (-path_len(self.path), self.path.count("{"), -len(self.query_values))

    @property
    def has_path_params(self) -> bool:
        return any(p.location == "path" for p in self.parameters)


def sort_routes(routes: List[Route]) -> List[Route]:
    """Стабильная сортировка: равные маршруты сохраняют порядок объявления"""
    return sorted(routes, key=Route.specificity)


class RouteBuilder:
    """Построение маршрутов одного прохода генерации"""

    def __init__(self):
        self._operation_ids: Set[str] = set()
        self._names: Set[str] = set()

    def build_routes(self, document: Document) -> List[Route]:
        routes = []
        for path_item in document.path_items():
            for operation in path_item.operations:
                routes.append(self.build_route(operation.method, operation, path_item.pattern))
        return routes

    def build_route(self, method: str, operation: Operation, pattern: str) -> Route:
        if "/:" in pattern:
            logger.warning(f"Note: Don't use ruby style path parameters: {pattern}")

        name = self._name(method, operation, pattern)
        path, query_values = parse_pattern(pattern)

        return Route(
            method=method.upper(),
            pattern=pattern,
            handler=name + "Handler",
            service_func=name,
            request_type=name + "Request",
            response_type=name + "ResponseWriter",
            response_type_impl=lower_first(name) + "ResponseWriter",
            path=path,
            query_values=query_values,
            parameters=tuple(self._parameters(operation, pattern)),
            operation=operation,
        )

    def _name(self, method: str, operation: Operation, pattern: str) -> str:
        operation_id = operation.operation_id
        name = ""

        if operation_id:
            if operation_id in self._operation_ids:
                raise RouteError(
                    f"duplicate operationId {operation_id!r} ({method.upper()} {pattern})"
                )
            self._operation_ids.add(operation_id)
            name = operation_name(operation_id)

        if not name:
            logger.warning(
                f"Note: Avoid automatic method name generation for path (use OperationID): {pattern}"
            )
            name = generate_name(method, pattern)

        unique, counter = name, 2
        while unique in self._names:
            unique = f"{name}{counter}"
            counter += 1

        if unique != name:
            logger.warning(f"Operation name {name!r} is already used, renamed to {unique!r}")

        self._names.add(unique)
        return unique

    @staticmethod
    def _parameters(operation: Operation, pattern: str) -> List[Parameter]:
        parameters = []
        for param in operation.parameters:
            if param.location == "cookie":
                logger.warning(f"Cookie parameter {param.name!r} of {pattern} is not supported, skipped")
                continue
            if param.location not in PARAMETER_LOCATIONS:
                raise SchemaError(
                    f"parameter {param.name!r} of {pattern} has unknown location {param.location!r}"
                )
            parameters.append(param)
        return parameters
