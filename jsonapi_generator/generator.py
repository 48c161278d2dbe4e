"""
Главный модуль генератора - чистый интерфейс
"""

import logging
from typing import Any, Mapping, Optional, Union

import jsonref

from .internal.generator.handler import HandlerEmitter
from .internal.generator.routes import RouteBuilder
from .internal.generator.security import SecurityEmitter
from .internal.generator.templates import templates
from .internal.generator.types import TypeBuilder
from .internal.generator.writer import SourceWriter
from .internal.parser.openapi import SchemaLoader
from .internal.types.errors import SchemaError
from .internal.types.models import GoFile
from .internal.types.registry import TypeRegistry
from .internal.types.schema import Document

logger = logging.getLogger(__name__)


class JsonApiGenerator:
    """
    Генератор Go сервиса json:api из OpenAPI документа.

    Args:
        optional_auth: проверки авторизации выполняются только при
            заданном authBackend (сервис работает без авторизации)
        loader: загрузчик документов
    """

    def __init__(self, optional_auth: bool = True, loader: Optional[SchemaLoader] = None):
        self.optional_auth = optional_auth
        self.loader = loader or SchemaLoader()

    def build_source(self, source: str, output_path: str, package_name: str) -> str:
        """Генерация из файла или URL"""
        document = self.loader.load(source)
        return self.generate(document, output_path, package_name)

    def build_schema(
        self, schema: Union[Document, Mapping[str, Any]], output_path: str, package_name: str
    ) -> str:
        """Генерация из уже загруженного документа"""
        if not isinstance(schema, Document):
            schema = SchemaLoader.resolve(schema)
        return self.generate(schema, output_path, package_name)

    def generate(self, document: Document, output_path: str, package_name: str) -> str:
        try:
            return self._generate(document, output_path, package_name)
        except jsonref.JsonRefError as err:
            raise SchemaError(f"unresolved reference: {err}") from err

    def _generate(self, document: Document, output_path: str, package_name: str) -> str:
        source = GoFile(package_name=package_name, import_path=output_path, header=templates.header)

        registry = TypeRegistry()
        types = TypeBuilder(registry, source)
        types.build_types(document)

        security = SecurityEmitter(source, optional_auth=self.optional_auth)
        security.build_backend_interface(document)
        security.build_security_config(document.security_schemes)

        routes = RouteBuilder().build_routes(document)
        logger.debug(f"Built {len(registry)} types and {len(routes)} routes for {document.title!r}")

        handlers = HandlerEmitter(source, types, security, document, service_name=package_name)
        handlers.build(routes)

        return SourceWriter().emit(source)


def build_source(source: str, output_path: str, package_name: str) -> str:
    """Go код сервиса из OpenAPI документа по пути или URL"""
    return JsonApiGenerator().build_source(source, output_path, package_name)


def build_schema(schema: Union[Document, Mapping[str, Any]], output_path: str, package_name: str) -> str:
    """Go код сервиса из загруженного OpenAPI документа"""
    return JsonApiGenerator().build_schema(schema, output_path, package_name)
