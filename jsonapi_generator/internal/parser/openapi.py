import json
import logging
from pathlib import Path
from typing import Any, Mapping, Tuple

import httpx
import jsonref
import yaml

from ..types.errors import SchemaError
from ..types.schema import Document

logger = logging.getLogger(__name__)


class SchemaLoader:
    """
    Загрузка OpenAPI документа.

    Источник - URL (начинается с http) или путь к файлу, формат JSON или YAML.
    Ссылки $ref заменяются ленивыми прокси jsonref, имя ссылки
    остается доступным на каждом узле.
    """

    def __init__(self, timeout: float = 30.0):
        self.timeout = timeout

    def load(self, source: str) -> Document:
        text, base_uri = self.fetch(source)
        return self.resolve(self.parse(text, source), base_uri)

    def fetch(self, source: str) -> Tuple[str, str]:
        """Текст документа и базовый URI для относительных ссылок"""
        if source.startswith("http"):
            logger.info(f"Loading schema from {source}")
            try:
                response = httpx.get(source, timeout=self.timeout, follow_redirects=True)
                response.raise_for_status()
            except httpx.HTTPError as err:
                raise SchemaError(f"failed to load schema from {source}: {err}") from err
            return response.text, source

        path = Path(source).resolve()
        logger.info(f"Loading schema from file {path}")
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read(), path.as_uri()
        except OSError as err:
            raise SchemaError(f"failed to read schema {source}: {err}") from err

    @staticmethod
    def parse(text: str, source: str = "") -> Mapping:
        try:
            raw = json.loads(text)
        except ValueError:
            # не JSON - пробуем YAML
            try:
                raw = yaml.safe_load(text)
            except yaml.YAMLError as err:
                raise SchemaError(f"failed to parse schema {source}: {err}") from err

        if not isinstance(raw, dict):
            raise SchemaError(f"schema {source} is not an OpenAPI document")
        return raw

    @staticmethod
    def resolve(raw: Any, base_uri: str = "") -> Document:
        try:
            return Document(jsonref.replace_refs(raw, base_uri=base_uri))
        except jsonref.JsonRefError as err:
            raise SchemaError(f"unresolved reference: {err}") from err
