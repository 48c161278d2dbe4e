"""
Модель OpenAPI документа.

Обертки над словарем спецификации (после jsonref) - значения читаются лениво,
поэтому рекурсивные схемы не разворачиваются до бесконечности.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from .errors import SchemaError

HTTP_METHODS = (
    "Connect",
    "Delete",
    "Get",
    "Head",
    "Options",
    "Patch",
    "Post",
    "Put",
    "Trace",
)
COMBINATORS = ("allOf", "anyOf", "oneOf")


def as_mapping(value: Any) -> Mapping:
    """Словарь или пустой словарь (прокси jsonref тоже подходят)"""
    if value is not None and hasattr(value, "keys"):
        return value
    return {}


def reference_of(raw: Any) -> Optional[str]:
    """Исходный $ref узла, если он был заменен прокси jsonref"""
    reference = getattr(raw, "__reference__", None)
    if reference:
        return reference.get("$ref")
    return None


def ref_base_name(ref: Optional[str]) -> str:
    if not ref:
        return ""
    return ref.rstrip("/").rsplit("/", 1)[-1]


class SchemaKind(str, Enum):
    """Закрытый набор видов узлов схемы"""

    STRING = "string"
    INTEGER = "integer"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"
    COMBINATOR = "combinator"
    UNKNOWN = "unknown"

    @classmethod
    def classify(cls, raw: Mapping) -> "SchemaKind":
        type_name = raw.get("type")
        if isinstance(type_name, list):
            # OpenAPI 3.1: ["string", "null"]
            type_name = next((t for t in type_name if t != "null"), None)

        if type_name == "object":
            return cls.OBJECT
        if type_name == "array":
            return cls.ARRAY
        if any(key in raw for key in COMBINATORS):
            return cls.COMBINATOR
        if type_name in _SCALARS:
            return _SCALARS[type_name]
        if type_name is None:
            if "properties" in raw or "additionalProperties" in raw:
                return cls.OBJECT
            if "items" in raw:
                return cls.ARRAY
        return cls.UNKNOWN


_SCALARS = {
    "string": SchemaKind.STRING,
    "integer": SchemaKind.INTEGER,
    "number": SchemaKind.NUMBER,
    "boolean": SchemaKind.BOOLEAN,
}


class SchemaNode:
    """Узел схемы: либо ссылка на именованный тип, либо inline определение"""

    def __init__(self, raw: Any, ref: Optional[str] = None):
        self.raw = as_mapping(raw)
        self.ref = ref
        self._kind: Optional[SchemaKind] = None

    @classmethod
    def from_raw(cls, raw: Any) -> "SchemaNode":
        return cls(raw, reference_of(raw))

    def __repr__(self) -> str:
        if self.ref:
            return f"SchemaNode(ref={self.ref!r})"
        return f"SchemaNode(kind={self.kind.value!r})"

    @property
    def is_ref(self) -> bool:
        return bool(self.ref)

    @property
    def ref_name(self) -> str:
        return ref_base_name(self.ref)

    @property
    def kind(self) -> SchemaKind:
        if self._kind is None:
            self._kind = SchemaKind.classify(self.raw)
        return self._kind

    @property
    def type_name(self) -> str:
        return str(self.raw.get("type") or "")

    @property
    def format(self) -> str:
        return self.raw.get("format") or ""

    @property
    def nullable(self) -> bool:
        return bool(self.raw.get("nullable", False))

    @property
    def description(self) -> str:
        return self.raw.get("description") or ""

    @property
    def example(self) -> Any:
        return self.raw.get("example")

    @property
    def enum(self) -> List[Any]:
        return list(self.raw.get("enum") or [])

    @property
    def required(self) -> List[str]:
        return list(self.raw.get("required") or [])

    def is_required(self, name: str) -> bool:
        return name in self.required

    @property
    def items(self) -> Optional["SchemaNode"]:
        items = self.raw.get("items")
        if items is None:
            return None
        return SchemaNode.from_raw(items)

    @property
    def properties(self) -> Dict[str, "SchemaNode"]:
        """Свойства в отсортированном порядке ключей"""
        props = as_mapping(self.raw.get("properties"))
        return {name: SchemaNode.from_raw(props[name]) for name in sorted(props)}

    def prop(self, name: str) -> Optional["SchemaNode"]:
        props = as_mapping(self.raw.get("properties"))
        if name not in props:
            return None
        return SchemaNode.from_raw(props[name])

    def has_property(self, name: str) -> bool:
        return name in as_mapping(self.raw.get("properties"))

    @property
    def additional_properties(self) -> Union[bool, "SchemaNode", None]:
        """True для произвольной карты, узел для типизированной, иначе None"""
        value = self.raw.get("additionalProperties")
        if value is True:
            return True
        if value is None or value is False:
            return None
        return SchemaNode.from_raw(value)


@dataclass
class OAuthFlow:
    authorization_url: str = ""
    token_url: str = ""
    refresh_url: str = ""
    scopes: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Mapping) -> "OAuthFlow":
        scopes = as_mapping(raw.get("scopes"))
        return cls(
            authorization_url=raw.get("authorizationUrl", ""),
            token_url=raw.get("tokenUrl", ""),
            refresh_url=raw.get("refreshUrl", ""),
            scopes={k: str(scopes[k]) for k in sorted(scopes)},
        )


# Имя потока в OpenAPI -> имя поля в oauth2.Config
OAUTH_FLOWS = {
    "authorizationCode": "AuthorizationCode",
    "clientCredentials": "ClientCredentials",
    "implicit": "Implicit",
    "password": "Password",
}


@dataclass
class SecurityScheme:
    """Конфигурация схемы безопасности из components.securitySchemes"""

    name: str
    type: str
    description: str = ""
    bearer_format: str = ""
    location: str = ""
    param_name: str = ""
    scheme: str = ""
    flows: Dict[str, OAuthFlow] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, name: str, raw: Any) -> "SecurityScheme":
        raw = as_mapping(raw)
        flows = as_mapping(raw.get("flows"))
        return cls(
            name=name,
            type=raw.get("type", ""),
            description=raw.get("description", ""),
            bearer_format=raw.get("bearerFormat", ""),
            location=raw.get("in", ""),
            param_name=raw.get("name", ""),
            scheme=raw.get("scheme", ""),
            flows={
                flow: OAuthFlow.from_raw(as_mapping(flows[flow]))
                for flow in sorted(flows)
                if flow in OAUTH_FLOWS
            },
        )


@dataclass
class Parameter:
    name: str
    location: str
    required: bool = False
    description: str = ""
    schema: SchemaNode = field(default_factory=lambda: SchemaNode({}))

    @classmethod
    def from_raw(cls, raw: Any) -> "Parameter":
        raw = as_mapping(raw)
        if "name" not in raw or "in" not in raw:
            raise SchemaError(f"parameter without name/in: {dict(raw)!r}")
        return cls(
            name=raw["name"],
            location=raw["in"],
            required=bool(raw.get("required", False)),
            description=raw.get("description", ""),
            schema=SchemaNode.from_raw(raw.get("schema", {})),
        )

    @property
    def key(self) -> Tuple[str, str]:
        return self.name, self.location


@dataclass
class RequestBody:
    description: str = ""
    required: bool = False
    content: Dict[str, SchemaNode] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Any) -> "RequestBody":
        raw = as_mapping(raw)
        content = as_mapping(raw.get("content"))
        return cls(
            description=raw.get("description", ""),
            required=bool(raw.get("required", False)),
            content={
                media: SchemaNode.from_raw(as_mapping(content[media]).get("schema", {}))
                for media in sorted(content)
            },
        )


@dataclass
class Response:
    code: str
    description: str = ""
    ref: Optional[str] = None
    content: Dict[str, Optional[SchemaNode]] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, code: str, raw: Any) -> "Response":
        ref = reference_of(raw)
        raw = as_mapping(raw)
        content = {}
        media_types = as_mapping(raw.get("content"))
        for media in sorted(media_types):
            schema = as_mapping(media_types[media]).get("schema")
            content[media] = None if schema is None else SchemaNode.from_raw(schema)
        return cls(
            code=str(code),
            description=raw.get("description", ""),
            ref=ref,
            content=content,
        )

    @property
    def ref_name(self) -> str:
        return ref_base_name(self.ref)


@dataclass
class Operation:
    method: str
    operation_id: str = ""
    summary: str = ""
    description: str = ""
    parameters: List[Parameter] = field(default_factory=list)
    request_body: Optional[RequestBody] = None
    responses: Dict[str, Response] = field(default_factory=dict)
    security: Optional[List[Dict[str, List[str]]]] = None

    @classmethod
    def from_raw(
        cls, method: str, raw: Any, path_parameters: List[Parameter] = None
    ) -> "Operation":
        raw = as_mapping(raw)

        # Параметры уровня пути, переопределяемые параметрами операции
        own = [Parameter.from_raw(p) for p in raw.get("parameters") or []]
        own_keys = {p.key for p in own}
        inherited = [p for p in path_parameters or [] if p.key not in own_keys]

        body = raw.get("requestBody")
        responses = as_mapping(raw.get("responses"))

        security = raw.get("security")
        if security is not None:
            security = [
                {name: list(scopes or []) for name, scopes in as_mapping(req).items()}
                for req in security
            ]

        return cls(
            method=method,
            operation_id=raw.get("operationId", "") or "",
            summary=raw.get("summary", ""),
            description=raw.get("description", ""),
            parameters=inherited + own,
            request_body=None if body is None else RequestBody.from_raw(body),
            responses={
                str(code): Response.from_raw(str(code), responses[code])
                for code in sorted(responses, key=str)
            },
            security=security,
        )


@dataclass
class PathItem:
    pattern: str
    operations: List[Operation] = field(default_factory=list)

    @classmethod
    def from_raw(cls, pattern: str, raw: Any) -> "PathItem":
        raw = as_mapping(raw)
        path_parameters = [Parameter.from_raw(p) for p in raw.get("parameters") or []]
        operations = []
        for method in HTTP_METHODS:
            op = raw.get(method.lower())
            if op is None:
                continue
            operations.append(Operation.from_raw(method, op, path_parameters))
        return cls(pattern=pattern, operations=operations)


class Document:
    """Корневой OpenAPI документ"""

    def __init__(self, raw: Any):
        raw = as_mapping(raw)
        version = str(raw.get("openapi", ""))
        if not version.startswith("3"):
            raise SchemaError(
                f"only OpenAPI v3 documents are supported (got openapi={version!r})"
            )
        if not hasattr(raw.get("paths", {}), "keys"):
            raise SchemaError("document paths must be a mapping")
        self.raw = raw

    @property
    def info(self) -> Mapping:
        return as_mapping(self.raw.get("info"))

    @property
    def title(self) -> str:
        return self.info.get("title", "")

    @property
    def description(self) -> str:
        return self.info.get("description", "")

    @property
    def servers(self) -> List[str]:
        return [as_mapping(s).get("url", "") for s in self.raw.get("servers") or []]

    @property
    def components(self) -> Mapping:
        return as_mapping(self.raw.get("components"))

    @property
    def schemas(self) -> Dict[str, SchemaNode]:
        """Именованные схемы в отсортированном порядке"""
        schemas = as_mapping(self.components.get("schemas"))
        return {name: SchemaNode.from_raw(schemas[name]) for name in sorted(schemas)}

    @property
    def security_schemes(self) -> Dict[str, SecurityScheme]:
        schemes = as_mapping(self.components.get("securitySchemes"))
        return {
            name: SecurityScheme.from_raw(name, schemes[name]) for name in sorted(schemes)
        }

    @property
    def has_security(self) -> bool:
        return bool(as_mapping(self.components.get("securitySchemes")))

    def path_items(self) -> List[PathItem]:
        paths = as_mapping(self.raw.get("paths"))
        return [PathItem.from_raw(pattern, paths[pattern]) for pattern in sorted(paths)]
