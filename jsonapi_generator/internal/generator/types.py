"""
Построение Go типов из схем OpenAPI.

Схемы, соответствующие json:api, превращаются в структуры ресурсов
(ID + атрибуты + связи), конверт {"data": ...} разворачивается до
типа ресурса. Все остальное генерируется как обычные структуры.
"""

import logging
from typing import Any, List, Optional, Union

from ..types.errors import SchemaError, SchemaTypeError
from ..types.models import (
    Field,
    FuncDecl,
    GoFile,
    StructType,
    Tags,
    TypeDecl,
    go_comment,
    go_doc,
)
from ..types.registry import TypeRegistry
from ..types.schema import Document, Parameter, SchemaKind, SchemaNode
from ..utils import go_name
from .templates import PKG_DECIMAL, PKG_JSON, PKG_JSONAPI, PKG_TIME, templates, use

logger = logging.getLogger(__name__)

GoType = Union[str, StructType]


def type_name_of(node: SchemaNode) -> str:
    """Имя Go типа, на который ссылается узел"""
    return go_name(node.ref_name)


def format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def comment_or_example(node: SchemaNode) -> str:
    if node.description:
        return node.description
    if node.example is not None:
        return f'Example: "{format_value(node.example)}"'
    return ""


def jsonapi_tags(kind: str, name: str) -> Tags:
    return Tags(
        values={
            "jsonapi": f"{kind},{name},omitempty",
            "json": f"{name},omitempty",
        }
    )


def add_required_optional(tags: Tags, name: str, node: SchemaNode):
    if node.is_required(name):
        tags.add_validator("required")
    else:
        tags.add_validator("optional")


def is_resource(node: SchemaNode) -> bool:
    """Объект с id, type и attributes/relationships - ресурс json:api"""
    return (
        node.has_property("id")
        and node.has_property("type")
        and (node.has_property("attributes") or node.has_property("relationships"))
    )


class TypeBuilder:
    """Генератор Go типов. Каждый новый именованный тип объявляется один раз"""

    def __init__(self, registry: TypeRegistry, source: GoFile):
        self.registry = registry
        self.source = source

    def build_types(self, document: Document):
        """Объявление всех components/schemas в порядке ключей"""
        for name, node in document.schemas.items():
            type_name = go_name(name)

            # ошибки json:api предоставляет runtime
            if type_name == "Errors":
                continue

            if not self.registry.register(type_name):
                continue

            go_type = self.build_type(type_name, node, Tags(), ptr=True)
            self.declare(type_name, go_type, node.description)

    def declare(self, name: str, go_type: GoType, description: str = "") -> TypeDecl:
        return self.source.add(TypeDecl(name=name, type=go_type, doc=go_doc(name, description)))

    def build_type(
        self, prefix: str, node: SchemaNode, tags: Optional[Tags] = None, ptr: bool = True
    ) -> GoType:
        """
        Go тип для узла схемы.

        Args:
            prefix: имя типа (или префикс для вложенных типов)
            node: узел схемы
            tags: теги поля, дополняются валидаторами
            ptr: ссылаться на структуры через указатель

        Returns:
            Выражение типа (строка) или inline структура
        """
        tags = tags if tags is not None else Tags()
        kind = node.kind

        if kind is SchemaKind.ARRAY:
            if node.is_ref:
                return type_name_of(node)

            items = node.items
            if items is None:
                raise SchemaError(f"array {prefix!r} has no items")

            tags.remove_omitempty()
            self.registry.mark_array(prefix)
            return "[]" + str(self.build_type(prefix, items, tags, ptr))

        if kind is SchemaKind.OBJECT:
            if node.is_ref:
                return ("*" if ptr else "") + type_name_of(node)
            return self._build_object(prefix, node, ptr)

        if node.is_ref:
            return type_name_of(node)

        if kind is SchemaKind.COMBINATOR:
            logger.warning(f"Can't generate allOf, anyOf and oneOf for type {prefix!r}")
            return use(self.source, PKG_JSON) + ".RawMessage"

        return self.scalar_type(node, tags, context=prefix)

    def _build_object(self, prefix: str, node: SchemaNode, ptr: bool) -> GoType:
        additional = node.additional_properties
        if additional is True:
            if node.properties:
                logger.warning(
                    f"{prefix} properties are ignored. "
                    f"Only {prefix} of type map[string]interface{{}} is generated"
                )
            return "map[string]interface{}"
        if additional is not None:
            if node.properties:
                logger.warning(
                    f"{prefix} properties are ignored. "
                    f"Only {prefix} of type map[string]type is generated"
                )
            return "map[string]" + str(self.build_type(prefix + "Value", additional, Tags(), True))

        data = node.prop("data")
        if data is not None:
            # конверт json:api: {"data": ...}
            if data.is_ref:
                return self.build_type(prefix + "Ref", data, Tags(), ptr)

            if data.kind is SchemaKind.ARRAY:
                return self._build_resource_list(prefix, data, ptr)

            if data.kind is SchemaKind.OBJECT:
                return self.struct_jsonapi(prefix, data)

        elif is_resource(node):
            return self.struct_jsonapi(prefix, node)

        return self.build_struct(prefix, node, ptr)

    def _build_resource_list(self, prefix: str, data: SchemaNode, ptr: bool) -> str:
        items = data.items
        if items is None:
            raise SchemaError(f"data of {prefix!r} is an array without items")

        self.registry.mark_array(prefix)
        star = "*" if ptr else ""

        if items.is_ref:
            return f"[]{star}{type_name_of(items)}"

        item = prefix + "Item"
        if self.registry.register(item):
            self.declare(item, self.struct_jsonapi(item, items), data.description)
        return f"[]{star}{item}"

    def build_struct(self, name: str, node: SchemaNode, ptr: bool) -> GoType:
        """Обычная структура - отдельным типом, если имя еще свободно"""
        fields = self.struct_fields(name, node)

        if self.registry.register(name):
            self.declare(name, StructType(fields=fields), node.description)
            return ("*" if ptr else "") + name

        return StructType(fields=fields)

    def struct_fields(self, prefix: str, node: SchemaNode) -> List[Field]:
        fields = []
        for attr_name, attr in node.properties.items():
            tags = jsonapi_tags("attr", attr_name)
            if attr.additional_properties is not None:
                tags.add_validator("-")
            else:
                add_required_optional(tags, attr_name, node)

            field_name = go_name(attr_name)
            go_type = self.build_type(prefix + field_name, attr, tags, ptr=False)
            fields.append(
                Field(
                    name=field_name,
                    type=go_type,
                    tags=tags,
                    comment="" if attr.is_ref else comment_or_example(attr),
                )
            )
        return fields

    def struct_jsonapi(self, prefix: str, node: SchemaNode) -> StructType:
        """Структура ресурса json:api"""
        prop_id = node.prop("id")
        prop_type = node.prop("type")
        if prop_id is None or prop_type is None:
            raise SchemaError(f"ID/Type missing for jsonapi type {prefix!r}")

        fields = [self.id_field(prefix, prop_id, prop_type)]

        attributes = node.prop("attributes")
        if attributes is not None:
            fields.extend(self.struct_fields(prefix, attributes))

        links = node.prop("links")
        if links is not None:
            fields.append(Field(name="Links", type=self.build_struct(prefix + "Links", links, True)))

        meta = node.prop("meta")
        if meta is not None:
            fields.append(
                Field(
                    name="Meta",
                    type=self.build_struct(prefix + "Meta", meta, True),
                    comment="Resource meta data (json:api meta)",
                )
            )

        relationships = node.prop("relationships")
        if relationships is not None:
            fields.extend(self.struct_relationships(prefix, relationships))

        struct = StructType(fields=fields)
        if meta is not None:
            struct.methods.append(self.jsonapi_meta(prefix, meta))
        return struct

    def id_field(self, prefix: str, id_node: SchemaNode, type_node: SchemaNode) -> Field:
        if not type_node.enum:
            raise SchemaError(f"type of jsonapi resource {prefix!r} has no enum value")

        tags = Tags(values={"jsonapi": f"primary,{type_node.enum[0]},omitempty"})
        go_type = self.scalar_type(id_node, tags, context=prefix + "ID")
        tags.add_validator("optional")
        return Field(name="ID", type=go_type, tags=tags, comment=comment_or_example(id_node))

    def struct_relationships(self, prefix: str, node: SchemaNode) -> List[Field]:
        relationships = []
        for rel_name, rel in node.properties.items():
            tags = jsonapi_tags("relation", rel_name)
            add_required_optional(tags, rel_name, node)

            data = rel.prop("data")
            if data is None:
                raise SchemaError(f"no data for relationship {rel_name} context {prefix}")

            if data.kind is SchemaKind.ARRAY:
                # один-ко-многим
                go_type = "[]*" + self._relationship_type(prefix, rel_name, data.items)
            elif data.kind is SchemaKind.OBJECT:
                # belongs-to
                go_type = "*" + self._relationship_type(prefix, rel_name, data)
            else:
                raise SchemaError(
                    f"data of relationship {rel_name} context {prefix} must be an object or array"
                )

            relationships.append(Field(name=go_name(rel_name), type=go_type, tags=tags))
        return relationships

    @staticmethod
    def _relationship_type(prefix: str, rel_name: str, node: Optional[SchemaNode]) -> str:
        type_node = node.prop("type") if node is not None else None
        if type_node is None or not type_node.enum:
            raise SchemaError(
                f"relationship {rel_name} context {prefix} needs a type enum to reference"
            )
        return go_name(str(type_node.enum[0]))

    def jsonapi_meta(self, type_name: str, meta: SchemaNode) -> FuncDecl:
        """Метод JSONAPIMeta для ресурса с meta"""
        jsonapi = use(self.source, PKG_JSONAPI)

        body = [
            "if r.Meta == nil {",
            "\treturn nil",
            "}",
            f"meta := make({jsonapi}.Meta)",
        ]
        for key in meta.properties:
            body.append(f'meta["{key}"] = r.Meta.{go_name(key)}')
        body.append("return &meta")

        return FuncDecl(
            doc=go_comment(templates.meta_doc),
            signature=f"(r *{type_name}) JSONAPIMeta() *{jsonapi}.Meta",
            body=body,
        )

    def scalar_type(
        self, node: SchemaNode, tags: Tags, is_param: bool = False, context: str = ""
    ) -> str:
        """Примитивный Go тип, дополняет теги валидаторами формата и enum"""
        kind = node.kind
        fmt = node.format

        if kind is SchemaKind.STRING:
            if fmt in ("byte", "binary"):
                go_type = "[]byte"
            elif fmt == "date-time":
                if "jsonapi" in tags:
                    # подсказка json:api что время в формате iso8601
                    tags["jsonapi"] = tags["jsonapi"] + ",iso8601"
                else:
                    tags.add_validator("rfc3339")
                go_type = self._time_type(is_param)
            elif fmt == "date":
                tags.add_validator("time(2006-01-02)")
                go_type = self._time_type(is_param)
            elif fmt == "uuid":
                tags.add_validator("uuid")
                go_type = self._nullable(node, "string")
            elif fmt == "decimal":
                tags.add_validator("matches(^(\\d*\\.)?\\d+$)")
                go_type = self._decimal_type(is_param)
            else:
                go_type = self._nullable(node, "string")

        elif kind is SchemaKind.INTEGER:
            tags.remove_omitempty()
            go_type = self._nullable(node, "int32" if fmt == "int32" else "int64")

        elif kind is SchemaKind.NUMBER:
            if fmt == "decimal":
                if is_param:
                    tags.remove_omitempty()
                go_type = self._decimal_type(is_param)
            else:
                tags.remove_omitempty()
                go_type = self._nullable(node, "float32" if fmt == "float" else "float64")

        elif kind is SchemaKind.BOOLEAN:
            tags.remove_omitempty()
            go_type = self._nullable(node, "bool")

        elif kind is SchemaKind.ARRAY:
            tags.remove_omitempty()
            items = node.items
            if items is None:
                raise SchemaError(f"array {context!r} has no items")
            go_type = "[]" + self.scalar_type(items, tags, is_param, context)

        else:
            raise SchemaTypeError(node.type_name or kind.value, context)

        if node.enum:
            values = [format_value(v) for v in node.enum]
            # для необязательного значения пустая строка тоже допустима
            if tags.has_validator("optional"):
                values.append("")
            tags.add_validator(f"in({'|'.join(values)})")

        return go_type

    def build_param_type(self, param: Parameter, tags: Tags, context: str = "") -> str:
        if param.schema.is_ref:
            return type_name_of(param.schema)
        return self.scalar_type(param.schema, tags, is_param=True, context=context)

    def build_type_reference(self, fallback: str, node: SchemaNode, no_ptr: bool) -> str:
        """
        Ссылка на тип тела запроса/ответа.

        Ссылка $ref используется по имени, конверт с data-ссылкой
        разворачивается до типа ресурса, остальное генерируется под
        именем fallback.
        """
        if node.is_ref:
            return type_name_of(node)

        data = node.prop("data") if node.kind is SchemaKind.OBJECT else None
        if data is not None and data.is_ref:
            name = type_name_of(data)
            if no_ptr or self.registry.is_array(name) or data.kind is SchemaKind.ARRAY:
                return name
            return "*" + name

        if data is not None and data.kind is SchemaKind.ARRAY:
            items = data.items
            if items is not None and items.is_ref:
                return "[]*" + type_name_of(items)

        if self.registry.register(fallback):
            go_type = self.build_type(fallback, node, Tags(), ptr=True)
            self.declare(fallback, go_type, node.description)

        if no_ptr or self.registry.is_array(fallback):
            return fallback
        return "*" + fallback

    @staticmethod
    def _nullable(node: SchemaNode, go_type: str) -> str:
        return "*" + go_type if node.nullable else go_type

    def _time_type(self, is_param: bool) -> str:
        # time.Time не может быть nil, для omitempty нужен указатель
        time = use(self.source, PKG_TIME)
        return f"{time}.Time" if is_param else f"*{time}.Time"

    def _decimal_type(self, is_param: bool) -> str:
        decimal = use(self.source, PKG_DECIMAL)
        return f"{decimal}.Decimal" if is_param else f"*{decimal}.Decimal"
