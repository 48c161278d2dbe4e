import json
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, field_validator


def go_comment(text: str) -> str:
    """Однострочный комментарий или блок /* */ для многострочного текста"""
    if "\n" in text:
        return "/*\n" + text + "\n*/"
    return "// " + text


def go_doc(name: str, description: str = "") -> str:
    """Документация декларации в стиле godoc: имя + описание"""
    if description:
        return go_comment(f"{name} {description}")
    return go_comment(f"{name} ...")


def quote(value: str) -> str:
    """Экранирование значения тега, Go разбирает его через strconv.Unquote"""
    return value.replace("\\", "\\\\").replace('"', '\\"')


def indent(text: str, prefix: str = "\t") -> str:
    return "\n".join(prefix + line if line else line for line in text.split("\n"))


def go_string(value: Any) -> str:
    """Строковый литерал Go"""
    return json.dumps(str(value), ensure_ascii=False)


def go_composite(type_expr: str, entries: List[Tuple[str, str]]) -> str:
    """
    Составной литерал Go с ключами.

    Значения подряд идущих однострочных элементов выравниваются как в gofmt.
    """
    if not entries:
        return type_expr + "{}"

    lines: List[str] = []
    run: List[Tuple[str, str]] = []

    def flush():
        if run:
            width = max(len(key) for key, _ in run) + 1
            lines.extend(f"{(key + ':').ljust(width)} {value}," for key, value in run)
            run.clear()

    for key, value in entries:
        if "\n" in value:
            flush()
            lines.append(f"{key}: {value},")
        else:
            run.append((key, value))
    flush()

    return type_expr + "{\n" + indent("\n".join(lines)) + "\n}"


class Tags(BaseModel):
    """Struct tags поля: json, jsonapi, valid"""

    values: Dict[str, str] = {}

    def __getitem__(self, key: str) -> str:
        return self.values[key]

    def __setitem__(self, key: str, value: str):
        self.values[key] = value

    def __contains__(self, key: str) -> bool:
        return key in self.values

    def add_validator(self, validator: str):
        current = self.values.get("valid")
        self.values["valid"] = f"{current},{validator}" if current else validator

    def has_validator(self, validator: str) -> bool:
        if "valid" not in self.values:
            return False
        return any(v.startswith(validator) for v in self.values["valid"].split(","))

    def remove_omitempty(self):
        for key in ("json", "jsonapi"):
            if key in self.values:
                self.values[key] = self.values[key].replace(",omitempty", "")

    def __bool__(self) -> bool:
        return bool(self.values)

    def __str__(self):
        if not self.values:
            return ""
        return (
            "`"
            + " ".join(f'{key}:"{quote(self.values[key])}"' for key in sorted(self.values))
            + "`"
        )


class FuncDecl(BaseModel):
    signature: str
    body: List[str] = []
    doc: Optional[str] = None

    def __str__(self):
        lines = []
        if self.doc:
            lines.append(self.doc)
        if not self.body:
            lines.append(f"func {self.signature} {{}}")
            return "\n".join(lines)
        lines.append(f"func {self.signature} {{")
        lines.extend(indent(line) for line in self.body)
        lines.append("}")
        return "\n".join(lines)


class Field(BaseModel):
    name: str = ""
    type: Union[str, "StructType"]
    tags: Tags = Tags()
    comment: str = ""

    @field_validator("comment", mode="before")
    def single_line_comment(cls, value):
        # комментарий поля всегда однострочный
        return " ".join(str(value or "").split())


class StructType(BaseModel):
    fields: List[Field] = []
    methods: List[FuncDecl] = []

    def __str__(self):
        if not self.fields:
            return "struct{}"

        rows = []
        for f in self.fields:
            type_str = render_type(f.type)
            rows.append((f.name, type_str, str(f.tags), f.comment))

        flat = [row for row in rows if "\n" not in row[1]]
        name_width = max((len(r[0]) for r in flat if r[0]), default=0)
        type_width = max((len(r[1]) for r in flat if r[2] or r[3]), default=0)
        tag_width = max((len(r[2]) for r in flat if r[3]), default=0)

        lines = []
        for name, type_str, tags, comment in rows:
            if "\n" in type_str:
                line = f"{name} {type_str}" if name else type_str
                if tags:
                    line += " " + tags
                lines.append(line)
                continue

            line = name.ljust(name_width) + " " + type_str if name else type_str
            if tags or comment:
                line = line.ljust(name_width + 1 + type_width if name else type_width)
                line += " " + tags
                if comment:
                    line = line.ljust(
                        (name_width + 1 if name else 0) + type_width + 1 + tag_width
                    )
                    line += " // " + comment
            lines.append(line.rstrip())

        return "struct {\n" + indent("\n".join(lines)) + "\n}"


Field.model_rebuild()
StructType.model_rebuild()


def render_type(go_type: Union[str, StructType]) -> str:
    return str(go_type)


class TypeDecl(BaseModel):
    name: str
    type: Union[str, StructType]
    doc: Optional[str] = None

    def __str__(self):
        parts = []
        if self.doc:
            parts.append(self.doc)
        parts.append(f"type {self.name} {render_type(self.type)}")
        code = "\n".join(parts)

        if isinstance(self.type, StructType) and self.type.methods:
            code += "\n\n" + "\n\n".join(str(m) for m in self.type.methods)
        return code


class InterfaceDecl(BaseModel):
    name: str
    methods: List[str] = []
    doc: Optional[str] = None

    def __str__(self):
        parts = []
        if self.doc:
            parts.append(self.doc)
        if self.methods:
            body = "\n".join(indent(m) for m in self.methods)
            parts.append(f"type {self.name} interface {{\n{body}\n}}")
        else:
            parts.append(f"type {self.name} interface{{}}")
        return "\n".join(parts)


class VarDecl(BaseModel):
    name: str
    value: str
    doc: Optional[str] = None

    def __str__(self):
        code = f"var {self.name} = {self.value}"
        return f"{self.doc}\n{code}" if self.doc else code


class GoFile(BaseModel):
    """Go файл: заголовок, пакет, импорты и декларации в порядке построения"""

    package_name: str
    import_path: str = ""
    header: str = ""

    imports: Dict[str, str] = {}
    declarations: List[Any] = []

    def use(self, path: str, alias: str = "") -> str:
        """Регистрация импорта пакета, возвращает имя для квалификации"""
        alias = alias or path.rsplit("/", 1)[-1]
        self.imports.setdefault(path, alias)
        return self.imports[path]

    def add(self, declaration):
        self.declarations.append(declaration)
        return declaration

    def _render_imports(self) -> str:
        specs = []
        for path in sorted(self.imports):
            alias = self.imports[path]
            if "." in path.split("/", 1)[0] or alias != path.rsplit("/", 1)[-1]:
                specs.append(f'{alias} "{path}"')
            else:
                specs.append(f'"{path}"')

        if not specs:
            return ""
        if len(specs) == 1:
            return f"import {specs[0]}"
        return "import (\n" + indent("\n".join(specs)) + "\n)"

    def __str__(self):
        package = f"package {self.package_name}"
        if self.import_path and self.import_path != ".":
            package += f' // import "{self.import_path}"'

        return (
            "\n\n".join(
                filter(
                    bool,
                    [self.header, package, self._render_imports()]
                    + [str(d) for d in self.declarations],
                )
            )
            + "\n"
        )
