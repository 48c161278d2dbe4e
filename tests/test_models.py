"""
Тесты модели Go кода и реестра типов
"""

from jsonapi_generator.internal.types.models import (
    Field,
    FuncDecl,
    GoFile,
    InterfaceDecl,
    StructType,
    Tags,
    TypeDecl,
    go_comment,
    go_composite,
    go_doc,
)
from jsonapi_generator.internal.types.registry import TypeRegistry


class TestTypeRegistry:
    """Тесты реестра типов"""

    def test_register_once(self):
        """Имя регистрируется только один раз"""
        registry = TypeRegistry()

        assert registry.register("Pet") is True
        assert registry.register("Pet") is False
        assert "Pet" in registry
        assert len(registry) == 1

    def test_repeated_registration_count(self):
        """Повторная регистрация не увеличивает реестр"""
        registry = TypeRegistry()
        for name in ["Pet", "Owner", "Pet", "Food"]:
            registry.register(name)

        assert len(registry) == 3
        assert "Food" in registry

    def test_array_types(self):
        """Отметка типов-срезов"""
        registry = TypeRegistry()
        registry.register("Pets")
        registry.mark_array("Pets")

        assert registry.is_array("Pets")
        assert not registry.is_array("Pet")


class TestTags:
    """Тесты тегов полей"""

    def test_sorted_rendering(self):
        """Теги выводятся по алфавиту ключей"""
        tags = Tags(values={"valid": "required", "json": "name,omitempty"})
        assert str(tags) == '`json:"name,omitempty" valid:"required"`'

    def test_validators(self):
        """Валидаторы дописываются через запятую"""
        tags = Tags()
        tags.add_validator("optional")
        tags.add_validator("uuid")

        assert tags["valid"] == "optional,uuid"
        assert tags.has_validator("optional")
        assert not tags.has_validator("required")

    def test_remove_omitempty(self):
        """omitempty удаляется из json и jsonapi"""
        tags = Tags(values={"json": "age,omitempty", "jsonapi": "attr,age,omitempty"})
        tags.remove_omitempty()

        assert tags["json"] == "age"
        assert tags["jsonapi"] == "attr,age"

    def test_backslashes_are_escaped(self):
        """Обратные слэши экранируются для strconv.Unquote"""
        tags = Tags(values={"valid": "matches(^\\d+$)"})
        assert str(tags) == '`valid:"matches(^\\\\d+$)"`'

    def test_empty_tags(self):
        """Пустые теги не выводятся"""
        assert str(Tags()) == ""
        assert not Tags()


class TestDeclarations:
    """Тесты рендеринга деклараций"""

    def test_comments(self):
        """Однострочные и многострочные комментарии"""
        assert go_comment("Pet") == "// Pet"
        assert go_comment("a\nb") == "/*\na\nb\n*/"
        assert go_doc("Pet") == "// Pet ..."
        assert go_doc("Pet", "is an animal") == "// Pet is an animal"

    def test_struct_alignment(self):
        """Поля структуры выравниваются по колонкам"""
        struct = StructType(
            fields=[
                Field(name="ID", type="string", tags=Tags(values={"jsonapi": "primary,pet"})),
                Field(
                    name="Name",
                    type="*string",
                    tags=Tags(values={"valid": "required"}),
                    comment="Pet\nname",
                ),
            ]
        )

        assert str(struct) == (
            "struct {\n"
            '\tID   string  `jsonapi:"primary,pet"`\n'
            '\tName *string `valid:"required"` // Pet name\n'
            "}"
        )

    def test_empty_struct(self):
        """Структура без полей"""
        assert str(StructType()) == "struct{}"

    def test_type_with_methods(self):
        """Методы выводятся после типа"""
        decl = TypeDecl(
            name="impl",
            type=StructType(
                fields=[Field(type="http.ResponseWriter")],
                methods=[FuncDecl(signature="(w *impl) OK()", body=["w.WriteHeader(200)"])],
            ),
        )

        assert str(decl) == (
            "type impl struct {\n"
            "\thttp.ResponseWriter\n"
            "}\n"
            "\n"
            "func (w *impl) OK() {\n"
            "\tw.WriteHeader(200)\n"
            "}"
        )

    def test_interface(self):
        """Интерфейс с методами и пустой интерфейс"""
        assert str(InterfaceDecl(name="Empty")) == "type Empty interface{}"
        assert str(InterfaceDecl(name="S", methods=["Run() error"], doc="// S ...")) == (
            "// S ...\ntype S interface {\n\tRun() error\n}"
        )

    def test_composite_alignment(self):
        """Значения однострочных элементов выравниваются"""
        literal = go_composite("apikey.Config", [("Description", '"Key"'), ("In", '"header"')])
        assert literal == 'apikey.Config{\n\tDescription: "Key",\n\tIn:          "header",\n}'
        assert go_composite("map[string]string", []) == "map[string]string{}"


class TestGoFile:
    """Тесты Go файла"""

    def test_imports_and_package(self):
        """Импорты сортируются, алиасы только для внешних пакетов"""
        source = GoFile(package_name="api", import_path="example.com/api")
        assert source.use("net/http") == "http"
        assert source.use("github.com/opentracing/opentracing-go", "opentracing") == "opentracing"

        assert str(source) == (
            'package api // import "example.com/api"\n'
            "\n"
            "import (\n"
            '\topentracing "github.com/opentracing/opentracing-go"\n'
            '\t"net/http"\n'
            ")\n"
        )

    def test_single_import_without_import_path(self):
        """Один импорт и пакет без import path"""
        source = GoFile(package_name="api", import_path=".")
        source.use("time")
        source.add(TypeDecl(name="Stamp", type="*time.Time"))

        assert str(source) == 'package api\n\nimport "time"\n\ntype Stamp *time.Time\n'

    def test_use_is_idempotent(self):
        """Повторный импорт не меняет алиас"""
        source = GoFile(package_name="api")
        source.use("github.com/gorilla/mux")
        source.use("github.com/gorilla/mux", "other")

        assert source.imports == {"github.com/gorilla/mux": "mux"}
