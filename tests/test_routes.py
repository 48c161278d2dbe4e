"""
Тесты построения и сортировки маршрутов
"""

import logging

import pytest
from jsonapi_generator.internal.generator.routes import RouteBuilder, parse_pattern, sort_routes
from jsonapi_generator.internal.parser.openapi import SchemaLoader
from jsonapi_generator.internal.types.errors import RouteError, SchemaError
from jsonapi_generator.internal.types.schema import Operation, Parameter


def route(pattern: str, operation_id: str = "", builder: RouteBuilder = None):
    builder = builder or RouteBuilder()
    return builder.build_route("Get", Operation(method="Get", operation_id=operation_id), pattern)


class TestParsePattern:
    """Тесты разбора шаблона пути"""

    def test_plain_path(self):
        """Путь без условий запроса"""
        assert parse_pattern("/pets/{petId}") == ("/pets/{petId}", ())

    def test_query_values(self):
        """Условия запроса сортируются по ключу"""
        assert parse_pattern("/pets?sort=name&filter[kind]=cat") == (
            "/pets",
            (("filter[kind]", "cat"), ("sort", "name")),
        )

    def test_repeated_value(self):
        """Повтор того же значения допустим"""
        assert parse_pattern("/pets?a=1&a=1") == ("/pets", (("a", "1"),))

    def test_conflicting_values(self):
        """Разные значения одного параметра - ошибка"""
        with pytest.raises(RouteError):
            parse_pattern("/pets?a=1&a=2")


class TestRouteOrder:
    """Тесты порядка регистрации маршрутов"""

    def test_specific_routes_first(self):
        """Длинные пути, пути без параметров и с условиями раньше"""
        builder = RouteBuilder()
        routes = [
            route("/a/b", builder=builder),
            route("/a/b?filter[status]=valid", builder=builder),
            route("/a/b/{id}", builder=builder),
            route("/a/b/longer", builder=builder),
        ]

        assert [r.pattern for r in sort_routes(routes)] == [
            "/a/b/longer",
            "/a/b/{id}",
            "/a/b?filter[status]=valid",
            "/a/b",
        ]

    def test_stable_ties(self):
        """Равные маршруты сохраняют порядок"""
        builder = RouteBuilder()
        routes = [
            route("/b/{y}", builder=builder),
            route("/a/{x}", builder=builder),
            route("/c/{z}", builder=builder),
        ]

        assert [r.pattern for r in sort_routes(routes)] == ["/b/{y}", "/a/{x}", "/c/{z}"]

    def test_dotted_segments(self):
        """Точка тоже разделяет сегменты"""
        builder = RouteBuilder()
        routes = [route("/a/b", builder=builder), route("/a/b.json", builder=builder)]

        assert [r.pattern for r in sort_routes(routes)] == ["/a/b.json", "/a/b"]


class TestRouteNames:
    """Тесты имен маршрутов"""

    def test_derived_names(self):
        """Имена обработчика, запроса и ответа"""
        r = route("/pets/{petId}", "getPet")

        assert r.method == "GET"
        assert r.service_func == "GetPet"
        assert r.handler == "GetPetHandler"
        assert r.request_type == "GetPetRequest"
        assert r.response_type == "GetPetResponseWriter"
        assert r.response_type_impl == "getPetResponseWriter"

    def test_generated_name(self, caplog):
        """Без operationId имя строится из метода и пути"""
        with caplog.at_level(logging.WARNING):
            r = route("/beta/payments/{id}")

        assert r.service_func == "GetBetaPaymentsID"
        assert "OperationID" in caplog.text

    def test_duplicate_operation_id(self):
        """Повтор operationId - ошибка"""
        builder = RouteBuilder()
        route("/pets", "getPet", builder)

        with pytest.raises(RouteError, match="getPet"):
            route("/animals", "getPet", builder)

    def test_name_collision(self, caplog):
        """Совпавшие имена получают числовой суффикс"""
        builder = RouteBuilder()
        first = route("/pets", "getPet", builder)
        with caplog.at_level(logging.WARNING):
            second = route("/animals", "get-pet", builder)

        assert first.service_func == "GetPet"
        assert second.service_func == "GetPet2"
        assert second.handler == "GetPet2Handler"
        assert "GetPet2" in caplog.text

    def test_ruby_style_warning(self, caplog):
        """Предупреждение о параметрах вида /:id"""
        with caplog.at_level(logging.WARNING):
            route("/pets/:id", "getPet")

        assert "ruby style" in caplog.text


class TestRouteParameters:
    """Тесты параметров маршрута"""

    def test_cookie_parameters_are_skipped(self, caplog):
        """Cookie параметры пропускаются с предупреждением"""
        operation = Operation(
            method="Get",
            operation_id="getPet",
            parameters=[
                Parameter(name="petId", location="path", required=True),
                Parameter(name="session", location="cookie"),
            ],
        )
        with caplog.at_level(logging.WARNING):
            r = RouteBuilder().build_route("Get", operation, "/pets/{petId}")

        assert [p.name for p in r.parameters] == ["petId"]
        assert r.has_path_params
        assert "session" in caplog.text

    def test_unknown_location(self):
        """Неизвестное расположение параметра - ошибка"""
        operation = Operation(
            method="Get", operation_id="getPet", parameters=[Parameter(name="x", location="body")]
        )
        with pytest.raises(SchemaError):
            RouteBuilder().build_route("Get", operation, "/pets")

    def test_routes_from_document(self):
        """Маршруты документа с параметрами уровня пути"""
        document = SchemaLoader.resolve(
            {
                "openapi": "3.0.1",
                "info": {"title": "Pets", "version": "1"},
                "paths": {
                    "/pets/{petId}": {
                        "parameters": [
                            {"name": "petId", "in": "path", "required": True, "schema": {"type": "string"}}
                        ],
                        "get": {"operationId": "getPet", "responses": {}},
                        "delete": {"operationId": "deletePet", "responses": {}},
                    },
                    "/pets": {"post": {"operationId": "createPet", "responses": {}}},
                },
            }
        )
        routes = RouteBuilder().build_routes(document)

        assert [(r.method, r.service_func) for r in routes] == [
            ("POST", "CreatePet"),
            ("DELETE", "DeletePet"),
            ("GET", "GetPet"),
        ]
        assert routes[1].has_path_params
        assert not routes[0].has_path_params
