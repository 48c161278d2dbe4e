"""
Генерация обработчиков запросов на базе gorilla/mux.

Для каждого маршрута создаются: функция-обработчик, интерфейс
ResponseWriter с реализацией, структура запроса и интерфейс сервиса.
Завершают файл хелперы с fallback и функции построения роутера.
"""

import logging
from http import HTTPStatus
from typing import List, Optional, Set
from urllib.parse import urlsplit

from ..types.errors import SchemaError
from ..types.models import (
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
    go_string,
    indent,
)
from ..types.schema import Document, Response, SchemaKind, SchemaNode
from ..utils import fallback_helper_name, method_name, param_name, sub_service_name, title
from .routes import Route, sort_routes
from .security import SecurityEmitter
from .templates import (
    AUTH_BACKEND_INTERFACE,
    JSONAPI_CONTENT,
    PKG_CONTEXT,
    PKG_ERRORS,
    PKG_HTTP,
    PKG_METRICS,
    PKG_MUX,
    PKG_OPENTRACING,
    PKG_REFLECT,
    PKG_RUNTIME,
    PKG_STD_ERRORS,
    RESPONSE_BLACKLIST,
    ROOT_ROUTER,
    SERVICE_INTERFACE,
    templates,
    use,
)
from .types import TypeBuilder, type_name_of

logger = logging.getLogger(__name__)


def status_phrase(code: int) -> str:
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return f"Status {code}"


def response_method_name(response: Response, code: int) -> str:
    """Имя метода ответа: из $ref, из описания или из статуса HTTP"""
    if response.ref:
        name = method_name(response.ref_name)
    else:
        name = method_name(response.description)
    return name or method_name(status_phrase(code))


def many_resources(node: SchemaNode) -> Optional[SchemaNode]:
    """Элемент ссылки data, если тело - массив ресурсов"""
    data = node.prop("data") if node.kind is SchemaKind.OBJECT else None
    if data is None or data.kind is not SchemaKind.ARRAY:
        return None
    items = data.items
    if items is None or not items.is_ref:
        return None
    return items


class HandlerEmitter:
    """
    Обработчики, сервисы и роутеры для списка маршрутов.

    Args:
        source: Go файл
        types: генератор типов (типы тел запросов и ответов)
        security: генератор авторизации
        document: OpenAPI документ
        service_name: имя сервиса для метрик
    """

    def __init__(
        self,
        source: GoFile,
        types: TypeBuilder,
        security: SecurityEmitter,
        document: Document,
        service_name: str,
    ):
        self.source = source
        self.types = types
        self.security = security
        self.document = document
        self.service_name = service_name

        self.needs_security = document.has_security
        self.schemes = document.security_schemes if self.needs_security else {}

    def build(self, routes: List[Route]):
        for route in routes:
            self.build_handler(route)

        for route in routes:
            self.build_response_interface(route)
            self.build_request_struct(route)

        self.build_service_interface(routes)

        ordered = sort_routes(routes)
        self.build_router_helpers(ordered)
        self.build_router("Router", ordered, fallback=f"{ROOT_ROUTER}.NotFoundHandler")
        self.build_router("RouterWithFallback", ordered, fallback="fallback")

    def build_handler(self, route: Route) -> FuncDecl:
        """Функция-обработчик: авторизация, трассировка, разбор параметров и тела"""
        http = use(self.source, PKG_HTTP)
        errors = use(self.source, PKG_ERRORS)
        opentracing = use(self.source, PKG_OPENTRACING)
        metrics = use(self.source, PKG_METRICS)

        lines = [f'defer {errors}.HandleRequest("{route.handler}", w, r)']

        if self.needs_security:
            auth = self.security.build_authorization(route.operation, self.schemes)
            if auth:
                lines.append("")
                lines.extend(auth)

        lines += [
            "",
            "// Trace the service function handler execution",
            f'handlerSpan, ctx := {opentracing}.StartSpanFromContext(r.Context(), "{route.handler}")',
            "defer handlerSpan.Finish()",
            "",
            "// Setup context, response writer and request type",
            f"writer := {route.response_type_impl}{{",
            f"\tResponseWriter: {metrics}.NewMetric("
            f"{go_string(self.service_name)}, {go_string(route.pattern)}, w, r),",
            "}",
            f"request := {route.request_type}{{",
            "\tRequest: r.WithContext(ctx),",
            "}",
        ]

        lines.extend(self._scan_parameters(route))

        content = self._request_content(route)
        if content is not None or route.parameters:
            runtime = use(self.source, PKG_RUNTIME)
            lines += [
                f"if !{runtime}.ValidateParameters(w, r, &request) {{",
                "\treturn // invalid request stop further processing",
                "}",
            ]

        invoke = self._invoke(route)

        if content is not None:
            lines.append("")
            lines.extend(self._unmarshal(content, invoke))
        else:
            lines.append("")
            lines.extend(invoke)

        params = f"service {sub_service_name(route.handler)}"
        if self.needs_security:
            params += f", authBackend {AUTH_BACKEND_INTERFACE}"

        body = (
            [f"return {http}.HandlerFunc(func(w {http}.ResponseWriter, r *{http}.Request) {{"]
            + [indent(line) for line in lines]
            + ["})"]
        )

        return self.source.add(
            FuncDecl(
                doc=go_comment(
                    f"{route.handler} "
                    + templates.handler_doc.format(
                        method=route.operation.method, pattern=route.pattern
                    )
                ),
                signature=f"{route.handler}({params}) {http}.Handler",
                body=body,
            )
        )

    def _invoke(self, route: Route) -> List[str]:
        """
        Вызов сервиса.

        Если контекст запроса отменен, клиенту уходит 499, а ошибка сервиса
        сообщается только когда это не ошибка самого контекста.
        """
        context = use(self.source, PKG_CONTEXT)
        errors = use(self.source, PKG_ERRORS)
        stderrors = use(self.source, PKG_STD_ERRORS)

        canceled = (
            f"{stderrors}.Is(err, {context}.Canceled) || "
            f"{stderrors}.Is(err, {context}.DeadlineExceeded)"
        )
        return [
            "// Invoke service that implements the business logic",
            f"err := service.{route.service_func}(ctx, &writer, &request)",
            "select {",
            "case <-ctx.Done():",
            "\tif ctx.Err() != nil {",
            "\t\t// Context cancellation should not be reported if it's the request context",
            "\t\tw.WriteHeader(499)",
            f"\t\tif err != nil && !({canceled}) {{",
            "\t\t\t// Report unclean error handling (err != context err) to sentry",
            f"\t\t\t{errors}.Handle(ctx, err)",
            "\t\t}",
            "\t}",
            "default:",
            "\tif err != nil {",
            f'\t\t{errors}.HandleError(err, "{route.handler}", w, r)',
            "\t}",
            "}",
        ]

    def _scan_parameters(self, route: Route) -> List[str]:
        if not route.parameters:
            return []

        runtime = use(self.source, PKG_RUNTIME)
        lines = ["", "// Scan and validate incoming request parameters"]

        if route.has_path_params:
            lines.append(f"vars := {use(self.source, PKG_MUX)}.Vars(r)")

        args = ["w", "r"]
        for param in route.parameters:
            entries = [
                ("Data", f"&request.{param_name(param.name)}"),
                ("Location", f"{runtime}.ScanIn{title(param.location)}"),
            ]
            if param.location == "path":
                entries.append(("Input", f"vars[{go_string(param.name)}]"))
            entries.append(("Name", go_string(param.name)))
            args.append("&" + go_composite(f"{runtime}.ScanParameter", entries))

        lines += [f"if !{runtime}.ScanParameters({', '.join(args)}) {{", "\treturn", "}"]
        return lines

    def _unmarshal(self, content: SchemaNode, invoke: List[str]) -> List[str]:
        runtime = use(self.source, PKG_RUNTIME)
        lines = ["// Unmarshal the service request body"]

        items = many_resources(content)
        if items is None:
            lines.append(f"if {runtime}.Unmarshal(w, r, &request.Content) {{")
            lines.extend(indent(line) for line in invoke)
            lines.append("}")
            return lines

        type_name = type_name_of(items)
        reflect = use(self.source, PKG_REFLECT)
        lines += [
            f"ok, data := {runtime}.UnmarshalMany(w, r, {reflect}.TypeOf(new({type_name})))",
            "if ok {",
            "\t// Move the data",
            "\tfor _, elem := range data {",
            f"\t\trequest.Content = append(request.Content, elem.(*{type_name}))",
            "\t}",
        ]
        lines.extend(indent(line) for line in invoke)
        lines.append("}")
        return lines

    @staticmethod
    def _request_content(route: Route) -> Optional[SchemaNode]:
        body = route.operation.request_body
        if body is None:
            return None
        return body.content.get(JSONAPI_CONTENT)

    def build_response_interface(self, route: Route) -> InterfaceDecl:
        """Интерфейс <Op>ResponseWriter и его реализация"""
        http = use(self.source, PKG_HTTP)

        methods = [f"{http}.ResponseWriter"]
        implementations: List[FuncDecl] = []
        used: Set[str] = set()

        for code, response in route.operation.responses.items():
            # эти ответы формирует фреймворк
            if code in RESPONSE_BLACKLIST:
                continue

            try:
                code_num = int(code)
            except ValueError as err:
                raise SchemaError(
                    f"failed to parse response code {code!r} of {route.method} {route.pattern}"
                ) from err

            name = self._unique_method(response_method_name(response, code_num), code_num, used)
            receiver = f"(w *{route.response_type_impl}) {name}"
            media = response.content.get(JSONAPI_CONTENT)

            if code_num >= 400:
                methods.append(f"{name}(error)")
                implementations.append(
                    FuncDecl(
                        doc=go_comment(f"{name} " + templates.error_doc.format(code=code_num)),
                        signature=f"{receiver}(err error)",
                        body=[f"{use(self.source, PKG_RUNTIME)}.WriteError(w, {code_num}, err)"],
                    )
                )
            elif media is not None:
                reference = self.types.build_type_reference(route.service_func + name, media, False)
                methods.append(f"{name}({reference})")
                implementations.append(
                    FuncDecl(
                        doc=go_comment(f"{name} " + templates.marshal_doc.format(code=code_num)),
                        signature=f"{receiver}(data {reference})",
                        body=[f"{use(self.source, PKG_RUNTIME)}.Marshal(w, data, {code_num})"],
                    )
                )
            else:
                # учитывается только первый тип содержимого
                mime = next(iter(response.content), JSONAPI_CONTENT)
                methods.append(f"{name}()")
                implementations.append(
                    FuncDecl(
                        doc=go_comment(f"{name} " + templates.empty_doc.format(code=code_num)),
                        signature=f"{receiver}()",
                        body=[
                            f'w.Header().Set("Content-Type", {go_string(mime)})',
                            f"w.WriteHeader({code_num})",
                        ],
                    )
                )

        interface = self.source.add(
            InterfaceDecl(
                name=route.response_type,
                methods=methods,
                doc=go_doc(route.response_type, templates.response_writer_doc),
            )
        )
        self.source.add(
            TypeDecl(
                name=route.response_type_impl,
                type=StructType(
                    fields=[Field(type=f"{http}.ResponseWriter")],
                    methods=implementations,
                ),
            )
        )
        return interface

    @staticmethod
    def _unique_method(name: str, code: int, used: Set[str]) -> str:
        if name in used:
            logger.warning(f"Response method {name!r} is used twice, renamed to {name}{code}")
            name = f"{name}{code}"
        while name in used:
            name += "X"
        used.add(name)
        return name

    def build_request_struct(self, route: Route) -> TypeDecl:
        """Структура <Op>Request: http запрос, тело и параметры"""
        http = use(self.source, PKG_HTTP)
        fields = [Field(name="Request", type=f"*{http}.Request", tags=Tags(values={"valid": "-"}))]

        content = self._request_content(route)
        if content is not None:
            reference = self.types.build_type_reference(route.service_func + "Content", content, True)
            # тело проверяется отдельно, после разбора параметров
            fields.append(Field(name="Content", type=reference, tags=Tags(values={"valid": "-"})))

        for param in route.parameters:
            tags = Tags()
            tags.add_validator("required" if param.required else "optional")
            name = param_name(param.name)
            go_type = self.types.build_param_type(param, tags, context=f"{route.request_type}.{name}")
            fields.append(Field(name=name, type=go_type, tags=tags, comment=param.description))

        body = route.operation.request_body
        description = body.description if body is not None else templates.request_doc
        return self.source.add(
            TypeDecl(
                name=route.request_type,
                type=StructType(fields=fields),
                doc=go_doc(route.request_type, description),
            )
        )

    def build_service_interface(self, routes: List[Route]) -> InterfaceDecl:
        # context импортируется только при наличии маршрутов
        context = use(self.source, PKG_CONTEXT) if routes else ""

        for route in routes:
            operation = route.operation
            comment = f"{route.service_func} {operation.summary}".rstrip()
            if operation.description:
                comment += f"\n\n{operation.description}"

            self.source.add(
                InterfaceDecl(
                    name=sub_service_name(route.handler),
                    methods=[
                        go_comment(comment),
                        f"{route.service_func}({context}.Context, {route.response_type}, "
                        f"*{route.request_type}) error",
                    ],
                    doc=go_comment(f"{SERVICE_INTERFACE} interface for {route.handler} handler"),
                )
            )

        return self.source.add(
            InterfaceDecl(
                name=SERVICE_INTERFACE,
                methods=[sub_service_name(route.handler) for route in routes],
                doc="\n".join(go_comment(line) for line in templates.legacy_service_doc),
            )
        )

    def build_router_helpers(self, routes: List[Route]) -> List[FuncDecl]:
        """Хелперы, выбирающие обработчик или fallback по реализации сервиса"""
        http = use(self.source, PKG_HTTP)

        params = f"service interface{{}}, fallback {http}.Handler"
        call = "service"
        if self.needs_security:
            params += f", authBackend {AUTH_BACKEND_INTERFACE}"
            call += ", authBackend"

        helpers = []
        for route in routes:
            helper = fallback_helper_name(route.handler)
            helpers.append(
                self.source.add(
                    FuncDecl(
                        doc=go_comment(templates.helper_doc.format(helper=helper)),
                        signature=f"{helper}({params}) {http}.Handler",
                        body=[
                            f"if service, ok := service.({sub_service_name(route.handler)}); ok {{",
                            f"\treturn {route.handler}({call})",
                            "} else {",
                            "\treturn fallback",
                            "}",
                        ],
                    )
                )
            )
        return helpers

    def server_paths(self) -> List[str]:
        """Уникальные пути серверов, пустая строка - корневой роутер"""
        paths = []
        for url in self.document.servers:
            path = urlsplit(url).path.rstrip("/")
            if path not in paths:
                paths.append(path)
        return paths or [""]

    def build_router(self, name: str, routes: List[Route], fallback: str) -> FuncDecl:
        http = use(self.source, PKG_HTTP)
        mux = use(self.source, PKG_MUX)

        params = "service interface{}"
        call = f"service, {fallback}"
        if self.needs_security:
            params += f", authBackend {AUTH_BACKEND_INTERFACE}"
            call += ", authBackend"
        if fallback == "fallback":
            params += f", fallback {http}.Handler"

        body = [f"{ROOT_ROUTER} := {mux}.NewRouter()"]
        body.extend(self.security.build_init_calls(self.schemes))

        subrouters = 0
        for path in self.server_paths():
            # хост, схема и порт не ограничиваются
            if path:
                subrouters += 1
                target = f"s{subrouters}"
                body.append(f"// Subrouter {target} - Path: {path}")
                body.append(f"{target} := {ROOT_ROUTER}.PathPrefix({go_string(path)}).Subrouter()")
            else:
                target = ROOT_ROUTER

            for route in routes:
                stmt = f"{target}.Methods({go_string(route.method)}).Path({go_string(route.path)})"
                for key, value in route.query_values:
                    stmt += f".Queries({go_string(key)}, {go_string(value)})"
                stmt += f".Name({go_string(route.service_func)})"
                stmt += f".Handler({fallback_helper_name(route.handler)}({call}))"
                body.append(stmt)

        body.append(f"return {ROOT_ROUTER}")

        doc = f"{name} implements: {self.document.title}"
        if self.document.description:
            doc += f"\n\n{self.document.description}"

        return self.source.add(
            FuncDecl(
                doc=go_comment(doc),
                signature=f"{name}({params}) *{mux}.Router",
                body=body,
            )
        )
