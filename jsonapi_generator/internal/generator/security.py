"""
Генерация кода авторизации.

Для каждой схемы из components.securitySchemes создается конфигурация
cfg<Name> и методы интерфейса AuthorizationBackend, для каждой операции -
проверка токена перед вызовом сервиса.
"""

import logging
from typing import Dict, List, Optional

from ..types.errors import SecurityError
from ..types.models import (
    GoFile,
    InterfaceDecl,
    VarDecl,
    go_comment,
    go_composite,
    go_string,
    indent,
)
from ..types.schema import OAUTH_FLOWS, Document, OAuthFlow, Operation, SecurityScheme
from ..utils import go_name
from .templates import (
    AUTH_BACKEND_INTERFACE,
    AUTH_FUNC_PREFIX,
    CAN_AUTH_FUNC_PREFIX,
    INIT_FUNC_PREFIX,
    PKG_APIKEY,
    PKG_CONTEXT,
    PKG_HTTP,
    PKG_OAUTH2,
    templates,
    use,
)

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = {"oauth2": PKG_OAUTH2, "apiKey": PKG_APIKEY}


def scheme_name(name: str) -> str:
    return go_name(name)


def config_name(name: str) -> str:
    return "cfg" + scheme_name(name)


def scheme_package(scheme: SecurityScheme) -> str:
    if scheme.type not in SUPPORTED_SCHEMES:
        raise SecurityError(f"security schema type not supported: {scheme.type!r}")
    return SUPPORTED_SCHEMES[scheme.type]


def uses_multiple_schemes(document: Document) -> bool:
    """Есть ли операция, требующая выбор из нескольких схем"""
    for path_item in document.path_items():
        for operation in path_item.operations:
            if operation.security and len(operation.security[0]) > 1:
                return True
    return False


class SecurityEmitter:
    """
    Построение деклараций авторизации.

    Args:
        source: Go файл, в который добавляются декларации
        optional_auth: пропускать авторизацию, если authBackend равен nil
    """

    def __init__(self, source: GoFile, optional_auth: bool = True):
        self.source = source
        self.optional_auth = optional_auth

    def build_security_config(self, schemes: Dict[str, SecurityScheme]) -> List[VarDecl]:
        declarations = []
        for name, scheme in schemes.items():
            pkg = use(self.source, scheme_package(scheme))
            entries = [("Description", go_string(scheme.description))]

            if scheme.type == "oauth2":
                for flow_name, flow in scheme.flows.items():
                    entries.append((OAUTH_FLOWS[flow_name], "&" + self._flow(pkg, flow)))
            else:
                entries.append(("In", go_string(scheme.location)))
                entries.append(("Name", go_string(scheme.param_name)))

            entries.sort()
            declaration = VarDecl(
                name=config_name(name),
                value="&" + go_composite(f"{pkg}.Config", entries),
            )
            declarations.append(self.source.add(declaration))
        return declarations

    @staticmethod
    def _flow(pkg: str, flow: OAuthFlow) -> str:
        scopes = [(go_string(scope), go_string(text)) for scope, text in flow.scopes.items()]
        return go_composite(
            f"{pkg}.Flow",
            [
                ("AuthorizationURL", go_string(flow.authorization_url)),
                ("RefreshURL", go_string(flow.refresh_url)),
                ("Scopes", go_composite("map[string]string", scopes)),
                ("TokenURL", go_string(flow.token_url)),
            ],
        )

    def build_backend_interface(self, document: Document) -> Optional[InterfaceDecl]:
        """Интерфейс AuthorizationBackend: Authorize, Init и CanAuthorize по схемам"""
        schemes = document.security_schemes
        if not schemes:
            return None

        http = use(self.source, PKG_HTTP)
        context = use(self.source, PKG_CONTEXT)
        can_authorize = uses_multiple_schemes(document)

        methods = []
        for name, scheme in schemes.items():
            pkg = use(self.source, scheme_package(scheme))
            title = scheme_name(name)

            scope = ", scope string" if scheme.type == "oauth2" else ""
            methods.append(
                f"{AUTH_FUNC_PREFIX}{title}(r *{http}.Request, w {http}.ResponseWriter{scope}) "
                f"({context}.Context, bool)"
            )
            methods.append(f"{INIT_FUNC_PREFIX}{title}({config_name(name)} *{pkg}.Config)")
            if can_authorize:
                methods.append(f"{CAN_AUTH_FUNC_PREFIX}{title}(r *{http}.Request) bool")

        return self.source.add(
            InterfaceDecl(
                name=AUTH_BACKEND_INTERFACE,
                methods=methods,
                doc=go_comment(
                    f"{AUTH_BACKEND_INTERFACE} authorizes requests for the declared security schemes"
                ),
            )
        )

    def build_authorization(
        self, operation: Operation, schemes: Dict[str, SecurityScheme]
    ) -> Optional[List[str]]:
        """
        Строки проверки авторизации для обработчика операции.

        Returns:
            None, если операция не требует авторизации
        """
        if not schemes or not operation.security or not operation.security[0]:
            return None

        if len(operation.security) > 1:
            logger.warning(
                f"Only the first security requirement of {operation.operation_id or operation.method} "
                f"is generated, alternatives are ignored"
            )

        requirement = operation.security[0]
        for name in requirement:
            if name not in schemes:
                raise SecurityError(f"unknown security scheme {name!r}")

        if len(requirement) > 1:
            lines = self._authorize_any(requirement, schemes)
        else:
            lines = self._authorize_one(requirement, schemes)
        lines.append("r = r.WithContext(ctx)")

        return self._guard(lines)

    def build_init_calls(self, schemes: Dict[str, SecurityScheme]) -> List[str]:
        """Передача конфигураций схем в authBackend при создании роутера"""
        calls = [
            f"authBackend.{INIT_FUNC_PREFIX}{scheme_name(name)}({config_name(name)})"
            for name in schemes
        ]
        if not calls:
            return []
        return self._guard(calls)

    def _guard(self, lines: List[str]) -> List[str]:
        if not self.optional_auth:
            return lines
        return ["if authBackend != nil {"] + [indent(line) for line in lines] + ["}"]

    def _authorize_one(
        self, requirement: Dict[str, List[str]], schemes: Dict[str, SecurityScheme]
    ) -> List[str]:
        name, scopes = next(iter(requirement.items()))
        return [self._call(name, schemes[name], scopes, ":="), "if !ok {", "\treturn", "}"]

    def _authorize_any(
        self, requirement: Dict[str, List[str]], schemes: Dict[str, SecurityScheme]
    ) -> List[str]:
        http = use(self.source, PKG_HTTP)
        context = use(self.source, PKG_CONTEXT)

        lines = [f"var ctx {context}.Context", "var ok bool"]
        for i, name in enumerate(sorted(requirement)):
            check = f"authBackend.{CAN_AUTH_FUNC_PREFIX}{scheme_name(name)}(r)"
            lines.append(f"if {check} {{" if i == 0 else f"}} else if {check} {{")
            lines.extend(
                indent(line)
                for line in [
                    self._call(name, schemes[name], requirement[name], "="),
                    "if !ok {",
                    "\treturn",
                    "}",
                ]
            )

        lines.append("} else {")
        lines.extend(indent(line.format(http=http)) for line in templates.authorization_error)
        lines.append("}")
        return lines

    @staticmethod
    def _call(name: str, scheme: SecurityScheme, scopes: List[str], assign: str) -> str:
        method = f"authBackend.{AUTH_FUNC_PREFIX}{scheme_name(name)}"

        if scheme.type == "oauth2":
            if len(scopes) != 1:
                raise SecurityError(
                    f"security config for oauth2 authorization needs 1 value but had: {len(scopes)}"
                )
            return f"ctx, ok {assign} {method}(r, w, {go_string(scopes[0])})"

        if scheme.type == "apiKey":
            if scopes:
                raise SecurityError(
                    f"security config for api key authorization needs 0 values but had: {len(scopes)}"
                )
            return f"ctx, ok {assign} {method}(r, w)"

        raise SecurityError(f"security scheme of type {scheme.type!r} is not supported")
