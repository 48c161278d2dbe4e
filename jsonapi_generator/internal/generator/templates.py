from ..types.models import GoFile

PKG_CONTEXT = "context"
PKG_STD_ERRORS = "errors"
PKG_HTTP = "net/http"
PKG_JSON = "encoding/json"
PKG_REFLECT = "reflect"
PKG_TIME = "time"

PKG_MUX = "github.com/gorilla/mux"
PKG_OPENTRACING = "github.com/opentracing/opentracing-go"
PKG_JSONAPI = "github.com/pace/bricks/http/jsonapi"
PKG_RUNTIME = "github.com/pace/bricks/http/jsonapi/runtime"
PKG_METRICS = "github.com/pace/bricks/maintenance/metric/jsonapi"
PKG_ERRORS = "github.com/pace/bricks/maintenance/errors"
PKG_OAUTH2 = "github.com/pace/bricks/http/oauth2"
PKG_APIKEY = "github.com/pace/bricks/http/security/apikey"
PKG_DECIMAL = "github.com/shopspring/decimal"

# Пакеты, чье имя не совпадает с последним сегментом пути
# или конфликтует с другим импортом
ALIASES = {
    PKG_STD_ERRORS: "stderrors",
    PKG_OPENTRACING: "opentracing",
    PKG_METRICS: "metrics",
}

JSONAPI_CONTENT = "application/vnd.api+json"

SERVICE_INTERFACE = "Service"
AUTH_BACKEND_INTERFACE = "AuthorizationBackend"
AUTH_FUNC_PREFIX = "Authorize"
CAN_AUTH_FUNC_PREFIX = "CanAuthorize"
INIT_FUNC_PREFIX = "Init"
ROOT_ROUTER = "router"

# Ответы, которые обрабатываются на уровне фреймворка, а не пользователем
RESPONSE_BLACKLIST = frozenset(
    {
        "401",  # нет bearer токена
        "406",  # неприемлемый Accept
        "415",  # неверный media type
        "422",  # ошибки валидации
        "500",  # сервис вернул ошибку
    }
)


def use(source: GoFile, path: str) -> str:
    """Импорт пакета в файл с учетом алиасов"""
    return source.use(path, ALIASES.get(path, ""))


class Templates:
    """Фиксированные фрагменты Go кода"""

    header = "// Code generated by jsonapi-generator. DO NOT EDIT."

    response_writer_doc = (
        "is a standard http.ResponseWriter extended with methods\n"
        "to generate the respective responses easily"
    )

    request_doc = "is a standard http.Request extended with the\nun-marshaled content object"

    handler_doc = "handles request/response marshaling and validation for\n {method} {pattern}"

    legacy_service_doc = ["Legacy Interface.", "Use this if you want to fully implement a service."]

    helper_doc = (
        "{helper} helper that checks if the given service fulfills the interface. "
        "Returns fallback handler if not, otherwise returns matching handler."
    )

    error_doc = "responds with jsonapi error (HTTP code {code})"
    marshal_doc = "responds with jsonapi marshaled data (HTTP code {code})"
    empty_doc = "responds with empty response (HTTP code {code})"

    meta_doc = "JSONAPIMeta implements the meta data API for json:api"

    authorization_error = [
        '{http}.Error(w, "Authorization Error", {http}.StatusUnauthorized)',
        "return",
    ]


templates = Templates()
