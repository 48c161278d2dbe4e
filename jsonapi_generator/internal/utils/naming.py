"""Утилиты для построения Go идентификаторов из имен OpenAPI"""

import re

_WORDS = re.compile(r"[A-Za-z0-9]+")
_NON_ASCII_LETTERS = re.compile(r"[^a-zA-Z]+")
_ID_SUFFIX = re.compile(r"Id$")


def title(name: str) -> str:
    """Первая буква в верхнем регистре, остальное без изменений"""
    return name[:1].upper() + name[1:]


def lower_first(name: str) -> str:
    return name[:1].lower() + name[1:]


def go_name(name: str) -> str:
    """
    Экспортируемое Go имя.

    Каждое слово начинается с заглавной буквы, разделители удаляются,
    Url превращается в URL, окончание Id - в ID.

    Examples:
        >>> go_name("paymentMethodId")
        'PaymentMethodID'
        >>> go_name("payment-methods")
        'PaymentMethods'
        >>> go_name("imageUrl")
        'ImageURL'
    """
    name = "".join(title(word) for word in _WORDS.findall(name))
    name = name.replace("Url", "URL")
    name = _ID_SUFFIX.sub("ID", name)
    if name[:1].isdigit():
        name = "X" + name
    return name


def method_name(description: str) -> str:
    """
    Имя метода из произвольного текста (описания ответа, имени параметра).

    Учитываются только латинские буквы:
        >>> method_name("All the payment methods")
        'AllThePaymentMethods'
    """
    parts = [go_name(part) for part in _NON_ASCII_LETTERS.split(description)]
    return go_name("".join(parts))


def param_name(name: str) -> str:
    """Имя поля запроса для параметра: filter[status] -> ParamFilterStatus"""
    return "Param" + method_name(name)


def generate_name(method: str, pattern: str) -> str:
    """Имя операции из HTTP метода и пути, если operationId не задан"""
    name = method
    for part in _NON_ASCII_LETTERS.sub("/", pattern).split("/"):
        name += go_name(part)
    return go_name(name)


def operation_name(operation_id: str) -> str:
    """Очистка operationId до Go идентификатора"""
    operation_id = title(operation_id)
    return "".join(title(word) for word in _WORDS.findall(operation_id))


def sub_service_name(handler: str) -> str:
    return f"{handler}Service"


def fallback_helper_name(handler: str) -> str:
    return f"{handler}WithFallbackHelper"
