"""Иерархия ошибок генератора"""


class GeneratorError(Exception):
    """Базовая ошибка генерации - прерывает весь проход"""


class SchemaError(GeneratorError):
    """Некорректный документ, неразрешенная ссылка или битый ресурс"""


class SchemaTypeError(GeneratorError):
    """Неизвестный примитивный тип в схеме"""

    def __init__(self, type_name: str, context: str = ""):
        self.type_name = type_name
        self.context = context
        message = f"unknown type: {type_name!r}"
        if context:
            message += f" (in {context})"
        super().__init__(message)


class RouteError(GeneratorError):
    """Противоречивые данные маршрута"""


class SecurityError(GeneratorError):
    """Неподдерживаемая схема безопасности или неверное число токенов"""
