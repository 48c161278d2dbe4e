from typing import Set


class TypeRegistry:
    """Реестр уже объявленных типов для одного прохода генерации"""

    def __init__(self):
        self._types: dict = {}
        self._array_types: Set[str] = set()

    def register(self, name: str) -> bool:
        """
        Регистрация имени типа.

        Returns:
            True если имя зарегистрировано впервые и тип нужно объявить,
            False если тип уже объявлен (повторная регистрация ничего не делает)
        """
        if self._types.get(name):
            return False
        self._types[name] = True
        return True

    def __contains__(self, name: str) -> bool:
        return bool(self._types.get(name))

    def __len__(self) -> int:
        return len(self._types)

    def mark_array(self, name: str):
        """Отметка что тип является срезом - на него не берется указатель"""
        self._array_types.add(name)

    def is_array(self, name: str) -> bool:
        return name in self._array_types
