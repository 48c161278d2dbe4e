"""
Тесты построения Go идентификаторов
"""

import pytest
from jsonapi_generator.internal.utils import (
    fallback_helper_name,
    generate_name,
    go_name,
    lower_first,
    method_name,
    operation_name,
    param_name,
    sub_service_name,
)


class TestGoName:
    """Тесты go_name"""

    @pytest.mark.parametrize(
        "name,expected",
        [
            ("paymentMethodId", "PaymentMethodID"),
            ("payment-methods", "PaymentMethods"),
            ("imageUrl", "ImageURL"),
            ("id", "ID"),
            ("3ds", "X3ds"),
            ("snake_case_name", "SnakeCaseName"),
        ],
    )
    def test_go_name(self, name, expected):
        """Тест экспортируемых имен"""
        assert go_name(name) == expected

    def test_empty_name(self):
        """Пустое имя остается пустым"""
        assert go_name("") == ""


class TestMethodNames:
    """Тесты имен методов, параметров и операций"""

    def test_method_name_from_description(self):
        """Имя метода из описания ответа"""
        assert method_name("All the payment methods") == "AllThePaymentMethods"
        assert method_name("Pet not found") == "PetNotFound"

    def test_method_name_ignores_digits_and_symbols(self):
        """Учитываются только латинские буквы"""
        assert method_name("3-D Secure (v2)") == "DSecureV"

    def test_param_name(self):
        """Имя поля запроса для параметра"""
        assert param_name("filter[status]") == "ParamFilterStatus"
        assert param_name("petId") == "ParamPetID"

    def test_generate_name(self):
        """Имя операции без operationId"""
        assert generate_name("Get", "/beta/payments/{id}") == "GetBetaPaymentsID"

    def test_operation_name(self):
        """Очистка operationId"""
        assert operation_name("listPets") == "ListPets"
        assert operation_name("get-payment_methods") == "GetPaymentMethods"

    def test_derived_names(self):
        """Имена сервиса, хелпера и реализации"""
        assert sub_service_name("GetPetHandler") == "GetPetHandlerService"
        assert fallback_helper_name("GetPetHandler") == "GetPetHandlerWithFallbackHelper"
        assert lower_first("GetPet") == "getPet"
