"""
Тесты для системы конфигурации
"""

import os
import tempfile

from jsonapi_generator.config import GeneratorConfig


class MockArgs:
    def __init__(self, **kwargs):
        self.source = None
        self.output = None
        self.package = None
        self.path = None
        self.strict_auth = False
        self.__dict__.update(kwargs)


class TestGeneratorConfig:
    """Тесты конфигурации генератора"""

    def test_config_creation(self):
        """Тест создания конфигурации"""
        config = GeneratorConfig(source="openapi.yaml", output="api/api.go", package="pets")

        assert config.source == "openapi.yaml"
        assert config.output == "api/api.go"
        assert config.package == "pets"

    def test_config_save_and_load(self):
        """Тест сохранения и загрузки конфигурации"""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = os.path.join(temp_dir, "jsonapi.toml")

            original_config = GeneratorConfig(
                source="https://api.example.com/openapi.json",
                output="pets.go",
                package="pets",
                path="example.com/pets",
                optional_auth=False,
            )
            original_config.save_to_file(config_path)

            loaded_config = GeneratorConfig.from_file(config_path)

            assert loaded_config == original_config

    def test_config_search_dir(self):
        """Тест поиска конфига в директории"""
        with tempfile.TemporaryDirectory() as temp_dir:
            GeneratorConfig(source="openapi.yaml").save_to_file(os.path.join(temp_dir, "jsonapi.toml"))

            loaded_config = GeneratorConfig.from_file(search_dir=temp_dir)

            assert loaded_config is not None
            assert loaded_config.source == "openapi.yaml"
            assert loaded_config.output is None

    def test_config_file_not_exists(self):
        """Тест загрузки несуществующего конфига"""
        assert GeneratorConfig.from_file("nonexistent.toml") is None

    def test_broken_config_file(self):
        """Тест загрузки поврежденного конфига"""
        with tempfile.TemporaryDirectory() as temp_dir:
            config_path = os.path.join(temp_dir, "jsonapi.toml")
            with open(config_path, "w") as f:
                f.write("this is not toml\n")

            assert GeneratorConfig.from_file(config_path) is None

    def test_config_merge_with_args(self):
        """Тест объединения конфига с аргументами"""
        config = GeneratorConfig(source="openapi.yaml", output="api.go", path="example.com/api")

        merged = config.merge_with_args(MockArgs(source="other.yaml", path=""))

        assert merged.source == "other.yaml"  # Переписан из args
        assert merged.output == "api.go"  # Остался из config
        assert merged.path == ""  # Пустой путь тоже задан явно
        assert merged.optional_auth is True

    def test_strict_auth_flag(self):
        """Тест флага строгой авторизации"""
        config = GeneratorConfig(source="openapi.yaml")

        assert config.merge_with_args(MockArgs(strict_auth=True)).optional_auth is False

    def test_default_values(self):
        """Тест значений по умолчанию"""
        config = GeneratorConfig()

        assert config.source is None
        assert config.output is None
        assert config.package == "api"
        assert config.path == ""
        assert config.optional_auth is True
