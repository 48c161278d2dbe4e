"""
Тесты командной строки
"""

from pathlib import Path

import pytest
import yaml
from jsonapi_generator import cli
from jsonapi_generator.config import CONFIG_FILE, GeneratorConfig

FIXTURES = Path(__file__).parent / "fixtures"

BROKEN = {
    "openapi": "3.0.0",
    "info": {"title": "Broken", "version": "1"},
    "paths": {},
    "components": {"schemas": {"Weird": {"type": "object", "properties": {"x": {"type": "foo"}}}}},
}


class TestGenerateCommand:
    """Тесты команды jsonapi-generator"""

    def test_generation_error(self, tmp_path, monkeypatch, capsys):
        """При ошибке генерации выход с кодом 1 и файл не создается"""
        monkeypatch.chdir(tmp_path)
        source = tmp_path / "broken.yaml"
        source.write_text(yaml.safe_dump(BROKEN), encoding="utf-8")
        output = tmp_path / "out" / "api.go"

        with pytest.raises(SystemExit) as exc_info:
            cli.generate(["--source", str(source), "--output", str(output)])

        assert exc_info.value.code == 1
        assert not output.exists()
        assert "❌ Ошибка генерации" in capsys.readouterr().out

    def test_generation(self, tmp_path, monkeypatch):
        """Успешная генерация пишет файл"""
        monkeypatch.chdir(tmp_path)
        output = tmp_path / "pets" / "pets.go"

        cli.generate(
            [
                "--source",
                str(FIXTURES / "petstore.yaml"),
                "--output",
                str(output),
                "--package",
                "pets",
                "--path",
                "example.com/pets",
            ]
        )

        assert output.read_text(encoding="utf-8") == (FIXTURES / "petstore.go").read_text(encoding="utf-8")

    def test_missing_source(self, tmp_path, monkeypatch):
        """Без источника и конфига - ошибка"""
        monkeypatch.chdir(tmp_path)

        with pytest.raises(SystemExit) as exc_info:
            cli.generate(["--output", "api.go"])

        assert exc_info.value.code == 1

    def test_init_config(self, tmp_path, monkeypatch):
        """--init-config создает конфиг, который используется следующим запуском"""
        monkeypatch.chdir(tmp_path)

        cli.generate(["--init-config", "--source", "openapi.yaml", "--package", "pets"])

        config = GeneratorConfig.from_file(str(tmp_path / CONFIG_FILE))
        assert config is not None
        assert config.source == "openapi.yaml"
        assert config.output == "api.go"
        assert config.package == "pets"
