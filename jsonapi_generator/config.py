"""
Конфигурация для генерации Go сервиса
"""

import os
from dataclasses import dataclass
from typing import Optional

import toml

CONFIG_FILE = "jsonapi.toml"


@dataclass
class GeneratorConfig:
    """Конфигурация генератора json:api сервиса"""

    source: Optional[str] = None
    output: Optional[str] = None
    package: str = "api"
    path: str = ""
    optional_auth: bool = True

    @classmethod
    def from_file(
        cls, config_path: str = CONFIG_FILE, search_dir: str = None
    ) -> Optional["GeneratorConfig"]:
        """Загрузка конфигурации из файла"""
        # Если указана директория для поиска, ищем конфиг там
        if search_dir and os.path.isdir(search_dir):
            config_in_dir = os.path.join(search_dir, CONFIG_FILE)
            if os.path.exists(config_in_dir):
                config_path = config_in_dir

        if not os.path.exists(config_path):
            return None

        try:
            config_data = toml.load(config_path)
        except toml.TomlDecodeError:
            return None

        return cls(
            source=config_data.get("source"),
            output=config_data.get("output"),
            package=config_data.get("package", "api"),
            path=config_data.get("path", ""),
            optional_auth=bool(config_data.get("optional_auth", True)),
        )

    def save_to_file(self, config_path: str = CONFIG_FILE) -> None:
        """Сохранение конфигурации в файл"""
        config_data = {
            "source": self.source,
            "output": self.output,
            "package": self.package,
            "path": self.path,
            "optional_auth": self.optional_auth,
        }

        with open(config_path, "w") as f:
            toml.dump({k: v for k, v in config_data.items() if v is not None}, f)

    def merge_with_args(self, args) -> "GeneratorConfig":
        """Объединение с аргументами командной строки"""
        return GeneratorConfig(
            source=args.source or self.source,
            output=args.output or self.output,
            package=args.package or self.package,
            path=args.path if args.path is not None else self.path,
            optional_auth=self.optional_auth and not args.strict_auth,
        )
