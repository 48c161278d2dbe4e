import argparse
import logging
import os
import sys
from typing import List, Optional

from jsonapi_generator.config import CONFIG_FILE, GeneratorConfig
from jsonapi_generator.generator import JsonApiGenerator
from jsonapi_generator.internal.types.errors import GeneratorError


def setup_logging(verbose: bool = False):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _generate_source(config: GeneratorConfig) -> str:
    """Ядро генерации - только генерация без сохранения"""
    if not config.source:
        raise ValueError("Источник не указан в конфигурации")

    print(f"🚀 Генерация сервиса из {config.source}")
    print("⚙️ Генерация кода...")

    generator = JsonApiGenerator(optional_auth=config.optional_auth)
    return generator.build_source(config.source, config.path, config.package)


def _save_source(code: str, output: str):
    """Сохранение сгенерированного файла"""
    dirname = os.path.dirname(output)
    if dirname:
        os.makedirs(dirname, exist_ok=True)

    with open(output, "w", encoding="utf-8") as f:
        f.write(code)

    print("✅ Генерация завершена успешно!")
    print(f"📦 Файл создан: {os.path.abspath(output)}")


def _config_from_args(args) -> GeneratorConfig:
    return GeneratorConfig(
        source=args.source,
        output=args.output,
        package=args.package or "api",
        path=args.path or "",
        optional_auth=not args.strict_auth,
    )


def generate(argv: Optional[List[str]] = None):
    """Команда генерации Go сервиса json:api"""
    parser = argparse.ArgumentParser(description="Генерация Go сервиса json:api из OpenAPI")
    parser.add_argument("--source", type=str, help="Путь или URL к OpenAPI спецификации")
    parser.add_argument("--output", type=str, help="Файл для сгенерированного кода")
    parser.add_argument("--package", type=str, help="Имя Go пакета")
    parser.add_argument("--path", type=str, help="Import path Go пакета")
    parser.add_argument(
        "--strict-auth",
        action="store_true",
        help="Не пропускать авторизацию при пустом authBackend",
    )
    parser.add_argument(
        "--init-config", action="store_true", help=f"Создать конфиг файл {CONFIG_FILE}"
    )
    parser.add_argument("--verbose", action="store_true", help="Подробный вывод")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    # Инициализация конфига
    if args.init_config:
        config = _config_from_args(args)
        config.output = config.output or "api.go"
        config.save_to_file()
        print(f"✅ Создан конфиг файл {CONFIG_FILE}")
        return

    # Загрузка конфига из файла, аргументы имеют приоритет
    file_config = GeneratorConfig.from_file()
    if file_config:
        print(f"📋 Используется конфиг из {CONFIG_FILE}")
        final_config = file_config.merge_with_args(args)
    else:
        final_config = _config_from_args(args)

    # Проверка обязательных параметров
    if not final_config.source:
        print("❌ Ошибка: Укажите --source или создайте конфиг с --init-config")
        sys.exit(1)
    if not final_config.output:
        print("❌ Ошибка: Не указан выходной файл (--output)")
        sys.exit(1)

    # Файл пишется только при успешной генерации
    try:
        code = _generate_source(final_config)
    except GeneratorError as e:
        print(f"❌ Ошибка генерации: {e}")
        sys.exit(1)

    try:
        _save_source(code, final_config.output)
    except OSError as e:
        print(f"❌ Ошибка записи {final_config.output}: {e}")
        sys.exit(1)


if __name__ == "__main__":
    generate()
