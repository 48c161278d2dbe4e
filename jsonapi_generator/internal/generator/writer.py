import logging

from ..types.models import GoFile

logger = logging.getLogger(__name__)


class SourceWriter:
    """Сериализация собранного Go файла в текст"""

    def emit(self, source: GoFile) -> str:
        logger.debug(
            f"Emitting package {source.package_name}: "
            f"{len(source.declarations)} declarations, {len(source.imports)} imports"
        )
        return str(source)
