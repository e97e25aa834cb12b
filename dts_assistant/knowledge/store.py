"""
Хранилище базы знаний: один JSON-файл на диске.

Гарантии:
- Чтение и запись - только целиком, без частичных обновлений
- Запись идёт во временный файл рядом и подменяет основной через os.replace,
  поэтому сбой посреди записи не оставляет обрезанный документ
- Межпроцессной блокировки нет: одновременные полное и выборочное обновления
  из разных процессов могут потерять одно из изменений (побеждает последний писатель);
  следующая проверка свежести это исправит
"""

import os
from pathlib import Path
import tempfile

from pydantic import ValidationError

from dts_assistant.knowledge.errors import StoreReadError, StoreWriteError
from dts_assistant.knowledge.models import KnowledgeBaseDocument
from dts_assistant.logging_config import get_logger

logger = get_logger(__name__)


class KnowledgeBaseStore:
    """
    Файловое хранилище документа базы знаний.

    Пример:
        store = KnowledgeBaseStore(Path('data/knowledge-base.json'))
        document = store.load()  # None, если файла нет или он битый
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> KnowledgeBaseDocument:
        """
        Читает документ.

        Raises:
            StoreReadError: Файла нет, он не читается или не проходит валидацию
        """
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError as e:
            raise StoreReadError(
                f'Knowledge base not found: {self.path}', details={'path': str(self.path)}
            ) from e
        except OSError as e:
            raise StoreReadError(
                f'Cannot read knowledge base {self.path}: {e}', details={'path': str(self.path)}
            ) from e

        try:
            document = KnowledgeBaseDocument.from_json(raw)
        except ValidationError as e:
            raise StoreReadError(
                f'Invalid knowledge base {self.path}: {e.error_count()} validation errors',
                details={'path': str(self.path)},
            ) from e

        logger.debug('kb_read', path=str(self.path), sources=len(document.sources))
        return document

    def load(self) -> KnowledgeBaseDocument | None:
        """
        Читает документ; ошибка чтения означает "документа нет"
        """
        try:
            return self.read()
        except StoreReadError as e:
            logger.warning('kb_load_failed', path=str(self.path), error=e.message)
            return None

    def write(self, document: KnowledgeBaseDocument) -> None:
        """
        Сохраняет документ целиком.

        Raises:
            StoreWriteError: Ошибка файловой системы
        """
        payload = document.to_json()
        tmp_path: str | None = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=f'.{self.path.name}.', suffix='.tmp', dir=self.path.parent
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(payload)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise StoreWriteError(
                f'Cannot write knowledge base {self.path}: {e}', details={'path': str(self.path)}
            ) from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        logger.info(
            'kb_written',
            path=str(self.path),
            sources=len(document.sources),
            last_updated=document.last_updated.isoformat(),
        )
