import logging
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict

logger = logging.getLogger(__name__)


class BlobNotFoundError(KeyError):
    """В хранилище нет объекта с таким ключом"""


class BlobStorage(ABC):
    """Хранилище двоичных объектов для прикрепленных файлов"""

    @abstractmethod
    def store(self, data: bytes) -> str:
        """Сохранение байтов, возвращает ключ объекта"""

    @abstractmethod
    def retrieve(self, key: str) -> bytes:
        """Чтение объекта по ключу"""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Удаление объекта; отсутствующий ключ не является ошибкой"""

    @staticmethod
    def generate_key() -> str:
        return uuid.uuid4().hex


class DiskBlobStorage(BlobStorage):
    """Файлы на диске: {root}/ab/cd/abcd..."""

    def __init__(self, root: str):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        return self.root / key[:2] / key[2:4] / key

    def store(self, data: bytes) -> str:
        key = self.generate_key()
        path = self.path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
        logger.info(f"Stored blob {key} ({len(data)} bytes)")
        return key

    def retrieve(self, key: str) -> bytes:
        path = self.path_for(key)
        if not path.exists():
            raise BlobNotFoundError(key)
        return path.read_bytes()

    def delete(self, key: str) -> None:
        path = self.path_for(key)
        if path.exists():
            path.unlink()
            logger.info(f"Deleted blob {key}")


class InMemoryBlobStorage(BlobStorage):
    """Хранилище в памяти процесса, для тестов и локального запуска"""

    def __init__(self):
        self._blobs: Dict[str, bytes] = {}

    def __len__(self) -> int:
        return len(self._blobs)

    def __contains__(self, key: str) -> bool:
        return key in self._blobs

    def store(self, data: bytes) -> str:
        key = self.generate_key()
        self._blobs[key] = bytes(data)
        return key

    def retrieve(self, key: str) -> bytes:
        try:
            return self._blobs[key]
        except KeyError:
            raise BlobNotFoundError(key) from None

    def delete(self, key: str) -> None:
        self._blobs.pop(key, None)
