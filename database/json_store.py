"""
Модуль для збереження JSON-документа на диску з атомарним записом.
"""

import json
import os
from pathlib import Path
from typing import Any

from controllers.errors import PersistenceError


class JsonStore:
    """Один JSON-документ у файлі, що замінюється атомарно."""

    def __init__(self, path: str = "save/powerStateHistory.json"):
        """
        Ініціалізація сховища.

        Args:
            path: Шлях до файлу документа
        """
        self.path = Path(path)
        self.tmp_path = self.path.with_name(self.path.name + '.tmp')

    def load_json(self) -> Any:
        """
        Прочитати та розібрати документ.

        Returns:
            Розібраний JSON

        Raises:
            FileNotFoundError: Файл ще не створено
            PersistenceError: Файл не вдалося прочитати або розібрати
        """
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                return json.load(f)
        except FileNotFoundError:
            raise
        except ValueError as e:
            # JSONDecodeError та UnicodeDecodeError (пошкоджені байти)
            raise PersistenceError(f"Не вдалося розібрати {self.path}: {e}")
        except OSError as e:
            raise PersistenceError(f"Не вдалося прочитати {self.path}: {e}")

    def atomic_write_json(self, data: Any) -> None:
        """
        Записати документ у тимчасовий файл і перейменувати його поверх основного.

        Raises:
            PersistenceError: Запис або перейменування не вдалися
        """
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.tmp_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
                f.flush()
                os.fsync(f.fileno())
            os.replace(self.tmp_path, self.path)
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Не вдалося записати {self.path}: {e}")
