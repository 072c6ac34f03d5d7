"""
Запуск зовнішніх команд без очікування результату (напр. wakeonlan).
"""

import shlex
import subprocess
import threading
from typing import Optional

from utils.logger import get_logger


def run_detached(command: str, timeout: Optional[float] = 60.0) -> subprocess.Popen:
    """
    Запустити команду оболонки і одразу повернутися.

    Вивід команди логується у фоновому потоці після її завершення.

    Args:
        command: Рядок команди
        timeout: Скільки чекати завершення перед тим, як зупинити процес

    Returns:
        Запущений процес

    Raises:
        OSError: Команду не вдалося запустити
    """
    logger = get_logger('command')
    process = subprocess.Popen(
        shlex.split(command),
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True
    )
    logger.info(f"Запущено команду: {command} (pid {process.pid})")

    def collect() -> None:
        try:
            stdout, stderr = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            stdout, stderr = process.communicate()
            logger.warning(f"Команда '{command}' перевищила час очікування і була зупинена")
        if stdout:
            logger.info(f"[{command}] {stdout.strip()}")
        if stderr:
            logger.warning(f"[{command}] {stderr.strip()}")
        if process.returncode:
            logger.warning(f"Команда '{command}' завершилась з кодом {process.returncode}")

    threading.Thread(target=collect, name='command-output', daemon=True).start()
    return process
