import logging
import os
from typing import List, Optional, Tuple

from shuck.errors import HistoryError


class HistoryLog:
    """
    Historial de comandos, guardado línea a línea en `path`.

    Los índices empiezan en 0, igual que los que imprime `history`.
    """

    def __init__(self, path: str, logger: logging.Logger = None) -> None:
        self.path = path
        self.logger = logger or logging.getLogger("HistoryLog")
        self.lines: List[str] = self._load()

    def _load(self) -> List[str]:
        if not os.path.exists(self.path):
            return []
        try:
            with open(self.path, "r") as f:
                return [line.rstrip("\n") for line in f if line.strip()]
        except OSError as exc:
            self.logger.warning("cannot read history %s: %s", self.path, exc)
            return []

    def __len__(self) -> int:
        return len(self.lines)

    def append(self, line: str) -> None:
        line = line.strip()
        if not line:
            return
        self.lines.append(line)
        with open(self.path, "a") as f:
            f.write(line + "\n")

    def recall(self, index: Optional[int] = None) -> str:
        if not self.lines:
            raise HistoryError()
        if index is None:
            return self.lines[-1]
        if index < 0 or index >= len(self.lines):
            raise HistoryError()
        return self.lines[index]

    def tail(self, count: int, skip_last: bool = True) -> List[Tuple[int, str]]:
        """
        Devuelve pares (índice, línea) de las últimas `count` entradas.

        Con `skip_last` se omite la última, que es el propio `history`.
        """
        end = len(self.lines) - 1 if skip_last else len(self.lines)
        end = max(end, 0)
        start = max(end - count, 0)
        return [(i, self.lines[i]) for i in range(start, end)]
