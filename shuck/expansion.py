"""
Preprocesado de la lista de palabras antes de validarla.

Ambas funciones devuelven una lista nueva; si no hay caracteres que las
activen, la lista sale igual que entró.
"""

import glob
import os
from typing import Callable, List

from shuck.errors import BuiltinError, BuiltinRedirectionError
from shuck.history import HistoryLog

GLOB_CHARS = "*?[~"
RECALL = "!"


def expand_globs(words: List[str]) -> List[str]:
    expanded: List[str] = []
    for word in words:
        if not any(char in word for char in GLOB_CHARS):
            expanded.append(word)
            continue

        matches = sorted(glob.glob(os.path.expanduser(word)))
        if matches:
            expanded.extend(matches)
        else:
            expanded.append(word)
    return expanded


def expand_history(
    words: List[str],
    history: HistoryLog,
    tokenize: Callable[[str], List[str]],
) -> List[str]:
    """
    Sustituye `! [n]` por la entrada `n` del historial (la última por defecto).
    """
    if not words or words[0] != RECALL:
        return list(words)

    if any(word in ("<", ">", "|") for word in words):
        raise BuiltinRedirectionError(RECALL)
    if len(words) > 2:
        raise BuiltinError("!: too many arguments")

    index = None
    if len(words) == 2:
        if not words[1].isdigit():
            raise BuiltinError(f"!: {words[1]}: numeric argument required")
        index = int(words[1])

    return tokenize(history.recall(index))
