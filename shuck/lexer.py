import logging
from typing import List

from shuck.config import SPECIAL_CHARS, WORD_SEPARATORS


def tokenize(text: str, separators: str, special_chars: str) -> List[str]:
    """
    Divide `text` en palabras usando cualquiera de `separators`.

    Cada carácter de `special_chars` se devuelve como una palabra propia,
    aunque no esté rodeado de separadores: "a>b" produce ["a", ">", "b"].
    """
    words: List[str] = []
    pos = 0
    length = len(text)

    while pos < length:
        if text[pos] in separators:
            pos += 1
            continue

        if text[pos] in special_chars:
            words.append(text[pos])
            pos += 1
            continue

        start = pos
        while pos < length and text[pos] not in separators and text[pos] not in special_chars:
            pos += 1
        words.append(text[start:pos])

    return words


class ShellLexer:
    """
    Clase que representa el lexer de la shell.
    """

    def __init__(
        self,
        separators: str = WORD_SEPARATORS,
        special_chars: str = SPECIAL_CHARS,
        logger: logging.Logger = None,
    ) -> None:
        self.separators = separators
        self.special_chars = special_chars
        self.logger = logger or logging.getLogger("ShellLexer")

    def tokenize(self, line: str) -> List[str]:
        words = tokenize(line, self.separators, self.special_chars)
        self.logger.debug("tokenized %r into %s", line, words)
        return words
