import os
from types import MappingProxyType
from typing import Mapping, NamedTuple, Optional, Tuple

INTERACTIVE_PROMPT = "shuck> "

# Used when the environment has no PATH.
DEFAULT_PATH = "/bin:/usr/bin"

DEFAULT_HISTORY_SHOWN = 10

HISTORY_FILENAME = ".shuck_history"

# Characters the lexer returns as words by themselves.
SPECIAL_CHARS = "!><|"

WORD_SEPARATORS = " \t\r\n"

BUILTIN_COMMANDS = frozenset(("cd", "pwd", "exit", "history", "!"))


class ShellConfig(NamedTuple):
    """
    Configuración inmutable de la shell, construida una vez al arrancar.
    """

    search_path: Tuple[str, ...]
    environment: Mapping[str, str]
    history_file: str
    prompt: str = INTERACTIVE_PROMPT
    history_shown: int = DEFAULT_HISTORY_SHOWN
    log_level: str = "WARNING"

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None) -> "ShellConfig":
        from shuck.lexer import tokenize

        env = dict(os.environ if environ is None else environ)
        search_path = tuple(tokenize(env.get("PATH", DEFAULT_PATH), ":", ""))
        home = env.get("HOME") or os.getcwd()
        return cls(
            search_path=search_path,
            environment=MappingProxyType(env),
            history_file=os.path.join(home, HISTORY_FILENAME),
            log_level=env.get("SHUCK_LOG_LEVEL", "WARNING").upper(),
        )
