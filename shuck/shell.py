import logging
import os
import sys
from typing import Callable, Dict, List, Optional

from shuck.ast_tree import RedirectionSpec, StageStatus
from shuck.config import BUILTIN_COMMANDS, ShellConfig
from shuck.console import print_error
from shuck.errors import BuiltinError, BuiltinRedirectionError, HistoryError, ShellError
from shuck.executer import CommandExecutor
from shuck.expansion import RECALL, expand_globs, expand_history
from shuck.history import HistoryLog
from shuck.lexer import ShellLexer
from shuck.parser import ShellParser


class Shell:
    """
    Clase que representa la shell: lee líneas, las preprocesa, las valida y
    decide si son un comando interno o un pipeline externo.
    """

    def __init__(self, config: Optional[ShellConfig] = None, logger: logging.Logger = None) -> None:
        self.config = config or ShellConfig.from_environ()
        self.logger = logger or logging.getLogger("Shell")
        self.lexer = ShellLexer()
        self.history = HistoryLog(self.config.history_file)
        self.executor = CommandExecutor(self.config.environment)
        self.builtins: Dict[str, Callable[[List[str]], None]] = {
            "cd": self._builtin_cd,
            "pwd": self._builtin_pwd,
            "exit": self._builtin_exit,
            "history": self._builtin_history,
            RECALL: self._builtin_recall,
        }

    def run(self) -> int:
        interactive = sys.stdin.isatty() and sys.stdout.isatty()
        prompt = self.config.prompt if interactive else ""

        while True:
            try:
                line = input(prompt)
                self.execute_line(line)
            except EOFError:
                if interactive:
                    print()
                return 0
            except KeyboardInterrupt:
                print()

    def execute_line(self, line: str) -> List[StageStatus]:
        words = self.lexer.tokenize(line)
        if not words:
            return []
        try:
            return self._execute_words(words)
        except ShellError as exc:
            print_error(str(exc))
            return []

    def _execute_words(self, words: List[str]) -> List[StageStatus]:
        if words[0] == RECALL:
            # Los errores de sintaxis se reportan antes que los del historial
            ShellParser(words).validate()
            words = self._recall(words)
        return self._dispatch(words)

    def _recall(self, words: List[str]) -> List[str]:
        recalled = expand_history(words, self.history, self.lexer.tokenize)
        print(" ".join(recalled), flush=True)
        # Una entrada que empieza por "!" no se vuelve a expandir
        if recalled[0] == RECALL:
            raise HistoryError()
        return recalled

    def _dispatch(self, words: List[str]) -> List[StageStatus]:
        expanded = expand_globs(words)
        parser = ShellParser(expanded)
        spec = parser.validate()

        self._remember(words)

        program = parser.program_name(spec)
        if self.is_builtin(program):
            if spec.has_redirection:
                raise BuiltinRedirectionError(program)
            self.run_builtin(program, expanded[1:])
            return []
        return self.run_external(expanded, spec)

    def _remember(self, words: List[str]) -> None:
        try:
            self.history.append(" ".join(words))
        except OSError as exc:
            print_error(f"{self.history.path}: {exc.strerror or exc}")

    def is_builtin(self, name: str) -> bool:
        return name in BUILTIN_COMMANDS

    def run_builtin(self, name: str, args: List[str]) -> None:
        self.logger.debug("builtin %s %s", name, args)
        self.builtins[name](args)

    def run_external(self, words: List[str], spec: RedirectionSpec) -> List[StageStatus]:
        pipeline = ShellParser(words).build(spec, self.config.search_path)
        return self.executor.execute(pipeline)

    def _builtin_cd(self, args: List[str]) -> None:
        if len(args) > 1:
            raise BuiltinError("cd: too many arguments")

        if args:
            target = args[0]
        else:
            target = self.config.environment.get("HOME")
            if not target:
                raise BuiltinError("cd: HOME not set")

        try:
            os.chdir(target)
        except OSError as exc:
            raise BuiltinError(f"cd: {target}: {exc.strerror or exc}")

    def _builtin_pwd(self, args: List[str]) -> None:
        if args:
            raise BuiltinError("pwd: too many arguments")
        print(f"current directory is '{os.getcwd()}'", flush=True)

    def _builtin_exit(self, args: List[str]) -> None:
        if len(args) > 1:
            raise BuiltinError("exit: too many arguments")

        status = 0
        if args:
            try:
                status = int(args[0])
            except ValueError:
                raise BuiltinError(f"exit: {args[0]}: numeric argument required")
        sys.exit(status)

    def _builtin_history(self, args: List[str]) -> None:
        if len(args) > 1:
            raise BuiltinError("history: too many arguments")

        count = self.config.history_shown
        if args:
            if not args[0].isdigit():
                raise BuiltinError(f"history: {args[0]}: numeric argument required")
            count = int(args[0])

        for index, line in self.history.tail(count):
            print(f"{index}: {line}", flush=True)

    def _builtin_recall(self, args: List[str]) -> None:
        self._dispatch(self._recall([RECALL, *args]))


def main() -> None:
    config = ShellConfig.from_environ()
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(name)s: %(levelname)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(Shell(config).run())
