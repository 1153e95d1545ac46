"""shuck: intérprete de comandos con pipes y redirecciones."""

from shuck.ast_tree import OutputMode, Pipeline, RedirectionSpec, Stage, StageStatus
from shuck.config import ShellConfig
from shuck.executer import CommandExecutor, execute
from shuck.lexer import ShellLexer, tokenize
from shuck.parser import ShellParser, build, validate
from shuck.resolver import resolve
from shuck.shell import Shell, main

__all__ = [
    "CommandExecutor",
    "OutputMode",
    "Pipeline",
    "RedirectionSpec",
    "Shell",
    "ShellConfig",
    "ShellLexer",
    "ShellParser",
    "Stage",
    "StageStatus",
    "build",
    "execute",
    "main",
    "resolve",
    "tokenize",
    "validate",
]
