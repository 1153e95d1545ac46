"""
Jerarquía de errores de la shell.

Cada excepción lleva como mensaje la línea exacta que se imprime en stderr.
Ninguna de ellas termina el intérprete: el despachador las captura por
línea y vuelve al bucle de lectura.
"""


class ShellError(Exception):
    """Base de todos los errores reportables de la shell."""

    message = "shell error"

    def __init__(self, message: str = None) -> None:
        super().__init__(message or self.message)


class ShellSyntaxError(ShellError):
    """Operador de redirección o pipe mal colocado."""


class InputRedirectionError(ShellSyntaxError):
    message = "invalid input redirection"


class OutputRedirectionError(ShellSyntaxError):
    message = "invalid output redirection"


class PipeSyntaxError(ShellSyntaxError):
    message = "invalid pipe"


class SemanticError(ShellError):
    """Línea bien formada que no se puede ejecutar."""


class BuiltinRedirectionError(SemanticError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{name}: I/O redirection not permitted for builtin commands")
        self.name = name


class CommandNotFoundError(SemanticError):
    def __init__(self, name: str) -> None:
        super().__init__(f"{name}: command not found")
        self.name = name


class ResourceError(ShellError):
    """Fallo de una llamada al sistema: pipe, spawn, wait u open."""

    @classmethod
    def from_os_error(cls, name: str, exc: OSError) -> "ResourceError":
        return cls(f"{name}: {exc.strerror or exc}")


class PermissionDeniedError(ResourceError):
    def __init__(self, path: str) -> None:
        super().__init__(f"{path}: Permission denied")
        self.path = path


class BuiltinError(ShellError):
    """Argumentos invalidos para un comando interno."""


class HistoryError(BuiltinError):
    message = "!: invalid history reference"
