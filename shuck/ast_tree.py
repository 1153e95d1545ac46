from enum import Enum, auto
from typing import List, NamedTuple, Optional


class OutputMode(Enum):
    NONE = auto()
    TRUNCATE = auto()  # >
    APPEND = auto()  # >>


class RedirectionSpec(NamedTuple):
    """
    Resultado de validar una línea: qué redirecciones tiene y cuántos pipes.
    """

    has_input: bool = False
    output_mode: OutputMode = OutputMode.NONE
    pipe_count: int = 0

    @property
    def has_output(self) -> bool:
        return self.output_mode is not OutputMode.NONE

    @property
    def has_redirection(self) -> bool:
        return self.has_input or self.has_output or self.pipe_count > 0


class Stage:
    """
    Clase que representa un programa dentro de un pipeline.
    """

    def __init__(
        self,
        program_name: str,
        arguments: List[str],
        resolved_path: Optional[str] = None,
    ) -> None:
        self.program_name = program_name
        self.arguments = arguments
        self.resolved_path = resolved_path

    def __repr__(self) -> str:
        return f"Stage({self.program_name}, {self.arguments}, {self.resolved_path})"


class Pipeline:
    """
    Clase que representa una cadena de etapas conectadas por pipes.

    Sólo la primera etapa lee de `input_path` y sólo la última escribe en
    `output_path`.
    """

    def __init__(
        self,
        stages: List[Stage],
        input_path: Optional[str] = None,
        output_path: Optional[str] = None,
        output_mode: OutputMode = OutputMode.NONE,
    ) -> None:
        self.stages = stages
        self.input_path = input_path
        self.output_path = output_path
        self.output_mode = output_mode

    @property
    def pipe_count(self) -> int:
        return len(self.stages) - 1

    def __repr__(self) -> str:
        return (
            f"Pipeline({self.stages}, in=({self.input_path}), "
            f"out=({self.output_path}, {self.output_mode.name}))"
        )


class StageStatus(NamedTuple):
    program_name: str
    path: str
    returncode: int

    @property
    def exited(self) -> bool:
        return self.returncode >= 0

    @property
    def signal(self) -> Optional[int]:
        return None if self.exited else -self.returncode

    def describe(self) -> str:
        if self.exited:
            return f"{self.path} exit status = {self.returncode}"
        return f"{self.path} terminated by signal {self.signal}"
