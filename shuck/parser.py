import logging
from typing import List, Sequence

from shuck.ast_tree import OutputMode, Pipeline, RedirectionSpec, Stage
from shuck.config import BUILTIN_COMMANDS
from shuck.errors import (
    BuiltinRedirectionError,
    CommandNotFoundError,
    InputRedirectionError,
    OutputRedirectionError,
    PipeSyntaxError,
)
from shuck.resolver import is_executable, resolve

OPERATORS = ("<", ">", "|")


class ShellParser:
    """
    Clase que representa el parser de la shell.

    `validate` comprueba la posición de `<`, `>`, `>>` y `|`; `build` parte
    la lista de palabras en etapas y resuelve el programa de cada una.
    """

    def __init__(self, words: List[str], logger: logging.Logger = None) -> None:
        self.words = list(words)
        self.logger = logger or logging.getLogger("ShellParser")

    def validate(self) -> RedirectionSpec:
        words = self.words
        count = len(words)

        input_error = output_error = pipe_error = False
        has_input = False
        output_marks = 0
        pipe_count = 0

        for i, word in enumerate(words):
            if word == "<" and not input_error:
                # Sólo puede ser la primera palabra
                if count < 3 or i != 0:
                    input_error = True
                else:
                    has_input = True

            elif word == ">" and not output_error:
                # Penúltima (>) o antepenúltima seguida de otro > (>>)
                if count < 3 or i == 0:
                    output_error = True
                elif i == count - 3:
                    if words[i + 1] == ">":
                        output_marks += 1
                    else:
                        output_error = True
                elif i == count - 2:
                    output_marks += 1
                else:
                    output_error = True

            elif word == "|" and not pipe_error:
                if count < 3 or i == 0 or i == count - 1 or words[i - 1] == "|":
                    pipe_error = True
                else:
                    pipe_count += 1

        output_mode = OutputMode.NONE
        if output_marks == 1:
            output_mode = OutputMode.TRUNCATE
        elif output_marks == 2:
            output_mode = OutputMode.APPEND

        if not (input_error or output_error or pipe_error):
            start, end = self._command_bounds(has_input, output_mode)
            if has_input and words[1] in OPERATORS:
                input_error = True
            elif start >= end:
                if has_input:
                    input_error = True
                else:
                    output_error = True
            elif words[start] == "|":
                input_error = True
            elif words[end - 1] == "|":
                output_error = True

        if input_error:
            raise InputRedirectionError()
        if output_error:
            raise OutputRedirectionError()
        if pipe_error:
            raise PipeSyntaxError()

        spec = RedirectionSpec(has_input, output_mode, pipe_count)
        self.logger.debug("validated %s as %s", words, spec)
        return spec

    def build(self, spec: RedirectionSpec, search_path: Sequence[str]) -> Pipeline:
        start, end = self._command_bounds(spec.has_input, spec.output_mode)

        segments: List[List[str]] = [[]]
        for word in self.words[start:end]:
            if word == "|":
                segments.append([])
            else:
                segments[-1].append(word)

        if any(not segment for segment in segments):
            raise PipeSyntaxError()

        for segment in segments:
            if segment[0] in BUILTIN_COMMANDS:
                raise BuiltinRedirectionError(segment[0])

        # Todas las etapas se resuelven antes de lanzar ningún proceso
        stages = [self._make_stage(segment, search_path) for segment in segments]

        pipeline = Pipeline(
            stages,
            input_path=self.words[1] if spec.has_input else None,
            output_path=self.words[-1] if spec.has_output else None,
            output_mode=spec.output_mode,
        )
        self.logger.debug("built %s", pipeline)
        return pipeline

    def program_name(self, spec: RedirectionSpec) -> str:
        # "< entrada.txt wc" ejecuta wc
        return self.words[2] if spec.has_input else self.words[0]

    def _make_stage(self, segment: List[str], search_path: Sequence[str]) -> Stage:
        name = segment[0]
        path = resolve(name, search_path)
        if path is None or not is_executable(path):
            raise CommandNotFoundError(name)
        self.logger.debug("resolved %s to %s", name, path)
        return Stage(name, list(segment), path)

    def _command_bounds(self, has_input: bool, output_mode: OutputMode):
        start = 2 if has_input else 0
        end = len(self.words)
        if output_mode is OutputMode.TRUNCATE:
            end -= 2
        elif output_mode is OutputMode.APPEND:
            end -= 3
        return start, end


def validate(words: List[str]) -> RedirectionSpec:
    return ShellParser(words).validate()


def build(words: List[str], spec: RedirectionSpec, search_path: Sequence[str]) -> Pipeline:
    return ShellParser(words).build(spec, search_path)
