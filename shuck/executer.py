import logging
import os
import subprocess
import sys
from typing import List, Mapping, Optional

from shuck.ast_tree import OutputMode, Pipeline, Stage, StageStatus
from shuck.console import print_status
from shuck.errors import PermissionDeniedError, ResourceError
from shuck.resolver import has_access


class PipeEnd:
    """
    Extremo de un pipe. El ejecutor es su único dueño hasta que lo cierra;
    cerrar dos veces no tiene efecto.
    """

    def __init__(self, fd: int) -> None:
        self.fd = fd
        self.closed = False

    def fileno(self) -> int:
        return self.fd

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            os.close(self.fd)

    def __repr__(self) -> str:
        return f"PipeEnd({self.fd}, closed={self.closed})"


class Pipe:
    """
    Clase que representa un pipe del sistema entre dos etapas.
    """

    def __init__(self, read: PipeEnd, write: PipeEnd) -> None:
        self.read = read
        self.write = write

    @classmethod
    def allocate(cls) -> "Pipe":
        read_fd, write_fd = os.pipe()
        return cls(PipeEnd(read_fd), PipeEnd(write_fd))

    def close(self) -> None:
        self.read.close()
        self.write.close()

    def __repr__(self) -> str:
        return f"Pipe(read={self.read}, write={self.write})"


class CommandExecutor:
    """
    Clase que representa el ejecutor de pipelines.

    Abre los ficheros de redirección, reserva los pipes, lanza cada etapa con
    sus descriptores ya conectados y espera a todos los hijos en orden.
    """

    def __init__(
        self,
        environment: Mapping[str, str],
        logger: logging.Logger = None,
    ) -> None:
        self.env = dict(environment)
        self.logger = logger or logging.getLogger("CommandExecutor")

    def execute(self, pipeline: Pipeline) -> List[StageStatus]:
        self._check_redirections(pipeline)

        processes: List[subprocess.Popen] = []
        pipes: List[Pipe] = []
        input_fd: Optional[int] = None
        output_fd: Optional[int] = None

        try:
            if pipeline.input_path is not None:
                input_fd = self._open(pipeline.input_path, os.O_RDONLY)
            if pipeline.output_path is not None:
                flags = os.O_WRONLY | os.O_CREAT
                if pipeline.output_mode is OutputMode.APPEND:
                    flags |= os.O_APPEND
                else:
                    flags |= os.O_TRUNC
                output_fd = self._open(pipeline.output_path, flags)

            for _ in range(pipeline.pipe_count):
                try:
                    pipes.append(Pipe.allocate())
                except OSError as exc:
                    raise ResourceError.from_os_error("pipe", exc)
            self.logger.debug("allocated %d pipes: %s", len(pipes), pipes)

            last = len(pipeline.stages) - 1
            for i, stage in enumerate(pipeline.stages):
                stdin = input_fd if i == 0 else pipes[i - 1].read.fileno()
                stdout = output_fd if i == last else pipes[i].write.fileno()

                processes.append(self._spawn_process(stage, stdin, stdout))

                # El hijo ya heredó estos extremos
                if i < last:
                    pipes[i].write.close()
                if i > 0:
                    pipes[i - 1].read.close()
        finally:
            for pipe in pipes:
                pipe.close()
            for fd in (input_fd, output_fd):
                if fd is not None:
                    os.close(fd)

        statuses = self._wait_all(pipeline.stages, processes)
        self._report(statuses[-1])
        return statuses

    def _check_redirections(self, pipeline: Pipeline) -> None:
        # Se decide con los permisos del usuario efectivo, no con los bits del dueño
        if pipeline.input_path is not None:
            path = pipeline.input_path
            try:
                os.stat(path)
            except OSError as exc:
                raise ResourceError.from_os_error(path, exc)
            if not has_access(path, os.R_OK):
                raise PermissionDeniedError(path)

        if pipeline.output_path is not None:
            path = pipeline.output_path
            try:
                os.stat(path)
            except FileNotFoundError:
                return
            except OSError as exc:
                raise ResourceError.from_os_error(path, exc)
            if not has_access(path, os.W_OK):
                raise PermissionDeniedError(path)

    def _open(self, path: str, flags: int) -> int:
        try:
            return os.open(path, flags, 0o644)
        except PermissionError:
            raise PermissionDeniedError(path)
        except OSError as exc:
            raise ResourceError.from_os_error(path, exc)

    def _spawn_process(
        self, stage: Stage, stdin: Optional[int], stdout: Optional[int]
    ) -> subprocess.Popen:
        # Lo que la shell haya impreso debe salir antes que la salida del hijo
        sys.stdout.flush()
        try:
            process = subprocess.Popen(
                stage.arguments,
                executable=stage.resolved_path,
                stdin=stdin,
                stdout=stdout,
                env=self.env,
                close_fds=True,
            )
        except OSError as exc:
            raise ResourceError.from_os_error(stage.resolved_path or stage.program_name, exc)
        self.logger.debug(
            "spawned %s as pid %d (stdin=%s, stdout=%s)", stage.arguments, process.pid, stdin, stdout
        )
        return process

    def _wait_all(
        self, stages: List[Stage], processes: List[subprocess.Popen]
    ) -> List[StageStatus]:
        statuses = []
        for stage, process in zip(stages, processes):
            try:
                returncode = process.wait()
            except OSError as exc:
                raise ResourceError.from_os_error("wait", exc)
            self.logger.debug("pid %d finished with %d", process.pid, returncode)
            statuses.append(StageStatus(stage.program_name, stage.resolved_path, returncode))
        return statuses

    def _report(self, status: StageStatus) -> None:
        if status.exited:
            print_status(status.describe())
        else:
            print_status(status.describe(), color_name="YELLOW")


def execute(pipeline: Pipeline, environment: Mapping[str, str]) -> List[StageStatus]:
    return CommandExecutor(environment).execute(pipeline)
