import io
import os
import subprocess
import tempfile
import unittest
from contextlib import redirect_stdout
from unittest import mock

from shuck.ast_tree import OutputMode, Pipeline, Stage
from shuck.errors import PermissionDeniedError, ResourceError
from shuck.executer import CommandExecutor, Pipe, execute
from shuck.parser import ShellParser

SEARCH_PATH = ("/bin", "/usr/bin")


def open_fds():
    return set(os.listdir("/proc/self/fd"))


class TestCommandExecutor(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.executor = CommandExecutor(dict(os.environ))

    def tearDown(self):
        self.temp_dir.cleanup()

    def path(self, name):
        return os.path.join(self.temp_dir.name, name)

    def run_words(self, words):
        parser = ShellParser(words)
        pipeline = parser.build(parser.validate(), SEARCH_PATH)
        out = io.StringIO()
        with redirect_stdout(out):
            statuses = self.executor.execute(pipeline)
        return statuses, out.getvalue()

    def read(self, name):
        with open(self.path(name), "r") as f:
            return f.read()

    def test_truncate_then_append(self):
        target = self.path("f.txt")
        statuses, out = self.run_words(["echo", "hi", ">", target])
        self.assertEqual(self.read("f.txt"), "hi\n")
        self.assertEqual(len(statuses), 1)
        self.assertEqual(statuses[0].returncode, 0)
        self.assertRegex(out, r"echo exit status = 0\n$")

        self.run_words(["echo", "hi", ">", ">", target])
        self.assertEqual(self.read("f.txt"), "hi\nhi\n")

    def test_truncate_replaces_content(self):
        target = self.path("f.txt")
        with open(target, "w") as f:
            f.write("a much longer line than the new one\n")
        self.run_words(["echo", "hi", ">", target])
        self.assertEqual(self.read("f.txt"), "hi\n")

    def test_pipeline_uses_one_pipe_two_children(self):
        target = self.path("count.txt")
        before = open_fds()
        with mock.patch.object(Pipe, "allocate", wraps=Pipe.allocate) as allocate, mock.patch(
            "shuck.executer.subprocess.Popen", wraps=subprocess.Popen
        ) as popen:
            statuses, out = self.run_words(["ls", "-l", "|", "wc", "-l", ">", target])

        self.assertEqual(allocate.call_count, 1)
        self.assertEqual(popen.call_count, 2)
        self.assertEqual([s.program_name for s in statuses], ["ls", "wc"])
        self.assertTrue(self.read("count.txt").strip().isdigit())
        self.assertEqual(open_fds(), before)
        # Sólo se anuncia la última etapa
        self.assertEqual(out.count("exit status"), 1)
        self.assertIn("wc exit status = 0", out)

    def test_input_redirection_through_pipes(self):
        source = self.path("in.txt")
        with open(source, "w") as f:
            f.write("b\na\nb\nc\na\n")
        target = self.path("out.txt")

        statuses, _ = self.run_words(["<", source, "sort", "|", "uniq", "|", "wc", "-l", ">", target])

        self.assertEqual(len(statuses), 3)
        self.assertTrue(all(s.returncode == 0 for s in statuses))
        self.assertEqual(self.read("out.txt").strip(), "3")

    def test_input_only(self):
        source = self.path("in.txt")
        with open(source, "w") as f:
            f.write("z\ny\n")
        target = self.path("sorted.txt")
        self.run_words(["<", source, "sort", ">", target])
        self.assertEqual(self.read("sorted.txt"), "y\nz\n")

    def test_nonzero_exit(self):
        statuses, out = self.run_words(["false"])
        self.assertEqual(statuses[0].returncode, 1)
        self.assertTrue(statuses[0].exited)
        self.assertIn("false exit status = 1", out)

    def test_killed_by_signal(self):
        script = self.path("suicide.sh")
        with open(script, "w") as f:
            f.write("#!/bin/sh\nkill -9 $$\n")
        os.chmod(script, 0o755)

        statuses, out = self.run_words([script])
        self.assertFalse(statuses[0].exited)
        self.assertEqual(statuses[0].signal, 9)
        self.assertIn(f"{script} terminated by signal 9", out)

    def test_missing_input_file(self):
        missing = self.path("missing.txt")
        with mock.patch("shuck.executer.subprocess.Popen") as popen:
            with self.assertRaises(ResourceError) as ctx:
                self.run_words(["<", missing, "cat", "|", "wc"])
        popen.assert_not_called()
        self.assertEqual(str(ctx.exception), f"{missing}: No such file or directory")

    @unittest.skipIf(os.geteuid() == 0, "root ignora los permisos")
    def test_unreadable_input_file(self):
        source = self.path("secret.txt")
        with open(source, "w") as f:
            f.write("x\n")
        os.chmod(source, 0o200)

        with mock.patch("shuck.executer.subprocess.Popen") as popen:
            with self.assertRaises(PermissionDeniedError) as ctx:
                self.run_words(["<", source, "cat", "|", "wc"])
        popen.assert_not_called()
        self.assertEqual(str(ctx.exception), f"{source}: Permission denied")

    @unittest.skipIf(os.geteuid() == 0, "root ignora los permisos")
    def test_unwritable_output_file(self):
        target = self.path("locked.txt")
        with open(target, "w") as f:
            f.write("keep\n")
        os.chmod(target, 0o444)

        with mock.patch("shuck.executer.subprocess.Popen") as popen:
            with self.assertRaises(PermissionDeniedError):
                self.run_words(["echo", "hi", ">", target])
        popen.assert_not_called()
        self.assertEqual(self.read("locked.txt"), "keep\n")

    def test_input_permission_follows_effective_user(self):
        """El dueño con 0o044 no puede leer aunque el grupo sí pueda."""
        source = self.path("shared.txt")
        with open(source, "w") as f:
            f.write("x\n")
        os.chmod(source, 0o044)
        readable = os.access(source, os.R_OK)

        if readable:
            statuses, _ = self.run_words(["<", source, "cat", ">", self.path("copy.txt")])
            self.assertEqual(statuses[0].returncode, 0)
        else:
            with mock.patch("shuck.executer.subprocess.Popen") as popen:
                with self.assertRaises(PermissionDeniedError):
                    self.run_words(["<", source, "cat", "|", "wc"])
            popen.assert_not_called()

    def test_output_permission_follows_effective_user(self):
        target = self.path("shared_out.txt")
        with open(target, "w") as f:
            f.write("keep\n")
        os.chmod(target, 0o066)
        writable = os.access(target, os.W_OK)

        if writable:
            self.run_words(["echo", "hi", ">", target])
            os.chmod(target, 0o644)
            self.assertEqual(self.read("shared_out.txt"), "hi\n")
        else:
            with mock.patch("shuck.executer.subprocess.Popen") as popen:
                with self.assertRaises(PermissionDeniedError):
                    self.run_words(["echo", "hi", ">", target])
            popen.assert_not_called()

    def test_redirection_check_asks_access(self):
        source = self.path("open.txt")
        with open(source, "w") as f:
            f.write("x\n")
        with mock.patch("shuck.executer.has_access", return_value=False) as access:
            with self.assertRaises(PermissionDeniedError):
                self.run_words(["<", source, "cat"])
        access.assert_called_once_with(source, os.R_OK)

    def test_output_in_missing_directory(self):
        target = self.path("nowhere/out.txt")
        before = open_fds()
        with self.assertRaises(ResourceError):
            self.run_words(["ls", "|", "wc", ">", target])
        self.assertEqual(open_fds(), before)

    def test_spawn_failure_closes_pipes(self):
        script = self.path("broken")
        with open(script, "w") as f:
            f.write("not a real program\n")
        os.chmod(script, 0o755)

        target = self.path("out.txt")
        pipeline = Pipeline(
            [
                Stage("true", ["true"], "/bin/true" if os.path.exists("/bin/true") else "/usr/bin/true"),
                Stage("broken", ["broken"], script),
            ],
            output_path=target,
            output_mode=OutputMode.TRUNCATE,
        )
        before = open_fds()
        with self.assertRaises(ResourceError):
            self.executor.execute(pipeline)
        self.assertEqual(open_fds(), before)


class TestExecuteFunction(unittest.TestCase):
    def test_runs_pipeline_with_environment(self):
        with tempfile.TemporaryDirectory() as tmp:
            target = os.path.join(tmp, "env.txt")
            parser = ShellParser(["printenv", "SHUCK_MARK", ">", target])
            pipeline = parser.build(parser.validate(), SEARCH_PATH)

            out = io.StringIO()
            with redirect_stdout(out):
                statuses = execute(pipeline, {"SHUCK_MARK": "visto"})

            with open(target) as f:
                self.assertEqual(f.read(), "visto\n")
        self.assertEqual([s.returncode for s in statuses], [0])
        self.assertEqual(out.getvalue(), "printenv exit status = 0\n")


class TestPipe(unittest.TestCase):
    def test_close_is_idempotent(self):
        pipe = Pipe.allocate()
        pipe.write.close()
        pipe.close()
        pipe.close()
        self.assertTrue(pipe.read.closed)
        self.assertTrue(pipe.write.closed)


if __name__ == "__main__":
    unittest.main(verbosity=2)
