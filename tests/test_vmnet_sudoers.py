import pytest

from finchkit.vmnet_sudoers import SudoersFile

SUDOERS_REL = "etc/sudoers.d/finch-lima"


class RecordingLogger:
    def __init__(self):
        self.records = []

    def _log(self, level, msg, *args):
        self.records.append((level, msg % args if args else msg))

    def debug(self, msg, *args):
        self._log("debug", msg, *args)

    def info(self, msg, *args):
        self._log("info", msg, *args)

    def warning(self, msg, *args):
        self._log("warning", msg, *args)

    def error(self, msg, *args):
        self._log("error", msg, *args)

    def fatal(self, msg, *args):
        self._log("fatal", msg, *args)

    def set_level(self, level):
        pass


class FakeCommand:
    def __init__(self, result):
        self.result = result
        self.stdin = None

    def output(self):
        if isinstance(self.result, Exception):
            raise self.result
        return self.result

    def combined_output(self):
        return self.output()

    def set_stdin(self, data):
        self.stdin = data


class FakeLimaCreator:
    def __init__(self, result):
        self.result = result
        self.calls = []

    def create_without_stdio(self, *args):
        self.calls.append(args)
        return FakeCommand(self.result)


class FakeExecCreator:
    def __init__(self, result):
        self.result = result
        self.calls = []
        self.commands = []

    def create(self, name, *args):
        self.calls.append((name, *args))
        cmd = FakeCommand(self.result)
        self.commands.append(cmd)
        return cmd


def write_sudoers(root, data):
    path = root / SUDOERS_REL
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)


def test_path():
    assert SudoersFile().path() == "/etc/sudoers.d/finch-lima"


def test_installed_happy_path(tmp_path):
    write_sudoers(tmp_path, b"test data")
    lima = FakeLimaCreator(b"test data")
    logger = RecordingLogger()
    assert SudoersFile(None, lima, logger, str(tmp_path)).installed() is True
    assert lima.calls == [("sudoers",)]


def test_installed_file_missing(tmp_path):
    lima = FakeLimaCreator(b"test data")
    logger = RecordingLogger()
    assert SudoersFile(None, lima, logger, str(tmp_path)).installed() is False
    assert lima.calls == []
    assert len(logger.records) == 1
    assert logger.records[0][0] == "info"
    assert logger.records[0][1].startswith("sudoers file not found: ")


def test_installed_command_error(tmp_path):
    write_sudoers(tmp_path, b"test data")
    lima = FakeLimaCreator(RuntimeError("some error"))
    logger = RecordingLogger()
    assert SudoersFile(None, lima, logger, str(tmp_path)).installed() is False
    assert logger.records == [("error", "failed to run lima sudoers command: some error")]


def test_installed_contents_differ(tmp_path):
    write_sudoers(tmp_path, b"test data")
    lima = FakeLimaCreator(b"different test data")
    assert SudoersFile(None, lima, RecordingLogger(), str(tmp_path)).installed() is False


def test_install_happy_path(tmp_path):
    lima = FakeLimaCreator(b"mock_sudoers_out")
    exec_creator = FakeExecCreator(b"mock_sudoers_out")
    SudoersFile(exec_creator, lima, None, str(tmp_path)).install()
    assert exec_creator.calls == [("sudo", "tee", "/etc/sudoers.d/finch-lima")]
    assert exec_creator.commands[0].stdin == b"mock_sudoers_out"


def test_install_lima_error():
    lima = FakeLimaCreator(RuntimeError("sudoers command error"))
    exec_creator = FakeExecCreator(b"")
    with pytest.raises(RuntimeError) as info:
        SudoersFile(exec_creator, lima).install()
    assert str(info.value) == "failed to get lima sudoers: sudoers command error"
    assert exec_creator.calls == []


def test_install_tee_error():
    lima = FakeLimaCreator(b"mock_sudoers_out")
    exec_creator = FakeExecCreator(RuntimeError("sudo tee command error"))
    with pytest.raises(RuntimeError) as info:
        SudoersFile(exec_creator, lima).install()
    assert str(info.value) == "failed to write to the sudoers file: sudo tee command error"
    assert exec_creator.commands[0].stdin == b"mock_sudoers_out"


def test_requires_root():
    assert SudoersFile().requires_root() is True