import pytest

from finchkit.lima import UnrecognizedStatusError, VMStatus, get_vm_status

INSTANCE = "finch"
MOCK_ARGS = ("ls", "-f", "{{.Status}}", INSTANCE)


class FakeCommand:
    def __init__(self, out=b"", error=None):
        self.out = out
        self.error = error

    def output(self):
        if self.error:
            raise self.error
        return self.out


class FakeLimaCreator:
    def __init__(self, cmd):
        self.cmd = cmd
        self.calls = []

    def create_without_stdio(self, *args):
        self.calls.append(args)
        return self.cmd


class RecordingLogger:
    def __init__(self):
        self.calls = []

    def debug(self, msg, *args):
        self.calls.append(("debug", msg, args))


@pytest.mark.parametrize(
    "out, want, logged",
    [
        (b"Running ", VMStatus.RUNNING, "Running"),
        (b"Stopped ", VMStatus.STOPPED, "Stopped"),
        (b" ", VMStatus.NONEXISTENT, ""),
    ],
)
def test_known_statuses(out, want, logged):
    creator = FakeLimaCreator(FakeCommand(out))
    logger = RecordingLogger()
    assert get_vm_status(creator, logger, INSTANCE) == want
    assert creator.calls == [MOCK_ARGS]
    assert logger.calls == [("debug", "Status of virtual machine: %s", (logged,))]


def test_unknown_status():
    creator = FakeLimaCreator(FakeCommand(b"Broken "))
    logger = RecordingLogger()
    with pytest.raises(UnrecognizedStatusError, match="unrecognized system status"):
        get_vm_status(creator, logger, INSTANCE)
    assert logger.calls == [("debug", "Status of virtual machine: %s", ("Broken",))]


def test_command_error_propagates():
    creator = FakeLimaCreator(FakeCommand(b"Broken ", RuntimeError("get status error")))
    logger = RecordingLogger()
    with pytest.raises(RuntimeError, match="get status error"):
        get_vm_status(creator, logger, INSTANCE)
    assert logger.calls == []