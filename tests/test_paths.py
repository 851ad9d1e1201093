import pytest

from finchkit.paths import FinchNotFoundError, FinchPath, find_finch

MOCK_FINCH = FinchPath("mock_finch")


def test_config_file_path():
    assert MOCK_FINCH.config_file_path("homeDir") == "homeDir/.finch/finch.yaml"


def test_user_data_disk_path():
    assert MOCK_FINCH.user_data_disk_path("homeDir") == (
        f"homeDir/.finch/.disks/{MOCK_FINCH.path_sum()}"
    )


def test_path_sum_is_sixteen_hex_digits():
    total = MOCK_FINCH.path_sum()
    assert len(total) == 16
    int(total, 16)
    assert FinchPath("other").path_sum() != total


def test_lima_home_path():
    assert MOCK_FINCH.lima_home_path() == "mock_finch/lima/data"


def test_lima_instance_path():
    assert MOCK_FINCH.lima_instance_path() == "mock_finch/lima/data/finch"


def test_limactl_path():
    assert MOCK_FINCH.limactl_path() == "mock_finch/lima/bin/limactl"


def test_base_yaml_file_path():
    assert MOCK_FINCH.base_yaml_file_path() == "mock_finch/os/finch.yaml"


def test_lima_config_directory_path():
    assert MOCK_FINCH.lima_config_directory_path() == "mock_finch/lima/data/_config"


def test_lima_override_config_path():
    assert MOCK_FINCH.lima_override_config_path() == (
        "mock_finch/lima/data/_config/override.yaml"
    )


def test_lima_ssh_private_key_path():
    assert MOCK_FINCH.lima_ssh_private_key_path() == "mock_finch/lima/data/_config/user"


def test_qemu_bin_dir():
    assert MOCK_FINCH.qemu_bin_dir() == "mock_finch/lima/bin"


class FakeDeps:
    def __init__(self, exe=None, exe_error=None, real=None, real_error=None):
        self.exe = exe
        self.exe_error = exe_error
        self.real = real
        self.real_error = real_error
        self.calls = []

    def executable(self):
        self.calls.append(("executable",))
        if self.exe_error:
            raise self.exe_error
        return self.exe

    def eval_symlinks(self, path):
        self.calls.append(("eval_symlinks", path))
        if self.real_error:
            raise self.real_error
        return self.real

    def file_path_join(self, *args):
        self.calls.append(("file_path_join",) + args)
        return "/real"


def test_find_finch_happy_path():
    deps = FakeDeps(exe="/bin/path", real="/real/bin/path")
    assert find_finch(deps) == FinchPath("/real")
    assert deps.calls == [
        ("executable",),
        ("eval_symlinks", "/bin/path"),
        ("file_path_join", "/real/bin/path", "../../"),
    ]


def test_find_finch_executable_error():
    deps = FakeDeps(exe_error=OSError("failed to find executable path"))
    with pytest.raises(FinchNotFoundError) as excinfo:
        find_finch(deps)
    assert str(excinfo.value) == (
        "failed to locate the executable that starts this process: "
        "failed to find executable path"
    )


def test_find_finch_real_path_error():
    deps = FakeDeps(exe="/bin/path", real_error=OSError("failed to find real path"))
    with pytest.raises(FinchNotFoundError) as excinfo:
        find_finch(deps)
    assert str(excinfo.value) == (
        "failed to find the real path of the executable: failed to find real path"
    )
    assert ("file_path_join", "/real/bin/path", "../../") not in deps.calls