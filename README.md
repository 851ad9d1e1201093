# finchkit

Building blocks for looking after a Lima-managed container virtual machine:
working out where its files live, keeping its user data disk on persistent
storage, installing the rootful networking dependencies, and collecting a
redacted support bundle for bug reports.

## Installation

```
pip install finchkit
```

To run the test suite:

```
pip install "finchkit[test]"
pytest
```

## Modules

- `finchkit.paths`: `FinchPath` is a `str` subclass for the install root. Its
  methods return the paths below it: `lima_home_path()`,
  `lima_instance_path()`, `limactl_path()`, `qemu_bin_dir()`,
  `base_yaml_file_path()`, `lima_config_directory_path()`,
  `lima_override_config_path()`, `lima_ssh_private_key_path()`,
  `config_file_path(home_dir)`, and `user_data_disk_path(home_dir)`. The last
  one is named by `path_sum()`, the hex of the first 8 bytes of the SHA-256
  of the instance path. `find_finch(deps)` resolves the running executable
  and goes two directories up (`root/bin/finch`). It raises
  `FinchNotFoundError` on failure.
- `finchkit.lima`: the `Command`, `CommandCreator` and `LimaCmdCreator`
  protocols. `get_vm_status(creator, logger, instance_name)` runs
  `ls -f {{.Status}} <name>` and maps the output to `VMStatus`
  (`RUNNING`, `STOPPED`, `NONEXISTENT` for empty output). Any other status
  raises `UnrecognizedStatusError`.
- `finchkit.disk`: `UserDataDiskManager(lcc, ecc, finch, home_dir, vm_type)`.
  Its `ensure_user_data_disk()` does the following:
  - creates the Lima `finch` disk (50G, raw) if it does not exist;
  - moves the disk to the persistent path and symlinks it back;
  - when `vm_type == "vz"`, converts a non-raw disk to raw with `qemu-img`;
  - unlocks the disk if it is marked in use.

  Failures raise `DiskError`. `QemuDiskInfo` holds the parsed
  `qemu-img info` fields.
- `finchkit.dependency`: the `Dependency` protocol (`requires_root()`,
  `installed()`, `install()`) and `Group(deps, desc, err_msg)`.
  `Group.install_optional(logger)` installs the missing dependencies in order.
  It logs the description once before the first one that needs root, and
  collects failures. `install_optional_deps(groups, logger)` continues past
  failed groups. Both raise `DependencyInstallError`, whose `errors` lists
  the individual failures.
- `finchkit.vmnet_binaries`: `Binaries` compares the socket_vmnet build
  output with `/opt/finch/bin/socket_vmnet`. It installs with
  `sudo mkdir`, `sudo cp -rp` and `sudo chown` through the given
  `CommandCreator`.
- `finchkit.vmnet_sudoers`: `SudoersFile` compares
  `/etc/sudoers.d/finch-lima` with `limactl sudoers` output. It installs
  through `sudo tee`.
- `finchkit.vmnet`: `OverrideLimaConfig` appends the `finch-shared` network
  section to Lima's override config. It does so only once the binaries and
  the sudoers file are installed. `new_deps(...)` returns the three
  dependencies in order. `new_dependency_group(...)` wraps them in a
  `Group`.

  These modules take an optional `root` argument. `Binaries` and
  `SudoersFile` use it to relocate their file reads below another directory.
- `finchkit.support`: `BundleBuilder(logger, config, finch, ecc, output_dir)`.
  Its `generate_support_bundle(additional_files, exclude_files)` writes
  `finch-support-<timestamp>.zip` into `output_dir` and returns its path. The
  zip holds:
  - `platform.yaml`, from `sw_vers -productVersion`, `uname -m` and
    `support.VERSION`;
  - redacted copies of the log, config and additional files.

  Files that cannot be read are logged as warnings and skipped. The module
  also provides `PlatformData`, `write_platform_data`, `bundle_file_name`
  and `file_should_be_excluded`. A file is excluded by its absolute path or
  by its base name.
- `finchkit.bundle_config`: `BundleConfig(finch, home_dir)` lists the Lima
  host-agent logs, the serial log, `lima.yaml` and the user config file.
- `finchkit.redact`: functions that take and return `str`:
  - `redact_finch_install` and `redact_username` treat their argument as a
    regular expression;
  - `redact_network_addresses` covers IPv4 addresses with an optional port,
    IPv6 and MAC addresses;
  - `redact_ports` replaces only ports in known contexts;
  - `redact_ssh_keys` covers the VM's host keys.
- `finchkit.fssh`: `new_client_config(user, private_key_path)` loads an RSA,
  ECDSA or Ed25519 key into a `ClientConfig`. `Dialer().dial(host, port,
  config)` connects with paramiko. `LoopbackOnlyPolicy` rejects unknown
  host keys from non-loopback addresses.
- `finchkit.flog`: the `Logger` protocol, `Level` (`DEBUG`, `PANIC`), and
  `StdLogger`, backed by `logging`. Its `fatal()` exits with status 1.
- `finchkit.system`: `StdLib`, which gives access to the executable path,
  symlink resolution, path joining, environment, standard streams, CPU
  count, architecture and OS name.
- `finchkit.memory`: `Memory().total_memory()` returns total physical
  memory in bytes, using psutil.

## Example

```python
from finchkit.paths import FinchPath
from finchkit.redact import redact_network_addresses

finch = FinchPath("/Applications/Finch")
print(finch.limactl_path())        # /Applications/Finch/lima/bin/limactl
print(redact_network_addresses("listening on 127.0.0.1:8080"))
# listening on <ip-address-elided>
```

## What it does not do

finchkit is a library only. It has no command-line program and does not
start or stop the virtual machine. It also does not run external commands
itself. Anything that runs `limactl`, `qemu-img`, `sudo` or the
platform-query commands must be passed in as a `CommandCreator` or
`LimaCmdCreator`.