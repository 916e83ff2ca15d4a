"""Configuration events describing the running process and its build."""

import getpass
import os
import socket
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .aggregator import aggregate_all
from .errors import LogberryError, wrap_error
from .models import EventClass
from .task import Task


@dataclass
class RepositoryMetadata:
    """Source control state of one repository included in a build."""

    repository: str = ""
    branch: str = ""
    commit: str = ""
    dirty: bool = False
    path: str = ""


@dataclass
class BuildMetadata:
    """Basic properties characterizing the build of a program."""

    host: str = ""
    user: str = ""
    date: str = ""
    repositories: list[RepositoryMetadata] = field(default_factory=list)


def _configuration(task: Task, message: str, *data: Any) -> None:
    # Configuration is reported even from a muted task.
    task.root.event(task, EventClass.CONFIGURATION, message, aggregate_all(task.data, *data))


def _fail(task: Task, message: str, exc: BaseException) -> LogberryError:
    err = wrap_error(message, exc)
    task.root.internal_error(err)
    return err


def configuration_event(task: Task, *data: Any) -> None:
    """Report parameters or other initialization data."""
    _configuration(task, "Configuration", *data)


def command_line_event(task: Task) -> LogberryError | None:
    """Report the command line that started the process."""
    try:
        host = socket.gethostname()
    except OSError as exc:
        return _fail(task, "Could not retrieve hostname", exc)

    try:
        user = getpass.getuser()
    except (OSError, KeyError) as exc:
        return _fail(task, "Could not retrieve user info", exc)

    argv = sys.argv or [""]
    try:
        path = str(Path(argv[0]).parent.resolve())
    except (OSError, RuntimeError) as exc:
        return _fail(task, "Could not retrieve program path", exc)

    _configuration(task, "Command line", {
        "Host": host,
        "User": user,
        "Path": path,
        "Program": Path(argv[0]).name,
        "Args": list(argv[1:]),
    })
    return None


def environment_event(task: Task) -> None:
    """Report the environment variables of the process."""
    _configuration(task, "Environment", dict(os.environ))


def process_event(task: Task) -> LogberryError | None:
    """Report identifiers of the running process."""
    try:
        host = socket.gethostname()
    except OSError as exc:
        return _fail(task, "Could not retrieve hostname", exc)

    try:
        wd = os.getcwd()
    except OSError as exc:
        return _fail(task, "Could not retrieve working dir", exc)

    try:
        user = getpass.getuser()
    except (OSError, KeyError) as exc:
        return _fail(task, "Could not retrieve user info", exc)

    data: dict[str, Any] = {"Host": host, "WD": wd, "User": user, "PID": os.getpid()}
    if hasattr(os, "getuid"):
        data["UID"] = os.getuid()

    _configuration(task, "Process", data)
    return None


def build_metadata_event(task: Task, build: BuildMetadata) -> None:
    """Report the build configuration captured in ``build``."""
    _configuration(task, "Build metadata", build)


def build_signature_event(task: Task, signature: str) -> None:
    """Report the build configuration captured as a single string."""
    _configuration(task, "Build signature", {"Signature": signature})
