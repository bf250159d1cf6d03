"""
Core credentials file handling and scoped unlocking for aws-unlock.
"""

import os
import signal
import subprocess
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

import botocore.session

from .document import Document
from .errors import (
    EXIT_SIGNAL_BASE,
    ChildSpawnFailure,
    IoFailure,
    RestorationFailure,
    TerminationRequested,
)
from .lock import lock_all, lock_profiles, unlock_profiles

DEFAULT_UNLOCK_SECONDS = 60
DURATION_ENV_VAR = "AWS_UNLOCK_DURATION"

# SIGINT is delivered as KeyboardInterrupt already
TRAPPED_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)
)


def get_aws_credentials_path():
    """Get the AWS credentials file path (honours AWS_SHARED_CREDENTIALS_FILE)."""
    session = botocore.session.get_session()
    return os.path.expanduser(session.get_config_variable("credentials_file"))


def get_default_duration():
    """
    Get the default unlock duration in seconds.

    Returns:
        int: AWS_UNLOCK_DURATION if set, otherwise 60

    Raises:
        ValueError: If AWS_UNLOCK_DURATION is not a non-negative integer
    """
    value = os.environ.get(DURATION_ENV_VAR, "").strip()
    if not value:
        return DEFAULT_UNLOCK_SECONDS
    try:
        seconds = int(value)
    except ValueError:
        raise ValueError(f"{DURATION_ENV_VAR} must be a whole number of seconds, got {value!r}")
    if seconds < 0:
        raise ValueError(f"{DURATION_ENV_VAR} must not be negative, got {seconds}")
    return seconds


def read_credentials_text(path):
    """
    Read the credentials file verbatim (no newline translation).

    Raises:
        IoFailure: If the file cannot be read or is not valid UTF-8
    """
    try:
        with open(path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except OSError as e:
        raise IoFailure(path, "read", e.strerror or e) from e
    except UnicodeDecodeError as e:
        raise IoFailure(path, "read", e) from e


def write_credentials_text(path, text):
    """
    Write the credentials file with secure permissions.

    Raises:
        IoFailure: If the file cannot be written
    """
    try:
        Path(path).parent.mkdir(parents=True, exist_ok=True)

        # Create with 0600 directly so the file is never briefly world-readable
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            f = os.fdopen(fd, "w", encoding="utf-8", newline="")
        except Exception:
            os.close(fd)
            raise
        with f:
            f.write(text)
    except OSError as e:
        raise IoFailure(path, "write", e.strerror or e) from e


def as_profiles(profiles):
    """
    Normalise a profile name or a sequence of names to a tuple.

    Raises:
        ValueError: If no profile is given
    """
    if isinstance(profiles, str):
        profiles = (profiles,)
    profiles = tuple(dict.fromkeys(profiles))
    if not profiles:
        raise ValueError("At least one profile is required")
    return profiles


def lock_file(path, profiles=None):
    """
    Lock some profiles, or every profile, in a credentials file.

    The file is only rewritten if something changed.

    Args:
        path: Credentials file path
        profiles: Profile name or list of names, or None to lock all profiles

    Returns:
        int: number of entries locked

    Raises:
        ProfileNotFound: Naming every requested profile that does not exist
        IoFailure: If the file cannot be read or written
    """
    document = Document.parse(read_credentials_text(path))
    if profiles is None:
        changed = lock_all(document)
    else:
        changed = lock_profiles(document, as_profiles(profiles))
    if changed:
        write_credentials_text(path, document.serialize())
    return changed


def list_profiles(path):
    """
    List profiles in a credentials file with their lock state.

    Returns:
        list of (name, status, is_production) tuples in file order
    """
    document = Document.parse(read_credentials_text(path))
    return [
        (name, document.profile_status(name), document.is_production(name))
        for name in document.profile_names()
    ]


def sleep_observed(total, interval, inspect=None):
    """
    Sleep for ``total`` seconds, reporting the remaining time periodically.

    ``inspect(remaining)`` is called right away and then every ``interval``
    seconds for as long as time remains.
    """
    start = time.monotonic()
    deadline = start + total
    next_inspection = start
    while True:
        now = time.monotonic()
        remaining = deadline - now
        if remaining <= 0:
            return
        if inspect is None:
            time.sleep(remaining)
            continue
        if now >= next_inspection:
            inspect(remaining)
            next_inspection += interval
        time.sleep(max(0.0, min(deadline, next_inspection) - time.monotonic()))


@dataclass(frozen=True)
class Duration:
    """Keep the profile unlocked for a fixed number of seconds."""

    seconds: float

    def __post_init__(self):
        if self.seconds < 0:
            raise ValueError(f"Duration must not be negative, got {self.seconds}")


@dataclass(frozen=True)
class Command:
    """Keep the profile unlocked while a command runs."""

    argv: tuple

    def __post_init__(self):
        object.__setattr__(self, "argv", tuple(self.argv))
        if not self.argv:
            raise ValueError("Command must not be empty")


def run_command(argv):
    """
    Run a command with inherited stdin/stdout/stderr and wait for it.

    Returns:
        int: the command's exit status (128+N if it was killed by signal N)

    Raises:
        ChildSpawnFailure: If the command cannot be launched
    """
    try:
        completed = subprocess.run(list(argv))
    except OSError as e:
        raise ChildSpawnFailure(argv[0], e.strerror or e) from e
    if completed.returncode < 0:
        return EXIT_SIGNAL_BASE - completed.returncode
    return completed.returncode


def _raise_termination(signum, frame):
    raise TerminationRequested(signum)


def _trap_signals():
    """
    Turn SIGTERM/SIGHUP into TerminationRequested. Returns the previous handlers.

    Signals that are already ignored (SIGHUP under nohup) stay ignored.
    """
    if threading.current_thread() is not threading.main_thread():
        return None
    previous = {signal.SIGINT: signal.getsignal(signal.SIGINT)}
    for signum in TRAPPED_SIGNALS:
        if signal.getsignal(signum) == signal.SIG_IGN:
            continue
        previous[signum] = signal.signal(signum, _raise_termination)
    return previous


def _hold_signals(previous):
    if previous is None:
        return
    for signum in previous:
        signal.signal(signum, signal.SIG_IGN)


def _release_signals(previous):
    if previous is None:
        return
    for signum, handler in previous.items():
        signal.signal(signum, handler if handler is not None else signal.SIG_DFL)


def restore_snapshot(path, profiles, snapshot):
    """
    Write the pre-unlock file text back.

    Raises:
        RestorationFailure: If the write fails
    """
    try:
        write_credentials_text(path, snapshot)
    except IoFailure as e:
        raise RestorationFailure(path, profiles, e.reason) from e


@contextmanager
def scoped_unlock(path, profiles):
    """
    Unlock one or more profiles for the duration of a ``with`` block.

    All profiles are unlocked from a single snapshot of the file. The text
    read on entry is written back on exit no matter how the block ends:
    normal exit, an exception, Ctrl-C, or SIGTERM/SIGHUP. Signals are
    ignored while that write happens.

    Args:
        path: Credentials file path
        profiles: Profile name or list of names

    Yields:
        int: number of entries that were unlocked

    Raises:
        ProfileNotFound: Before anything is written, naming every missing profile
        IoFailure: Before anything is written, if the file cannot be read
        RestorationFailure: If writing the original text back fails
    """
    profiles = as_profiles(profiles)
    snapshot = read_credentials_text(path)
    document = Document.parse(snapshot)
    unlocked = unlock_profiles(document, profiles)

    previous = _trap_signals()
    try:
        write_credentials_text(path, document.serialize())
        yield unlocked
    finally:
        _hold_signals(previous)
        try:
            restore_snapshot(path, profiles, snapshot)
        finally:
            _release_signals(previous)


def run_scoped(path, profiles, mode, on_tick=None, tick_interval=1.0, on_unlock=None):
    """
    Unlock profiles, wait or run a command, then restore the file.

    Args:
        path: Credentials file path
        profiles: Profile name or list of names to unlock
        mode: Duration or Command
        on_tick: Optional callback receiving the remaining seconds (Duration only)
        tick_interval: Seconds between on_tick calls
        on_unlock: Optional callback receiving the number of unlocked entries,
            called once the unlocked file has been written

    Returns:
        int: 0 for Duration, the command's exit status for Command
    """
    if not isinstance(mode, (Duration, Command)):
        raise TypeError(f"Unsupported unlock mode: {mode!r}")

    with scoped_unlock(path, profiles) as unlocked:
        if on_unlock is not None:
            on_unlock(unlocked)
        if isinstance(mode, Duration):
            sleep_observed(mode.seconds, tick_interval, on_tick)
            return 0
        return run_command(mode.argv)
