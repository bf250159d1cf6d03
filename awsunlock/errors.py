"""
Error kinds for aws-unlock and the exit codes the CLI reports for them.
"""

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_PROFILE_NOT_FOUND = 3
EXIT_IO_FAILURE = 4
EXIT_RESTORATION_FAILED = 5
EXIT_SPAWN_FAILURE = 127
EXIT_SIGNAL_BASE = 128


def quote_profiles(profiles):
    """Format profile names as ``'a', 'b'``."""
    return ", ".join(f"'{profile}'" for profile in profiles)


class AwsUnlockError(Exception):
    """Base class for all aws-unlock failures."""

    exit_code = EXIT_FAILURE


class ProfileNotFound(AwsUnlockError):
    """One or more requested profiles have no section in the file."""

    exit_code = EXIT_PROFILE_NOT_FOUND

    def __init__(self, *profiles):
        if len(profiles) == 1:
            message = f"Profile '{profiles[0]}' not found"
        else:
            message = "Profiles not found: " + quote_profiles(profiles)
        super().__init__(message)
        self.profiles = profiles
        self.profile = profiles[0]


class IoFailure(AwsUnlockError):
    """The credentials file could not be read or written."""

    exit_code = EXIT_IO_FAILURE

    def __init__(self, path, action, reason):
        super().__init__(f"Failed to {action} {path}: {reason}")
        self.path = path
        self.action = action
        self.reason = reason


class ChildSpawnFailure(AwsUnlockError):
    """The wrapped command could not be launched."""

    exit_code = EXIT_SPAWN_FAILURE

    def __init__(self, command, reason):
        super().__init__(f"Failed to run '{command}': {reason}")
        self.command = command
        self.reason = reason


class RestorationFailure(AwsUnlockError):
    """
    Writing the pre-unlock snapshot back failed.

    The credentials file may be left with profiles unlocked, so this is
    the one failure that must never be reported quietly.
    """

    exit_code = EXIT_RESTORATION_FAILED

    def __init__(self, path, profiles, reason):
        if isinstance(profiles, str):
            profiles = (profiles,)
        profiles = tuple(profiles)
        noun = "profile" if len(profiles) == 1 else "profiles"
        super().__init__(
            f"Failed to relock {noun} {quote_profiles(profiles)} in {path}: {reason}"
        )
        self.path = path
        self.profiles = profiles
        self.reason = reason


class TerminationRequested(BaseException):
    """
    Raised from a signal handler when SIGTERM or SIGHUP arrives while unlocked.

    Derives from BaseException, like KeyboardInterrupt, so generic
    ``except Exception`` handlers let it through.
    """

    def __init__(self, signum):
        super().__init__(f"Received signal {signum}")
        self.signum = signum

    @property
    def exit_code(self):
        return EXIT_SIGNAL_BASE + self.signum
