"""
aws-unlock: Keep AWS credentials locked and unlock them only when needed.

A Python CLI utility that keeps the entries of the AWS shared credentials file
commented out by default. A profile is unlocked only for a bounded window,
either a fixed number of seconds or the lifetime of a wrapped command, and the
file is put back exactly as it was afterwards, even when the command fails or
the process is interrupted.

Key features:
- Lock all profiles, or selected profiles, in ~/.aws/credentials
- Unlock one or more profiles for a fixed duration with a countdown
- Unlock a profile only while a command runs: aws-unlock dev -- aws s3 ls
- Guaranteed restoration on Ctrl-C, SIGTERM and SIGHUP
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .core import (
    Command,
    Duration,
    get_aws_credentials_path,
    list_profiles,
    lock_file,
    read_credentials_text,
    run_scoped,
    scoped_unlock,
    write_credentials_text,
)
from .document import Document
from .errors import (
    AwsUnlockError,
    ChildSpawnFailure,
    IoFailure,
    ProfileNotFound,
    RestorationFailure,
    TerminationRequested,
)
from .lines import Entry, Opaque, SectionHeader
from .lock import lock_all, lock_one, lock_profiles, unlock_one, unlock_profiles

__all__ = [
    # Python API - Most commonly used for programmatic access
    "run_scoped",
    "scoped_unlock",
    "lock_file",
    "list_profiles",
    "Duration",
    "Command",
    # Credentials file
    "get_aws_credentials_path",
    "read_credentials_text",
    "write_credentials_text",
    "Document",
    "SectionHeader",
    "Entry",
    "Opaque",
    # Lock engine
    "lock_all",
    "lock_one",
    "unlock_one",
    "lock_profiles",
    "unlock_profiles",
    # Errors
    "AwsUnlockError",
    "ProfileNotFound",
    "IoFailure",
    "ChildSpawnFailure",
    "RestorationFailure",
    "TerminationRequested",
]
