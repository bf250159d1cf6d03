"""
Command-line interface for aws-unlock.
"""

import argparse
import math
import signal
import sys

from .core import (
    Command,
    Duration,
    as_profiles,
    get_aws_credentials_path,
    get_default_duration,
    list_profiles,
    lock_file,
    run_scoped,
)
from .errors import (
    EXIT_OK,
    EXIT_SIGNAL_BASE,
    AwsUnlockError,
    ProfileNotFound,
    RestorationFailure,
    TerminationRequested,
    quote_profiles,
)

USAGE = (
    "aws-unlock [--silent] [--credentials-file PATH] [--duration SECONDS] PROFILE... [-- COMMAND ...]\n"
    "       aws-unlock [--credentials-file PATH] --lock PROFILE...\n"
    "       aws-unlock [--credentials-file PATH] --lock-all\n"
    "       aws-unlock [--credentials-file PATH] --list"
)


def may_print(silent, *args, **kwargs):
    """Print an informational line to stderr unless --silent was given."""
    if not silent:
        print(*args, file=sys.stderr, **kwargs)


def describe(profiles):
    """Return "profile 'a'" or "profiles 'a', 'b'" for messages."""
    noun = "profile" if len(profiles) == 1 else "profiles"
    return f"{noun} {quote_profiles(profiles)}"


def non_negative_int(value):
    try:
        seconds = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid number of seconds: {value!r}")
    if seconds < 0:
        raise argparse.ArgumentTypeError(f"duration must not be negative: {seconds}")
    return seconds


def split_command(argv):
    """Split argv at the first '--' into (own arguments, command or None)."""
    if "--" not in argv:
        return argv, None
    index = argv.index("--")
    return argv[:index], argv[index + 1 :]


def build_parser():
    parser = argparse.ArgumentParser(
        prog="aws-unlock",
        usage=USAGE,
        description="Keep AWS credentials commented out and unlock profiles only when needed",
        epilog="Examples:\n"
        "  aws-unlock dev                        # Unlock 'dev' for 60 seconds\n"
        "  aws-unlock --duration 300 dev         # Unlock 'dev' for 5 minutes\n"
        "  aws-unlock dev ci                     # Unlock 'dev' and 'ci' together\n"
        "  aws-unlock dev -- aws s3 ls           # Unlock 'dev' while the command runs\n"
        "  aws-unlock --lock-all                 # Comment out every profile's credentials\n"
        "  aws-unlock --list                     # Show profiles and their lock state\n"
        "\n"
        "Environment:\n"
        "  AWS_SHARED_CREDENTIALS_FILE           Credentials file (default: ~/.aws/credentials)\n"
        "  AWS_UNLOCK_DURATION                   Default unlock duration in seconds (default: 60)",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--silent",
        action="store_true",
        help="Do not print progress messages (errors are still printed)",
    )
    parser.add_argument(
        "--credentials-file",
        metavar="PATH",
        default=None,
        help="Credentials file to operate on (overrides AWS_SHARED_CREDENTIALS_FILE)",
    )
    parser.add_argument(
        "--duration",
        metavar="SECONDS",
        type=non_negative_int,
        default=None,
        help="How long to keep the profiles unlocked (default: 60, or AWS_UNLOCK_DURATION)",
    )

    actions = parser.add_mutually_exclusive_group()
    actions.add_argument(
        "--lock",
        action="store_true",
        help="Lock the given profiles instead of unlocking them",
    )
    actions.add_argument(
        "--lock-all",
        action="store_true",
        help="Lock the credentials of every profile",
    )
    actions.add_argument(
        "--list",
        action="store_true",
        help="List profiles with their lock state",
    )

    parser.add_argument(
        "profiles",
        nargs="*",
        metavar="PROFILE",
        help="Profiles (section names in the credentials file) to unlock",
    )
    return parser


def print_profiles(path):
    profiles = list_profiles(path)
    if not profiles:
        print(f"No profiles found in {path}", file=sys.stderr)
        return
    width = max(len(name) for name, _, _ in profiles)
    for name, status, is_production in profiles:
        suffix = "  (production)" if is_production else ""
        print(f"{name.ljust(width)}  {status}{suffix}")


def lock_profiles(path, profiles, silent):
    changed = lock_file(path, profiles)
    if profiles is None:
        if changed:
            may_print(silent, f"✓ Locked {changed} credential line(s) in {path}")
        else:
            may_print(silent, "ℹ All profiles are already locked")
    elif changed:
        may_print(silent, f"✓ Locked {describe(profiles)}")
    else:
        may_print(silent, f"ℹ No unlocked credentials to lock in {describe(profiles)}")


def unlock_profiles(path, profiles, mode, silent):
    for name, _, is_production in list_profiles(path):
        if name in profiles and is_production:
            print(f"⚠ Profile '{name}' is marked as production", file=sys.stderr)

    def on_unlock(count):
        if count:
            may_print(silent, f"✓ Unlocked {describe(profiles)}")
        else:
            may_print(silent, f"ℹ No locked credentials to unlock in {describe(profiles)}")

    def on_tick(remaining):
        may_print(
            silent,
            f"\r⏳ {quote_profiles(profiles)} unlocked, relocking in {math.ceil(remaining)}s ",
            end="",
            flush=True,
        )

    status = run_scoped(path, profiles, mode, on_tick=on_tick, on_unlock=on_unlock)
    if isinstance(mode, Duration) and mode.seconds > 0:
        may_print(silent)
    may_print(silent, f"✓ Relocked {describe(profiles)}")
    return status


def main(argv=None):
    """Main CLI entry point."""
    if argv is None:
        argv = sys.argv[1:]
    own_args, command = split_command(list(argv))

    parser = build_parser()
    args = parser.parse_args(own_args)

    if args.list or args.lock_all:
        if args.profiles or command is not None:
            parser.error("--list and --lock-all do not take a profile or a command")
    elif not args.profiles:
        parser.error("at least one profile is required")
    elif args.lock and command is not None:
        parser.error("--lock does not take a command")

    profiles = as_profiles(args.profiles) if args.profiles else None

    mode = None
    if command is not None:
        if not command:
            parser.error("missing command after '--'")
        if args.duration is not None:
            parser.error("--duration cannot be combined with a command")
        mode = Command(command)
    elif not (args.list or args.lock_all or args.lock):
        try:
            seconds = args.duration if args.duration is not None else get_default_duration()
        except ValueError as e:
            parser.error(str(e))
        mode = Duration(seconds)

    path = args.credentials_file or get_aws_credentials_path()

    try:
        if args.list:
            print_profiles(path)
            return EXIT_OK
        if args.lock_all:
            lock_profiles(path, None, args.silent)
            return EXIT_OK
        if args.lock:
            lock_profiles(path, profiles, args.silent)
            return EXIT_OK
        return unlock_profiles(path, profiles, mode, args.silent)

    except RestorationFailure as e:
        print(file=sys.stderr)
        print(f"Error: Failed to restore {e.path}", file=sys.stderr)
        print(f"Details: {e}", file=sys.stderr)
        print(
            f"⚠ Credentials for {describe(e.profiles)} may still be UNLOCKED on disk.",
            file=sys.stderr,
        )
        print(f"  To fix: aws-unlock --lock {' '.join(e.profiles)}", file=sys.stderr)
        return e.exit_code
    except ProfileNotFound as e:
        print(f"Error: {e} in {path}", file=sys.stderr)
        print("  Run 'aws-unlock --list' to see the available profiles", file=sys.stderr)
        return e.exit_code
    except AwsUnlockError as e:
        print(f"Error: {e}", file=sys.stderr)
        return e.exit_code
    except KeyboardInterrupt:
        print(file=sys.stderr)
        print("⚠ Interrupted", file=sys.stderr)
        return EXIT_SIGNAL_BASE + signal.SIGINT
    except TerminationRequested as e:
        print(f"⚠ Terminated by signal {e.signum}", file=sys.stderr)
        return e.exit_code


if __name__ == "__main__":
    sys.exit(main())
