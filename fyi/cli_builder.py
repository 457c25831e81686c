"""Factory for constructing the CLI argument parser."""

import argparse

from . import __version__
from .msg.kind import BuiltInKind

DEFAULT_PREFIX_COLOR = 199

MESSAGE_COMMANDS = [
    ("confirm", "Ask a Yes/No question", ["prompt"]),
    ("crunched", "Crunched: Hello World", []),
    ("debug", "Debug: Hello World", []),
    ("done", "Done: Hello World", []),
    ("error", "Error: Hello World", []),
    ("info", "Info: Hello World", []),
    ("notice", "Notice: Hello World", []),
    ("success", "Success: Hello World", []),
    ("task", "Task: Hello World", []),
    ("warning", "Warning: Hello World", []),
    ("print", "A message with a custom prefix (or none)", []),
]


def _exit_code(value: str) -> int:
    try:
        code = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid exit code: {value!r}")
    if not 0 <= code <= 255:
        raise argparse.ArgumentTypeError(f"exit code must be between 0 and 255, got {code}")
    return code


def _positive_count(value: str) -> int:
    try:
        count = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid count: {value!r}")
    return max(count, 1)


def _add_message_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("msg", metavar="MSG", help="The message")
    parser.add_argument(
        "-i",
        "--indent",
        action="count",
        default=0,
        help="Indent the line one level (4 spaces); repeat for more",
    )
    parser.add_argument(
        "-t",
        "--timestamp",
        action="store_true",
        help="Include a timestamp",
    )
    parser.add_argument(
        "--stderr",
        action="store_true",
        help="Print to STDERR instead of STDOUT",
    )
    parser.add_argument(
        "-e",
        "--exit",
        dest="exit_code",
        type=_exit_code,
        default=0,
        metavar="NUM",
        help="Exit with this status code after printing (default: 0)",
    )
    parser.add_argument(
        "--no-color",
        dest="no_color",
        action="store_true",
        help="Disable ANSI colors",
    )


def build_arg_parser() -> argparse.ArgumentParser:
    """Construct the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="fyi",
        description="fyi - a dead-simple CLI status message printer",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    for name, help_text, aliases in MESSAGE_COMMANDS:
        sub = subparsers.add_parser(name, help=help_text, aliases=aliases)
        sub.set_defaults(command=name)
        _add_message_options(sub)

        if name == BuiltInKind.CONFIRM.value:
            sub.add_argument(
                "-y",
                "--yes",
                dest="assume_yes",
                action="store_true",
                help="Assume the answer is yes",
            )
        elif name == "print":
            sub.add_argument(
                "-p",
                "--prefix",
                default="",
                metavar="PREFIX",
                help="Set a custom prefix",
            )
            sub.add_argument(
                "-c",
                "--prefix-color",
                dest="prefix_color",
                type=int,
                default=DEFAULT_PREFIX_COLOR,
                metavar="NUM",
                help=f"Prefix color, 1-255 (default: {DEFAULT_PREFIX_COLOR})",
            )

    blank = subparsers.add_parser("blank", help="Print blank line(s)")
    blank.set_defaults(command="blank")
    blank.add_argument(
        "-c",
        "--count",
        type=_positive_count,
        default=1,
        metavar="NUM",
        help="Number of blank lines to print (default: 1)",
    )
    blank.add_argument(
        "--stderr",
        action="store_true",
        help="Print to STDERR instead of STDOUT",
    )

    return parser
