"""Command-line interface for fyi."""

import argparse
import sys
from dataclasses import dataclass
from typing import IO, Optional

from .errors import InvalidColorError, WriteFailureError
from .cli_builder import build_arg_parser
from .msg.kind import CustomKind, TargetStream, kind_from_name
from .msg.message import Message, build_message, resolve_stream, write_bytes

EXIT_INTERRUPTED = 130


@dataclass(frozen=True)
class Settings:
    """Options shared by every message command."""

    indent: int = 0
    timestamp: bool = False
    stderr: bool = False
    exit_code: int = 0
    no_color: bool = False
    assume_yes: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "Settings":
        return cls(
            indent=getattr(args, "indent", 0),
            timestamp=getattr(args, "timestamp", False),
            stderr=getattr(args, "stderr", False),
            exit_code=getattr(args, "exit_code", 0),
            no_color=getattr(args, "no_color", False),
            assume_yes=getattr(args, "assume_yes", False),
        )

    @property
    def target(self) -> Optional[TargetStream]:
        return TargetStream.STDERR if self.stderr else None

    @property
    def force_terminal(self) -> Optional[bool]:
        # force_terminal=False makes Rich report "not a terminal", which
        # disables color without touching the environment.
        return False if self.no_color else None


class CLI:
    """Command-line interface for fyi."""

    def __init__(self, stdin: Optional[IO[str]] = None):
        self.parser = build_arg_parser()
        self.stdin = stdin

    def run(self, argv: Optional[list[str]] = None) -> int:
        """Run the CLI.

        Args:
            argv: Command-line arguments (defaults to sys.argv[1:])

        Returns:
            Exit code
        """
        args = self.parser.parse_args(argv)
        if args.command is None:
            self.parser.print_help()
            return 0

        settings = Settings.from_args(args)
        try:
            if args.command == "blank":
                return self._print_blank(args.count, settings)
            message = self._build_message(args, settings)
            if message.is_confirm:
                confirmed = message.prompt(
                    input_stream=self.stdin,
                    force_terminal=settings.force_terminal,
                    assume_yes=settings.assume_yes,
                )
                return settings.exit_code if confirmed else 1
            message.print(force_terminal=settings.force_terminal)
            return settings.exit_code
        except InvalidColorError as e:
            self._report(e)
            return 1
        except WriteFailureError:
            # Nowhere left to report a broken stream.
            return 1
        except KeyboardInterrupt:
            return EXIT_INTERRUPTED

    def _build_message(self, args: argparse.Namespace, settings: Settings) -> Message:
        if args.command == "print":
            kind = CustomKind(args.prefix, args.prefix_color)
        else:
            kind = kind_from_name(args.command)

        return build_message(
            kind,
            args.msg,
            indent_level=settings.indent,
            show_timestamp=settings.timestamp,
            target_stream=settings.target,
        )

    def _print_blank(self, count: int, settings: Settings) -> int:
        target = TargetStream.STDERR if settings.stderr else TargetStream.STDOUT
        write_bytes(resolve_stream(target), b"\n" * max(count, 1))
        return 0

    def _report(self, error: Exception) -> None:
        try:
            Message.error(str(error)).print()
        except WriteFailureError:
            pass


def main() -> int:
    """Main entry point."""
    cli = CLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
