import argparse
import logging
import os
import sys
import textwrap
from functools import wraps
from pathlib import Path

from . import Settings, MalformedInputError, decode, encode, encoded_length
from .settings import (
    SETTING_LOGGING_LEVEL,
    SETTING_LOGGING_PATH,
    SETTING_OUTPUT_SEPARATOR,
    SETTING_OUTPUT_UPPERCASE,
)
from .utils.profiling import profile_main

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Rows of the tier table: (first tag, last tag, smallest value, largest value)
TIERS = [
    (0x00, 0xF0, 0, 240),
    (0xF1, 0xF8, 241, 2287),
    (0xF9, 0xF9, 2288, 67823),
    (0xFA, 0xFA, 67824, (1 << 24) - 1),
    (0xFB, 0xFB, 1 << 24, (1 << 32) - 1),
    (0xFC, 0xFC, 1 << 32, (1 << 40) - 1),
    (0xFD, 0xFD, 1 << 40, (1 << 48) - 1),
    (0xFE, 0xFE, 1 << 48, (1 << 56) - 1),
    (0xFF, 0xFF, 1 << 56, (1 << 64) - 1),
]


def per_input(func):
    """Decorator for commands that process each positional input independently.

    The decorated function receives (settings, output, args, text) once per input and
    writes its result to output. A ValueError for one input is reported on stderr and
    logged, and the remaining inputs are still processed. The wrapper returns the
    exit status: 0 if every input succeeded, 1 otherwise.
    """
    @wraps(func)
    def wrapper(settings, output, args):
        status = 0
        for text in args.inputs:
            try:
                func(settings, output, args, text)
            except ValueError as e:
                logger.warning(f"{args.command} failed for {text!r}: {e}")
                print(f"error: {text}: {e}", file=sys.stderr)
                status = 1
        return status
    return wrapper


def configure_logging(args, settings: Settings) -> bool:
    """Configure logging from CLI arguments, falling back to settings.

    Returns:
        True if logging was configured, False if no log file was requested
    """
    log_file = args.log_file or settings.get(SETTING_LOGGING_PATH)
    if not log_file:
        return False

    log_level = args.log_level or str(settings.get(SETTING_LOGGING_LEVEL, 'INFO')).upper()

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        filename=str(log_file),
        level=getattr(logging, log_level, logging.INFO),
        format=LOG_FORMAT
    )
    return True


def parse_value(text: str) -> int:
    """Parse a decimal or 0x-prefixed hexadecimal integer."""
    try:
        return int(text, 0)
    except ValueError:
        raise ValueError(f"Invalid integer: {text}") from None


def parse_hex(text: str, settings: Settings) -> bytes:
    """Parse hex digits, ignoring whitespace and the configured byte separator."""
    separator = settings.get(SETTING_OUTPUT_SEPARATOR, '')
    if separator:
        text = text.replace(separator, '')
    try:
        return bytes.fromhex(text)
    except ValueError:
        raise ValueError(f"Invalid hex string: {text}") from None


def format_hex(data: bytes, settings: Settings) -> str:
    formatted = settings.get(SETTING_OUTPUT_SEPARATOR, '').join(f"{b:02x}" for b in data)
    return formatted.upper() if settings.get(SETTING_OUTPUT_UPPERCASE, False) else formatted


@profile_main
def varuint_main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog='varuint',
        description='Encode and decode SQLite4 variable-length unsigned integers.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              varuint encode 240 241 0xFFFFFFFF
              varuint decode f101 fa0108f0
              varuint decode --all f0f101f90000
            ''').strip()
    )
    parser.add_argument(
        '--settings',
        metavar='PATH',
        help='Path to a TOML settings file. If not provided, uses VARUINT_SETTINGS environment variable.')
    parser.add_argument(
        '--log-file',
        metavar='PATH',
        help='Path to log file. If not provided, uses logging.path from settings or no logging.')
    parser.add_argument(
        '--log-level',
        metavar='LEVEL',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL). Defaults to logging.level from settings or INFO.')
    subparsers = parser.add_subparsers(
        dest='command',
        title='Commands',
        description='Available codec operations',
        help='Use "varuint COMMAND --help" for command-specific help'
    )

    parser_encode = subparsers.add_parser(
        'encode',
        help='Encode integers as hex',
        description='Prints the minimal varuint encoding of each value as a hex string, one per line. Values are '
                    'decimal or 0x-prefixed hexadecimal, from 0 to 2^64-1.')
    parser_encode.add_argument('inputs', nargs='+', metavar='VALUE', help='Integers to encode')
    parser_encode.set_defaults(method=_encode)

    parser_decode = subparsers.add_parser(
        'decode',
        help='Decode hex encodings',
        description='Decodes the varuint at the start of each hex string and prints "<value> <bytes consumed>".',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent('''
            Examples:
              varuint decode f8ff
              varuint decode --all 00f0f101
            ''').strip())
    parser_decode.add_argument('inputs', nargs='+', metavar='HEX', help='Hex-encoded varuints')
    parser_decode.add_argument(
        '--all',
        action='store_true',
        help='Decode every varuint in each hex string in sequence, one line per varuint')
    parser_decode.set_defaults(method=_decode)

    parser_length = subparsers.add_parser(
        'length',
        help='Show encoded lengths',
        description='Prints the number of bytes the encoding of each value occupies.')
    parser_length.add_argument('inputs', nargs='+', metavar='VALUE', help='Integers to measure')
    parser_length.set_defaults(method=_length)

    parser_table = subparsers.add_parser(
        'table',
        help='Show the tier table',
        description='Prints the tag byte range, value range and encoded length of every tier.')
    parser_table.set_defaults(method=_table)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help(sys.stderr)
        return 2

    settings_path = args.settings or os.environ.get('VARUINT_SETTINGS')
    settings = Settings(Path(settings_path) if settings_path else None)

    configure_logging(args, settings)
    logger.debug(f"Running {args.command} with settings from {settings.settings_file}")

    return args.method(settings, sys.stdout, args)


@per_input
def _encode(settings: Settings, output, args, text: str):
    print(format_hex(encode(parse_value(text)), settings), file=output)


@per_input
def _decode(settings: Settings, output, args, text: str):
    data = parse_hex(text, settings)

    if not args.all:
        value, consumed = decode(data)
        print(f"{value} {consumed}", file=output)
        return

    offset = 0
    while offset < len(data):
        try:
            value, consumed = decode(data, offset)
        except MalformedInputError as e:
            raise ValueError(f"{e} after {offset} decoded bytes") from e
        print(f"{value} {consumed}", file=output)
        offset += consumed


@per_input
def _length(settings: Settings, output, args, text: str):
    print(encoded_length(parse_value(text)), file=output)


def _table(settings: Settings, output, args):
    for first_tag, last_tag, low, high in TIERS:
        tags = f"{first_tag:02X}" if first_tag == last_tag else f"{first_tag:02X}-{last_tag:02X}"
        print(f"{tags:<6} {low:>20} {high:>20} {encoded_length(high)}", file=output)
    return 0


if __name__ == '__main__':
    sys.exit(varuint_main())
