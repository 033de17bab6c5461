"""CLI entry point for AmiiGen."""

import argparse
import os
import sys
import time

from amiigen import DEFAULT_DATABASE_URL, DEFAULT_KEY_FILE, DEFAULT_OUTPUT_ROOT, __version__
from amiigen.errors import AmiigenError, InvalidIdentifier
from amiigen.identifier import IdentificationBlock

KEY_FILE_ENV = "AMIIGEN_KEY_FILE"


def _identifier_arg(value: str) -> IdentificationBlock:
    try:
        return IdentificationBlock.from_hex(value)
    except InvalidIdentifier as e:
        raise argparse.ArgumentTypeError(str(e))


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="amiigen",
        description="Generate encrypted Amiibo tag dumps for one character or the whole AmiiboAPI database.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Every character in the AmiiboAPI database, into ./dumps/<series>/
  python -m amiigen --all --key-file key_retail.bin

  # A single character id
  python -m amiigen --single 0x0000000000000002 -o mario.bin

  # Offline: use a previously downloaded amiibo.json
  python -m amiigen --all --database-url ./amiibo.json --output out/
        """,
    )

    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )

    # Mode
    parser.add_argument(
        "-s", "--single",
        metavar="ID",
        type=_identifier_arg,
        default=None,
        help="Generate a single dump with the specified character id (16 hex digits, last byte 02)",
    )
    parser.add_argument(
        "-a", "--all",
        dest="all_characters",
        action="store_true",
        help="Generate dumps for all characters",
    )

    # Sources
    parser.add_argument(
        "-u", "--database-url",
        default=DEFAULT_DATABASE_URL,
        help="Custom URL (or local path) for the Amiibo database. Default: AmiiboAPI on GitHub",
    )
    parser.add_argument(
        "-k", "--key-file",
        default=os.environ.get(KEY_FILE_ENV, DEFAULT_KEY_FILE),
        help=f"Key file for encryption. Default: ${KEY_FILE_ENV} or {DEFAULT_KEY_FILE}",
    )

    # Output
    parser.add_argument(
        "-o", "--output",
        default=None,
        help=f"Output path. With --all this is a directory (default: {DEFAULT_OUTPUT_ROOT}), "
             "otherwise a file name (default: <id>.bin)",
    )

    parser.add_argument(
        "-w", "--wait",
        action="store_true",
        help="Require pressing the enter key to exit after running",
    )

    return parser


def _finish(exit_code: int, wait: bool) -> int:
    if wait:
        input("\nPress enter to exit")
    return exit_code


def main(argv: list[str] | None = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)

    # Lazy imports for faster --help
    from amiigen.database import load_database
    from amiigen.encryption import get_encryptor
    from amiigen.generator import generate_all, generate_one

    print(f"AmiiGen v{__version__}")
    print("=" * 50)

    # ------------------------------------------------------------------
    # Preconditions
    # ------------------------------------------------------------------
    if not args.key_file or not os.path.isfile(args.key_file):
        print(
            f"Key file '{args.key_file}' does not exist. Please provide a valid key file.",
            file=sys.stderr,
        )
        return _finish(1, args.wait)

    if args.single is not None and args.all_characters:
        print(
            "Please specify either a character ID with --single or use --all to generate "
            "dumps for all characters, but not both.",
            file=sys.stderr,
        )
        return _finish(1, args.wait)

    if args.single is None and not args.all_characters:
        print("No mode specified, defaulting to --all.")
        args.all_characters = True

    try:
        encryptor = get_encryptor(args.key_file)
        print(f"  ✓ Keys loaded ({encryptor.name()})")

        if args.all_characters:
            print("\nGenerating dumps for all characters...")
            database = load_database(args.database_url)
            print(f"  ✓ Database ready: {len(database)} amiibos")

            output_root = args.output if args.output and args.output.strip() else DEFAULT_OUTPUT_ROOT
            start_time = time.time()
            report = generate_all(database, output_root, encryptor)
            elapsed = time.time() - start_time

            print(
                f"\n  {report.succeeded}/{report.attempted} dumps written in {elapsed:.1f}s"
            )
            if not report.ok:
                print(f"  ⚠️  {report.failed} dump(s) could not be written:", file=sys.stderr)
                for key, message in report.failures:
                    print(f"     {key}: {message}", file=sys.stderr)
        else:
            print(f"\nGenerating dump for character ID: {args.single}...")
            generate_one(args.single, args.output, encryptor)

    except (AmiigenError, OSError, ValueError) as e:
        print(f"\n  ERROR: {e}", file=sys.stderr)
        return _finish(1, args.wait)

    print("\n✅ Done!")
    return _finish(0, args.wait)


if __name__ == "__main__":
    sys.exit(main())
