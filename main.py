import sys
import os
import argparse
import logging
import zipfile
from config import Config
from modules.context import Context
from modules.errors import EpubDirError
from modules.inspector import list_entries, format_listing
from modules.lifecycle import create, open_archive, repack
from modules.packager import Prompter
from modules.validator import run_epubcheck

def setup_logging():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(Config.LOG_FILE),
            logging.StreamHandler(sys.stderr)
        ]
    )

class ConsolePrompter(Prompter):
    """Asks on the terminal."""

    def __init__(self, input_func=input):
        self._input = input_func

    def confirm_overwrite(self, path):
        answer = self._input(f"{path} exists. Overwrite? [y/N] ")
        return answer.strip().lower() in ("y", "yes")

    def ask_destination(self, current):
        return self._input(f"Write to which file instead of {current}? (empty to cancel) ")

    def notify(self, message):
        print(message, file=sys.stderr)

def cmd_new(args, context):
    session = create(args.target, context)
    print(session.workspace)
    return 0

def cmd_open(args, context):
    session = open_archive(args.archive, context)
    print(session.workspace)
    return 0

def cmd_repack(args, context):
    final_path = repack(args.path, context, ConsolePrompter())
    print(final_path)
    return 0

def cmd_list(args, context):
    style = args.style or Config.LISTING_STYLE
    print(format_listing(list_entries(args.archive), style))
    return 0

def cmd_check(args, context):
    return run_epubcheck(args.archive, Config.EPUBCHECK, context.log_sink, timeout=Config.TOOL_TIMEOUT)

def build_parser():
    parser = argparse.ArgumentParser(description="Edit ePub files as plain directory trees")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    new_parser = subparsers.add_parser("new", help="Scaffold a new ePub workspace")
    new_parser.add_argument("target", help="Path of the ePub file to create")
    new_parser.set_defaults(func=cmd_new)

    open_parser = subparsers.add_parser("open", help="Unpack an ePub into a workspace")
    open_parser.add_argument("archive", help="Path to the .epub file")
    open_parser.set_defaults(func=cmd_open)

    repack_parser = subparsers.add_parser("repack", help="Pack a workspace back into its ePub")
    repack_parser.add_argument("path", nargs="?", default=os.getcwd(), help="Any path inside the workspace (default: current directory)")
    repack_parser.set_defaults(func=cmd_repack)

    list_parser = subparsers.add_parser("list", help="List the entries of an ePub")
    list_parser.add_argument("archive", help="Path to the .epub file")
    list_parser.add_argument("--style", choices=["short", "long"], help="Listing style (default from EPUBDIR_LISTING_STYLE)")
    list_parser.set_defaults(func=cmd_list)

    check_parser = subparsers.add_parser("check", help="Run the configured validator on an ePub")
    check_parser.add_argument("archive", help="Path to the .epub file")
    check_parser.set_defaults(func=cmd_check)

    return parser

def main(argv=None, context=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    try:
        if context is None:
            context = Context.from_config(Config)
        return args.func(args, context)
    except EpubDirError as e:
        logging.error(str(e))
        if getattr(e, "log_path", None) and context is not None:
            print(context.log_sink.tail(), file=sys.stderr)
        return 1
    except (ValueError, OSError, zipfile.BadZipFile) as e:
        logging.error(f"{type(e).__name__}: {e}")
        return 1

def cli():
    setup_logging()
    sys.exit(main())

if __name__ == "__main__":
    cli()
