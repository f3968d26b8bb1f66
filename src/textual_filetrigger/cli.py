"""CLI entry point for filetrigger: auto-generates default config and launches the TUI."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from filetrigger.config import create_default_config, default_config_path
from filetrigger.notifier import LoggingNotifier
from textual_filetrigger import __version__
from textual_filetrigger.app import FileTriggerApp
from textual_filetrigger.controller import FileTriggerController

logging.getLogger("filetrigger").setLevel(logging.INFO)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        prog="filetrigger",
        description="Run a command whenever a trigger file in your project changes.",
        epilog="Examples:\n"
        "  filetrigger                         # Watch the current directory\n"
        "  filetrigger --root ~/proj           # Watch another project\n"
        "  filetrigger -c my-triggers.toml     # Use custom config\n"
        "  filetrigger --headless              # No TUI, log to stderr",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--root",
        default=".",
        help="Project root; watched paths are relative to it (default: current directory)",
    )

    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to config file (default: <root>/.filetrigger.toml)",
    )

    parser.add_argument(
        "--headless",
        action="store_true",
        help="Run without the TUI, reporting to the log",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    return parser.parse_args(argv)


async def run_headless(root: Path, config_path: Path) -> int:
    """Run the controller on the current loop until cancelled.

    Returns:
        Exit code (1 if the controller could not attach)
    """
    controller = FileTriggerController(root, config_path=config_path, notifier=LoggingNotifier())
    controller.attach(asyncio.get_running_loop())
    if not controller.attached:
        return 1

    try:
        await asyncio.Event().wait()
    finally:
        await controller.aclose()
    return 0


def main(argv: list[str] | None = None) -> None:
    """
    Main entry point for filetrigger CLI.

    Handles:
    - Argument parsing
    - Auto-creation of the config file
    - Launching the TUI or the headless loop
    - Error handling and exit codes
    """
    args = parse_args(argv)

    root = Path(args.root).resolve()
    if not root.is_dir():
        print(f"Error: No project root open: {root} is not a directory", file=sys.stderr)
        sys.exit(1)

    config_path = Path(args.config).resolve() if args.config else default_config_path(root)

    try:
        if create_default_config(config_path):
            print(f"Created default config at: {config_path}")

        if args.headless:
            logging.basicConfig(
                level=logging.INFO,
                format="%(asctime)s %(levelname)s %(name)s: %(message)s",
            )
            sys.exit(asyncio.run(run_headless(root, config_path)))

        app = FileTriggerApp(root=root, config_path=config_path)
        app.run()

    except KeyboardInterrupt:
        # Gracefully handle Ctrl+C
        sys.exit(130)
    except (PermissionError, OSError) as e:
        print(f"Error: Failed to create config: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
