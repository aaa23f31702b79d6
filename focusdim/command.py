"""focusdim - command line entry point."""

import asyncio
import sys

from focusdim import __version__
from focusdim.adapters.discovery import DISCOVERIES
from focusdim.config_loader import ConfigLoader
from focusdim.daemon import run_daemon
from focusdim.logging_setup import get_logger, init_logger
from focusdim.models import ExitCode, FocusdimError

__all__ = ["main"]

USAGE = f"""Syntax: focusdim [options]

Keeps the focused window opaque and dims the previously focused one.

Options:
 --config <file>        Configuration file (TOML)
 --dim-opacity <value>  Opacity of unfocused windows, between 0.0 and 1.0
 --backend <name>       Socket discovery: {", ".join(DISCOVERIES)}
 --socket <path>        IPC socket path (skips discovery)
 --debug <logfile>      Enable debug logs, also written to <logfile>
 --version              Show the version
 --help                 Show this help
"""


def use_param(txt: str, args: list[str] | None = None) -> str:
    """Check if parameter `txt` is in the arguments (sys.argv by default).

    if found, removes it from the arguments & returns the argument value
    """
    if args is None:
        args = sys.argv
    v = ""
    if txt in args:
        i = args.index(txt)
        if i + 1 >= len(args):
            msg = f"{txt} expects a value"
            raise ValueError(msg)
        v = args[i + 1]
        del args[i : i + 2]
    return v


def parse_overrides(args: list[str]) -> dict[str, object]:
    """Pop the configuration options from `args`, returns the values to override."""
    overrides: dict[str, object] = {}
    dim_opacity = use_param("--dim-opacity", args)
    if dim_opacity:
        try:
            overrides["dim_opacity"] = float(dim_opacity)
        except ValueError as e:
            msg = f"invalid opacity: {dim_opacity}"
            raise ValueError(msg) from e
    backend = use_param("--backend", args)
    if backend:
        overrides["backend"] = backend
    socket_path = use_param("--socket", args)
    if socket_path:
        overrides["socket_path"] = socket_path
    return overrides


async def run(config_filename: str, overrides: dict[str, object]) -> None:
    """Load the configuration and run the daemon."""
    config = await ConfigLoader(get_logger("config")).load(config_filename, overrides)
    await run_daemon(config)


def main() -> None:
    """Run the command."""
    args = sys.argv[1:]
    if "--help" in args or "-h" in args:
        print(USAGE)
        sys.exit(ExitCode.SUCCESS)
    if "--version" in args:
        print(__version__)
        sys.exit(ExitCode.SUCCESS)

    try:
        debug_flag = use_param("--debug", args)
        config_filename = use_param("--config", args)
        overrides = parse_overrides(args)
    except ValueError as e:
        print(f"{e}\n\n{USAGE}", file=sys.stderr)
        sys.exit(ExitCode.USAGE_ERROR)
    if args:
        print(f"Unknown arguments: {' '.join(args)}\n\n{USAGE}", file=sys.stderr)
        sys.exit(ExitCode.USAGE_ERROR)

    if debug_flag:
        init_logger(filename=debug_flag, force_debug=True)
    else:
        init_logger()
    log = get_logger("startup")

    exit_code = ExitCode.SUCCESS
    try:
        asyncio.run(run(config_filename, overrides))
    except KeyboardInterrupt:
        pass
    except FocusdimError as e:
        log.critical("Command failed.")
        exit_code = e.args[0] if e.args else ExitCode.CONFIG_ERROR
    except Exception:  # pylint: disable=W0718
        log.critical("Unhandled exception:", exc_info=True)
        exit_code = ExitCode.USAGE_ERROR
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
