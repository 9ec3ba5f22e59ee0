#!/usr/bin/env python3
"""Register dump tool for pygrowattspf.

Reads every holding and input register the SPF family documents and writes
them to a plain-text file, so settings can be restored by hand after a
firmware update or a factory reset.

Usage:
    pygrowattspf-dump --port /dev/ttyUSB0
    pygrowattspf-dump --config options.json --output backup.txt
    pygrowattspf-dump --help

Defaults for ``--port`` can come from ``GROWATT_PORT`` in the environment
or a ``.env`` file.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from collections.abc import Sequence
from pathlib import Path

from dotenv import load_dotenv

from pygrowattspf import __version__
from pygrowattspf.exceptions import GrowattError
from pygrowattspf.registers.fields import RegisterSpace, RegisterWindow
from pygrowattspf.transports.arbiter import TransportArbiter
from pygrowattspf.transports.config import AdapterConfig
from pygrowattspf.transports.modbus_serial import ModbusSerialChannel

_LOGGER = logging.getLogger(__name__)

# Chunked to at most 25 registers per request; larger reads time out on
# some SPF firmware.
MAX_CHUNK = 25

DEFAULT_HOLDING_RANGE = (0, 163)  # Holding registers 0-162
DEFAULT_INPUT_RANGE = (0, 90)  # Input registers 0-89

DEFAULT_OUTPUT = "growattbackup.txt"

_SPACE_TITLES = {
    RegisterSpace.HOLDING: "Holding Registers",
    RegisterSpace.INPUT: "Input Registers",
}


def chunk_range(start: int, count: int, size: int = MAX_CHUNK) -> list[tuple[int, int]]:
    """Split ``count`` registers from ``start`` into ``(start, count)`` chunks."""
    return [(offset, min(size, start + count - offset)) for offset in range(start, start + count, size)]


async def collect_register_dump(
    arbiter: TransportArbiter,
    holding: tuple[int, int] = DEFAULT_HOLDING_RANGE,
    inputs: tuple[int, int] = DEFAULT_INPUT_RANGE,
) -> list[RegisterWindow]:
    """Read both register ranges in chunks, holding registers first."""
    windows: list[RegisterWindow] = []
    for space, (start, count) in ((RegisterSpace.HOLDING, holding), (RegisterSpace.INPUT, inputs)):
        for chunk_start, chunk_count in chunk_range(start, count):
            windows.append(await arbiter.read_window(space, chunk_start, chunk_count))
    return windows


def format_register_dump(windows: Sequence[RegisterWindow]) -> str:
    """Render windows as ``<title> a-b`` headers followed by ``<address> <value>`` lines."""
    lines: list[str] = []
    for window in windows:
        lines.append(f"{_SPACE_TITLES[window.space]} {window.start}-{window.end - 1}")
        lines.extend(f"{window.start + i} {word}" for i, word in enumerate(window.words))
    lines.append("End")
    return "\n".join(lines) + "\n"


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="pygrowattspf-dump",
        description="Dump holding and input registers of a Growatt SPF inverter to a text file.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  pygrowattspf-dump --port /dev/ttyUSB0
      Dump holding 0-162 and input 0-89 to growattbackup.txt

  pygrowattspf-dump --config options.json --output spf-backup.txt
      Read link settings from the add-on options file
""",
    )
    parser.add_argument("--port", "-p", help="Serial port (default: $GROWATT_PORT)")
    parser.add_argument("--config", "-c", type=Path, help="options.json with link settings")
    parser.add_argument("--baudrate", "-b", type=int, default=None, help="Baud rate (default 9600)")
    parser.add_argument("--unit-id", "-u", type=int, default=None, help="Modbus unit ID (default 1)")
    parser.add_argument(
        "--output", "-o", type=Path, default=Path(DEFAULT_OUTPUT), help=f"Output file (default {DEFAULT_OUTPUT})"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_config(args: argparse.Namespace) -> AdapterConfig:
    """Merge the options file, environment and command line into one config.

    Raises:
        ValueError: If no serial port is configured
    """
    config = AdapterConfig.from_options_file(args.config) if args.config else AdapterConfig(port="")
    if args.port or not config.port:
        config.port = args.port or os.environ.get("GROWATT_PORT", "")
    if args.baudrate is not None:
        config.baudrate = args.baudrate
    if args.unit_id is not None:
        config.unit_id = args.unit_id
    config.validate()
    return config


async def run_dump(config: AdapterConfig, output: Path) -> int:
    """Connect, dump, write the file.  Returns the number of registers written."""
    channel = ModbusSerialChannel.from_config(config)
    await channel.connect()
    try:
        windows = await collect_register_dump(TransportArbiter(channel))
    finally:
        await channel.disconnect()

    output.write_text(format_register_dump(windows), encoding="utf-8")
    return sum(window.count for window in windows)


def main(argv: Sequence[str] | None = None) -> int:
    """Console entry point."""
    load_dotenv()
    args = create_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except (OSError, ValueError) as err:
        print(f"Configuration error: {err}", file=sys.stderr)
        return 2

    try:
        count = asyncio.run(run_dump(config, args.output))
    except GrowattError as err:
        _LOGGER.error("Register dump failed: %s", err)
        return 1

    _LOGGER.info("Wrote %d registers to %s", count, args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
