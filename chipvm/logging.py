"""Console logging utilities for the chipvm interpreter.

A small levelled console logger in the style of the rest of the package,
an emulator-specific subclass that knows how to report resets, traced
instructions and fatal errors, and a tqdm progress bar for headless runs.
"""

import sys
import time
from typing import Optional

from tqdm import tqdm

from chipvm.decode import DecodedInstruction


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ANSI_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
ANSI_RESET = "\033[0m"


class ConsoleLogger:
    """Levelled console logger that prefixes each line with elapsed time.

    Colors are only used when stdout is a terminal.
    """

    def __init__(
        self,
        name: str = "chipvm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        if log_level.upper() not in LEVELS:
            raise ValueError(f"Unknown log level '{log_level}'. Available: {list(LEVELS)}")
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    def is_enabled_for(self, level: str) -> bool:
        return LEVELS.index(level.upper()) >= LEVELS.index(self.log_level)

    def _format_message(self, level: str, message: str) -> str:
        prefix = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        tag = f"[{level:>8s}]"
        if self.use_colors:
            tag = f"{ANSI_COLORS[level]}{tag}{ANSI_RESET}"
        return f"{prefix}{tag}[{self.name}] {message}"

    def log(self, level: str, message: str):
        level = level.upper()
        if self.is_enabled_for(level):
            print(self._format_message(level, message), flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


class EmulatorLogger(ConsoleLogger):
    """Logger for machine lifecycle events and instruction traces."""

    def __init__(self, name: str = "chipvm", trace: bool = False, **kwargs):
        super().__init__(name, **kwargs)
        self.trace = trace

    def log_reset(self, rom_size: int, quirks):
        self.info(f"Reset: {rom_size} ROM bytes at 0x200, quirks={quirks}")

    def log_instruction(self, address: int, instruction: DecodedInstruction):
        """Trace one executed instruction at DEBUG level when tracing is on."""
        if self.trace and self.is_enabled_for("DEBUG"):
            self.debug(f"0x{address:03X}: {instruction.hex}")

    def log_fatal(self, error: Exception):
        self.error(f"Execution halted: {error}")


def progress_bar(total: int, desc: str = "Running", enabled: bool = True) -> Optional[tqdm]:
    """Create a tqdm bar counting emulated frames, or None when disabled."""
    if not enabled:
        return None
    return tqdm(total=total, desc=desc, unit="frame", leave=False)
