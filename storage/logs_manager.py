"""
Logging Management Module (Async)

Uses aiologger for async log output:
- One file per day under data_dir/logs (app_YYYYMMDD.log)
- Console echo for every message at or above the configured level,
  warnings and errors colored via colorama
- Operator-facing diagnostics for sweep and drain partial failures

Components that accept an optional LogsManager call `log_message()`, which
falls back to print when no manager was wired in.
"""

from datetime import datetime
from pathlib import Path

# aiologger essentials
from aiologger.logger import Logger
from aiologger.handlers.files import AsyncFileHandler
from aiologger.levels import LogLevel

# For optional color in logs
from colorama import init as colorama_init, Fore, Style

CONSOLE_COLORS = {
    'WARNING': Fore.YELLOW,
    'ERROR': Fore.RED,
    'CRITICAL': Fore.RED + Style.BRIGHT,
}

class LogsManager:
    def __init__(self, settings):
        """
        Args:
            settings (dict): load_settings() output. Reads
                settings['system']['data_dir'] and settings['system']['log_level'].
        """
        system_settings = settings.get('system', {})
        self.log_dir = Path(system_settings.get('data_dir', './data')) / 'logs'
        self.log_dir.mkdir(parents=True, exist_ok=True)

        log_level = str(system_settings.get('log_level', 'INFO')).upper()
        self.log_level = log_level if log_level in LogLevel.__members__ else 'INFO'
        self.threshold = LogLevel[self.log_level]

        self.logger = None
        self.file_handler = None
        self.log_file = None
        self.is_initialized = False

        colorama_init(autoreset=False)

    def _daily_log_file(self) -> Path:
        return self.log_dir / f"app_{datetime.now().strftime('%Y%m%d')}.log"

    async def initialize(self):
        """Create the aiologger logger. Call once from the host's async setup."""
        if self.is_initialized:
            return

        try:
            self.logger = Logger(name="DeadlineTracker", level=self.threshold)
            await self._attach_file_handler()
            self.is_initialized = True
            await self.logger.info("Logging system initialized successfully")
        except Exception as e:
            print(f"Failed to initialize logger: {e}")
            raise

    async def _attach_file_handler(self):
        if self.file_handler:
            self.logger.remove_handler(self.file_handler)
            await self.file_handler.close()
        self.log_file = self._daily_log_file()
        self.file_handler = AsyncFileHandler(filename=str(self.log_file))
        self.logger.add_handler(self.file_handler)

    async def shutdown(self):
        """Flush and close the file handler. Call before the host exits."""
        if not self.is_initialized:
            return

        try:
            if self.file_handler:
                self.logger.remove_handler(self.file_handler)
                await self.file_handler.close()
                self.file_handler = None
            await self.logger.shutdown()
            self.is_initialized = False
        except Exception as e:
            # Use print since we can't log during shutdown
            print(f"Error during logs cleanup: {e}")

    async def _emit(self, level: str, msg: str):
        if LogLevel[level] < self.threshold:
            return

        color = CONSOLE_COLORS.get(level)
        if color:
            print(f"{color}[{level}] {msg}{Style.RESET_ALL}")
        else:
            print(f"[{level}] {msg}")

        if not self.logger:
            return
        # long-running scheduler: roll over to the new day's file
        if self.log_file != self._daily_log_file():
            await self._attach_file_handler()
        await getattr(self.logger, level.lower())(msg)

    # -------------------------------------------------------------------------
    # Logging methods for convenience (info, debug, error, etc.)
    # -------------------------------------------------------------------------

    async def debug(self, msg: str):
        await self._emit('DEBUG', msg)

    async def info(self, msg: str):
        await self._emit('INFO', msg)

    async def warning(self, msg: str):
        await self._emit('WARNING', msg)

    async def error(self, msg: str):
        await self._emit('ERROR', msg)

    async def critical(self, msg: str):
        await self._emit('CRITICAL', msg)

async def log_message(logs_manager, level: str, msg: str) -> None:
    """Log a message using logs manager if available, otherwise print."""
    if logs_manager:
        await getattr(logs_manager, level)(msg)
    elif level != 'debug':
        print(f"[{level.upper()}] {msg}")
