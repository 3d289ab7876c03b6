"""
Logging of the acceptance runner.

Every module logs through ``Log(__name__)``, a thin front of the ``hwcloud``
logger. The runner attaches one set of file handlers per executed test with
``configure_logger`` so each test gets its own ``<name>.log`` and ``<name>.err``
under the run directory. Errors logged with ``log_error`` are kept on the
object and reported as the failure message of the test.
"""

import logging
import logging.handlers
import os
import re
from copy import deepcopy

ROOT_LOGGER = "hwcloud"

LOG_FORMAT = (
    "%(asctime)s - %(name)s - %(module)s:%(lineno)d - %(levelname)s - %(message)s"
)

MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 20


class Log(logging.Logger):
    """Module logger that writes to the shared hwcloud logger."""

    def __init__(self, name=None) -> None:
        super().__init__(f"{ROOT_LOGGER}.{name}" if name else ROOT_LOGGER)
        logging.basicConfig(format=LOG_FORMAT, level=logging.INFO)

        self._logger = logging.getLogger(ROOT_LOGGER)
        self._log_errors = []

        self.info = self._logger.info
        self.debug = self._logger.debug
        self.warning = self._logger.warning
        self.error = self._logger.error
        self.exception = self._logger.exception

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def log_error(self, message: str) -> None:
        """Log an error and remember it for the test result."""
        self._log_errors.append(message)
        self.error(message)

    def _add_handler(self, handler, level=None):
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(SensitiveLogFilter(name="hwcloud_filter"))
        if level is not None:
            handler.setLevel(level)
        self._logger.addHandler(handler)

    def configure_logger(self, test_name, run_dir, disable_console_log):
        """
        Send the records of a test to its own log files.

        The handlers of the previous test are closed first.

        Args:
            test_name (str): unique test name, used for the file names
            run_dir (str): directory of the run
            disable_console_log (bool): stop propagating records to the console

        Returns:
            path of the log file, None when run_dir does not exist
        """
        if not os.path.isdir(run_dir):
            self._logger.error(
                f"Run directory '{run_dir}' does not exist, logs will not output to file."
            )
            return None

        self.close_and_remove_filehandlers()
        if self._logger.level == logging.NOTSET:
            self._logger.setLevel(logging.INFO)

        test_logfile = os.path.join(run_dir, f"{test_name}.log")
        self._logger.info(f"Test logfile: {test_logfile}")

        if disable_console_log:
            self._logger.propagate = False

        self._add_handler(
            logging.handlers.RotatingFileHandler(
                test_logfile, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS
            )
        )
        self._add_handler(
            logging.FileHandler(os.path.join(run_dir, f"{test_name}.err")),
            level=logging.ERROR,
        )
        return test_logfile

    def close_and_remove_filehandlers(self):
        """Close the file handlers of the previous test and detach them."""
        for handler in self._logger.handlers[:]:
            if isinstance(handler, logging.FileHandler):
                handler.close()
                self._logger.removeHandler(handler)


class SensitiveLogFilter(logging.Filter):
    """
    Mask credentials in log records.

    Strings have the word following a sensitive keyword replaced. Dicts, such
    as request bodies and provider configurations, have the value of a
    sensitive key replaced. The logged objects themselves are never modified.
    """

    excluded_words = [
        "access-key",
        "access_key",
        "secret-key",
        "secret_key",
        "security_token",
        "password",
        "X-Auth-Token",
        "Authorization",
        "token",
    ]

    MASK = "<masked>"

    def __init__(self, name=""):
        super().__init__(name)
        words = "|".join(self.excluded_words)
        self._pattern = re.compile(
            rf'({words})(["\']?)\s*[:=]?\s*(["\']?)([^\s"\',]+)(\3)', re.IGNORECASE
        )

    def redact_str(self, data):
        if not isinstance(data, str):
            data = str(data, "utf-8")
        return self._pattern.sub(rf"\1\2 {self.MASK}", data)

    def _redact(self, data):
        if isinstance(data, dict):
            return {
                k: self.MASK if k in self.excluded_words else self._redact(v)
                for k, v in data.items()
            }
        if isinstance(data, list):
            return [self._redact(v) for v in data]
        if isinstance(data, tuple):
            return tuple(self._redact(v) for v in data)
        if isinstance(data, (str, bytearray, bytes)):
            return self.redact_str(data)
        return data

    def redact(self, msg):
        """Return a masked copy of msg."""
        return self._redact(deepcopy(msg))

    def filter(self, record):
        record.msg = self.redact(record.msg)
        if isinstance(record.args, dict):
            record.args = self.redact(record.args)
        elif record.args:
            record.args = tuple(self.redact(arg) for arg in record.args)
        return True
