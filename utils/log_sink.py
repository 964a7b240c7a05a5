import os
import logging


class LogSink:
    """
    Append-only log that collects the output of archiver and validator runs,
    so that failures can be diagnosed after the fact. The file is never
    truncated by the tool.
    """

    def __init__(self, path):
        self.path = os.path.abspath(path)
        os.makedirs(os.path.dirname(self.path), exist_ok=True)

        # Own logger, kept out of the root hierarchy so tool chatter never
        # reaches the console handlers.
        self._logger = logging.Logger("epubdir.tools", level=logging.DEBUG)
        self._handler = logging.FileHandler(self.path, mode="a", encoding="utf-8")
        self._handler.setFormatter(logging.Formatter("%(asctime)s - %(levelname)s - %(message)s"))
        self._logger.addHandler(self._handler)

    def record(self, label, result):
        """Appends one tool run (an archiver ToolResult or similar) to the log."""
        level = logging.INFO if result.returncode == 0 else logging.ERROR
        self._logger.log(level, f"{label}: {' '.join(result.command)} -> exit {result.returncode}")
        output = (result.output or "").rstrip()
        if output:
            self._logger.log(level, output)
        self._handler.flush()

    def note(self, message):
        self._logger.info(message)
        self._handler.flush()

    def read(self):
        if not os.path.exists(self.path):
            return ""
        with open(self.path, "r", encoding="utf-8") as f:
            return f.read()

    def tail(self, lines=20):
        return "\n".join(self.read().splitlines()[-lines:])

    def close(self):
        self._logger.removeHandler(self._handler)
        self._handler.close()
