import json
import os
from datetime import datetime, timezone


class JSONLogger:
    """Append-only JSON-lines trace of machine runs, one file per UTC day."""

    def __init__(self, output_directory="logs/", log_file_prefix="turing_"):
        self.output_directory = output_directory
        self.log_file_prefix = log_file_prefix
        os.makedirs(self.output_directory, exist_ok=True)
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def _get_log_filename(self):
        filename = f"{self.log_file_prefix}{self.today}.jsonl"  # JSON lines format
        return os.path.join(self.output_directory, filename)

    def _log_to_file(self, filename, entries):
        path = os.path.join(self.output_directory, filename)
        with open(path, "a", encoding="utf-8") as f:
            for entry in entries:
                f.write(json.dumps(entry) + "\n")
        return path

    def log(self, entry: dict):
        """Log a single entry to the main trace log."""
        with open(self.current_log, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")

    def log_step(self, engine, machine=None):
        """Log the engine's current snapshot, tagged with the machine name."""
        entry = engine.snapshot()
        entry["machine"] = machine
        entry["timestamp"] = datetime.now(timezone.utc).isoformat()
        self.log(entry)
        return entry

    def rotate(self):
        """Start a new main log file if the UTC date has changed."""
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def log_summary(self, entries: list):
        """Log run summaries (halted or not, steps, final state)."""
        return self._log_to_file(f"{self.log_file_prefix}summary_{self.today}.jsonl", entries)

    def log_halting(self, entries: list):
        """Log final configurations of machines that reached a halt state."""
        return self._log_to_file(f"halted_{self.today}.jsonl", entries)

    def log_errors(self, entries: list):
        """Log machines stopped by a construction or step error."""
        return self._log_to_file(f"errors_{self.today}.jsonl", entries)
