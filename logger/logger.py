import json
import os
from datetime import datetime, timezone


class JSONLogger:
    """Appends run records as JSON lines, one file per UTC day."""

    def __init__(self, output_directory="logs/", log_file_prefix="turing_"):
        self.output_directory = output_directory
        self.log_file_prefix = log_file_prefix
        os.makedirs(self.output_directory, exist_ok=True)
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    @classmethod
    def from_config(cls, config):
        return cls(config["output_directory"], config["log_file_prefix"])

    def _get_log_filename(self):
        filename = f"{self.log_file_prefix}{self.today}.jsonl"  # JSON lines format
        return os.path.join(self.output_directory, filename)

    def _log_to_file(self, filename, entries):
        path = os.path.join(self.output_directory, filename)
        with open(path, "a", encoding="utf-8") as f:
            for entry in entries:
                f.write(json.dumps(entry) + "\n")

    def log(self, entry: dict):
        """Log a single entry to the main run log."""
        self.log_batch([entry])

    def log_batch(self, entries: list):
        with open(self.current_log, "a", encoding="utf-8") as f:
            for entry in entries:
                f.write(json.dumps(entry) + "\n")

    def rotate(self):
        """Start a new main log file if the UTC day changed."""
        self.today = datetime.now(timezone.utc).strftime("%Y-%m-%d")
        self.current_log = self._get_log_filename()

    def log_accepted(self, entries: list):
        self._log_to_file(f"accepted_{self.today}.jsonl", entries)

    def log_rejected(self, entries: list):
        self._log_to_file(f"rejected_{self.today}.jsonl", entries)

    def log_unhalted(self, entries: list):
        """Runs that hit the step bound while still active."""
        self._log_to_file(f"unhalted_{self.today}.jsonl", entries)

    def log_by_outcome(self, entries: list):
        """Route each run entry by its "status" field and mirror all of them to the main log."""
        routes = {"HALTED_ACCEPT": self.log_accepted, "HALTED_REJECT": self.log_rejected}
        grouped = {}
        for entry in entries:
            grouped.setdefault(routes.get(entry.get("status"), self.log_unhalted), []).append(entry)
        for sink, group in grouped.items():
            sink(group)
        self.log_batch(entries)
