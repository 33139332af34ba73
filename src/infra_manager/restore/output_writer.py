"""Writes restore reports."""

import json
import logging
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)

RESULTS_FILE_NAME = "restore-results.json"


class OutputWriter:
    """Creates a timestamped results directory under ``output_path``."""

    def __init__(self, output_path):
        self.new_results_dir = Path(output_path) / f"restore-{datetime.now().strftime('%Y-%m-%dT%H-%M-%S')}"
        self.new_results_dir.mkdir(parents=True, exist_ok=True)

    def save_restore_results(self, results):
        file_path = self.new_results_dir / RESULTS_FILE_NAME
        with open(file_path, "w") as f:
            json.dump(results.to_report(), f, indent=2)
        logger.info(f"Restore results saved in: {file_path}")
        return file_path
