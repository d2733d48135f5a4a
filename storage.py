# storage.py
import os
from pathlib import Path

from errors import ClaimLostError, SpoolLayoutError
from models import SpoolJob


class Storage:
    """The spool directories. Job state lives only in paths and file names."""

    def __init__(self, config):
        self.config = config

    def check_layout(self):
        missing = [str(d) for d in self.config.static_dirs if not d.is_dir()]
        if missing:
            raise SpoolLayoutError(f"missing spool directories: {', '.join(missing)}")

    # ---------------- Queue ----------------
    def list_candidates(self):
        """Unclaimed jobs: plain files directly under the incoming directory."""
        with os.scandir(self.config.incoming_dir) as entries:
            return [
                Path(e.path) for e in entries
                if not e.name.startswith(".") and e.is_file()
            ]

    def claim(self, source_path, dest_dir, new_name):
        """Move a job to dest_dir/new_name with a single atomic rename.

        Two spoolers racing on the same job: exactly one rename succeeds,
        the other gets ClaimLostError.
        """
        dest_dir = Path(dest_dir)
        if not dest_dir.is_dir():
            raise SpoolLayoutError(f"destination directory {dest_dir} does not exist")
        dest = dest_dir / new_name
        try:
            os.rename(source_path, dest)
        except FileNotFoundError as e:
            if not dest_dir.is_dir():
                raise SpoolLayoutError(f"destination directory {dest_dir} disappeared") from e
            raise ClaimLostError(source_path) from e
        return dest

    # ---------------- Inspection ----------------
    def list_jobs(self, stage):
        """SpoolJob values in a stage directory, sorted by name (oldest stamp first)."""
        jobs = []
        for entry in sorted(self.config.stage_dir(stage).iterdir()):
            if entry.name.startswith(".") or not entry.is_file():
                continue
            try:
                jobs.append(SpoolJob.from_path(entry, stage))
            except ValueError:
                # not written by a spooler, leave it alone
                continue
        return jobs

    def log_path(self, work_name):
        return self.config.results_dir / f"{work_name}.log"

    def read_log(self, work_name):
        path = self.log_path(work_name)
        if "/" in work_name or not path.is_file():
            return None
        return path.read_text(errors="replace")
