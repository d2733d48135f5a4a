# worker.py
import random
import subprocess
import time
import traceback
from datetime import datetime
from pathlib import Path

from errors import ClaimLostError, JobLaunchError
from models import IterationResult, SpoolJob
from naming import make_stage_name
from storage import Storage


def run_job(job_path, log_path, cwd):
    """Run job_path from cwd with stdout+stderr written to log_path.

    Returns the exit status. The spooler does not judge it; success or
    failure is the job's own business.
    """
    with open(log_path, "wb") as log:
        try:
            proc = subprocess.run(
                [str(job_path)],
                cwd=str(cwd),
                stdin=subprocess.DEVNULL,
                stdout=log,
                stderr=subprocess.STDOUT,
            )
        except OSError as e:
            raise JobLaunchError(job_path, e.strerror or str(e)) from e
    return proc.returncode


class Worker:
    def __init__(self, config, storage=None, now=None, sleep=None, rng=None, runner=None, stop_event=None):
        self.config = config
        self.db = storage or Storage(config)
        self.now = now or datetime.now
        self.sleep = sleep or time.sleep
        self.rng = rng or random.Random()
        self.runner = runner or run_job
        self.stop_event = stop_event  # threading.Event(), tests only; the CLI runs forever

    def run(self):
        while not (self.stop_event and self.stop_event.is_set()):
            self.run_once()

    def run_once(self):
        try:
            candidates = self.db.list_candidates()
        except OSError as e:
            # incoming dir gone (unmounted, synced away); wait for it to come back
            self._log(f"Cannot list {self.config.incoming_dir}: {e}")
            return IterationResult("failed", error=e, slept=self._idle())
        if not candidates:
            return IterationResult("idle", slept=self._idle())

        job_path = self.rng.choice(candidates)
        try:
            return self._process_job(job_path)
        except ClaimLostError as e:
            self._log(f"Skipping {job_path.name}: {e}")
            return IterationResult("skipped", error=e)
        except Exception as e:
            self._log(f"Exception when processing job {job_path}: {e}")
            self._log(traceback.format_exc().rstrip())
            return IterationResult("failed", error=e)

    def _idle(self):
        slept = self.rng.uniform(self.config.min_sleep, self.config.max_sleep)
        self.sleep(slept)
        return slept

    def _log(self, message):
        print(f"[{self.now().isoformat()}] {message}", flush=True)

    def _process_job(self, job_path):
        cfg = self.config
        start_time = self.now()
        work_name = make_stage_name(start_time, cfg.machine, job_path.name)
        work_path = self.db.claim(job_path, cfg.work_dir, work_name)
        self._log(f"Job {job_path.name}: incoming → work (claimed by {cfg.machine} as {work_name})")

        exit_code = self.runner(work_path, self.db.log_path(work_name), cfg.results_dir)

        end_time = self.now()
        out_name = make_stage_name(end_time, cfg.machine, work_name)
        out_path = self.db.claim(work_path, cfg.out_dir, out_name)
        elapsed = (end_time - start_time).total_seconds()
        self._log(
            f"Job {job_path.name} finished! elapsed = {elapsed:.3f}s, started = {start_time.isoformat()}, "
            f"exit_code = {exit_code}"
        )
        return IterationResult(
            "processed",
            job=SpoolJob.from_path(Path(out_path), "out"),
            exit_code=exit_code,
            elapsed=elapsed,
        )
