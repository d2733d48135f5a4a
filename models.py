# models.py
import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from errors import SpoolConfigError
from naming import default_machine_name, is_stage_name, origin_name, parse_stage_name

DEFAULT_SPOOL_ROOT = Path("~/job_processor")
DEFAULT_MIN_SLEEP = 1.0
DEFAULT_MAX_SLEEP = 6.0

STAGES = ("incoming", "work", "out")

# spooler stamps carried by a job name in each stage
STAGE_STAMPS = {"incoming": 0, "work": 1, "out": 2}


@dataclass(frozen=True)
class SpoolConfig:
    root: Path
    machine: str
    min_sleep: float = DEFAULT_MIN_SLEEP
    max_sleep: float = DEFAULT_MAX_SLEEP

    def __post_init__(self):
        object.__setattr__(self, "root", Path(self.root).expanduser())
        if not self.machine or "_" in self.machine or "/" in self.machine:
            raise SpoolConfigError(f"machine name must be non-empty without '_' or '/': {self.machine!r}")
        if self.min_sleep < 0 or self.min_sleep > self.max_sleep:
            raise SpoolConfigError(f"invalid idle sleep bounds: {self.min_sleep}..{self.max_sleep}")

    @property
    def incoming_dir(self) -> Path:
        return self.root / "incoming"

    @property
    def work_dir(self) -> Path:
        return self.root / "work"

    @property
    def out_dir(self) -> Path:
        return self.root / "out"

    @property
    def results_dir(self) -> Path:
        return self.root / "results"

    @property
    def static_dirs(self):
        return (self.incoming_dir, self.work_dir, self.out_dir, self.results_dir)

    def stage_dir(self, stage: str) -> Path:
        if stage not in STAGES:
            raise ValueError(f"unknown stage: {stage}")
        return self.root / stage

    @classmethod
    def from_env(cls, root=None, environ=None):
        """Build config from SPOOL_* environment variables, falling back to defaults.

        An explicit root wins over SPOOL_ROOT.
        """
        env = os.environ if environ is None else environ
        root = root or env.get("SPOOL_ROOT") or DEFAULT_SPOOL_ROOT
        machine = env.get("SPOOL_MACHINE") or default_machine_name()
        try:
            min_sleep = float(env.get("SPOOL_MIN_SLEEP", DEFAULT_MIN_SLEEP))
            max_sleep = float(env.get("SPOOL_MAX_SLEEP", DEFAULT_MAX_SLEEP))
        except ValueError as e:
            raise SpoolConfigError(f"invalid idle sleep setting: {e}") from e
        return cls(root=Path(root), machine=machine, min_sleep=min_sleep, max_sleep=max_sleep)


@dataclass(frozen=True)
class SpoolJob:
    path: Path
    stage: str
    base_name: str
    stamped_at: Optional[datetime] = None
    machine: Optional[str] = None

    @classmethod
    def from_path(cls, path, stage: str):
        """Parse the stage stamp out of a job's file name.

        Incoming names belong to the producer and are never parsed, even if
        they look stamped; work and out jobs always carry a spooler stamp.
        """
        path = Path(path)
        if stage == "incoming":
            return cls(path=path, stage=stage, base_name=path.name)
        stamped_at, machine, base_name = parse_stage_name(path.name)
        return cls(path=path, stage=stage, base_name=base_name, stamped_at=stamped_at, machine=machine)

    @property
    def name(self) -> str:
        return self.path.name

    @property
    def origin_name(self) -> str:
        return origin_name(self.name, STAGE_STAMPS[self.stage])

    @property
    def elapsed_seconds(self) -> Optional[float]:
        """Run time of an out-stage job: finish stamp minus claim stamp."""
        if self.stage != "out" or not is_stage_name(self.base_name):
            return None
        claimed_at = parse_stage_name(self.base_name)[0]
        return (self.stamped_at - claimed_at).total_seconds()


@dataclass
class IterationResult:
    outcome: str  # idle | processed | skipped | failed
    job: Optional[SpoolJob] = None
    exit_code: Optional[int] = None
    elapsed: Optional[float] = None
    slept: Optional[float] = None
    error: Optional[BaseException] = None
