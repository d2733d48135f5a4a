# errors.py


class SpoolError(Exception):
    """Base class for spooler errors."""


class SpoolConfigError(SpoolError):
    """Invalid configuration value (bad machine name, sleep bounds)."""


class SpoolLayoutError(SpoolError):
    """A static spool directory is missing. No job can succeed without it."""


class ClaimLostError(SpoolError):
    """The job vanished before our rename, another spooler claimed it first."""

    def __init__(self, path):
        super().__init__(f"job {path} was claimed by another spooler")
        self.path = path


class JobLaunchError(SpoolError):
    """The job program could not be started."""

    def __init__(self, path, reason):
        super().__init__(f"cannot launch {path}: {reason}")
        self.path = path
        self.reason = reason
