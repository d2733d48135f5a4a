# naming.py
import re
import socket
from datetime import datetime

STAMP_FORMAT = "%Y%m%d_%H%M%S"

_STAGE_NAME = re.compile(r"^(\d{8}_\d{6})_([^_/]+)_(.+)$")


def make_stage_name(stage_timestamp: datetime, machine_id: str, base_name: str) -> str:
    """<YYYYMMDD_HHMMSS>_<machine_id>_<base_name>

    Unique only to one-second granularity per machine.
    """
    return f"{stage_timestamp.strftime(STAMP_FORMAT)}_{machine_id}_{base_name}"


def parse_stage_name(name: str):
    """Split a stage name into (timestamp, machine, base_name).

    Raises ValueError if the name carries no stamp.
    """
    m = _STAGE_NAME.match(name)
    if not m:
        raise ValueError(f"not a stage name: {name!r}")
    try:
        stamped_at = datetime.strptime(m.group(1), STAMP_FORMAT)
    except ValueError as e:
        raise ValueError(f"bad timestamp in stage name {name!r}: {e}") from e
    return stamped_at, m.group(2), m.group(3)


def is_stage_name(name: str) -> bool:
    try:
        parse_stage_name(name)
    except ValueError:
        return False
    return True


def origin_name(name: str, stamps: int) -> str:
    """Strip the `stamps` leading stage stamps a spooler added.

    A producer name that merely looks stamped is left alone once the
    spooler stamps are gone.
    """
    for _ in range(stamps):
        if not is_stage_name(name):
            break
        name = parse_stage_name(name)[2]
    return name


def default_machine_name() -> str:
    """Full host name, so node1.siteA and node1.siteB stay distinct."""
    # underscores would make the stamp ambiguous to parse
    return socket.gethostname().replace("_", "-") or "localhost"
