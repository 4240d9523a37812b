"""
Harness configuration.
"""

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

DEFAULT_TRACES_DIR = Path("./traces")
DEFAULT_POLL_INTERVAL = 1.0


@dataclass
class HarnessConfig:
    """Settings shared by every trace run."""
    poll_interval: float = DEFAULT_POLL_INTERVAL
    ready_timeout: Optional[float] = None  # None waits for the host forever
    traces_dir: Path = field(default_factory=lambda: DEFAULT_TRACES_DIR)
    verbose: int = 0
    host_command: Optional[List[str]] = None
    continue_on_failure: bool = False

    @classmethod
    def from_env(cls, environ=None) -> "HarnessConfig":
        """Build a config from CONFORMANCE_* environment variables."""
        env = os.environ if environ is None else environ
        config = cls()

        if env.get("CONFORMANCE_POLL_INTERVAL"):
            config.poll_interval = _positive_float(env["CONFORMANCE_POLL_INTERVAL"],
                                                   "CONFORMANCE_POLL_INTERVAL")
        if env.get("CONFORMANCE_READY_TIMEOUT"):
            config.ready_timeout = _positive_float(env["CONFORMANCE_READY_TIMEOUT"],
                                                   "CONFORMANCE_READY_TIMEOUT")
        if env.get("CONFORMANCE_HOST_COMMAND"):
            config.host_command = shlex.split(env["CONFORMANCE_HOST_COMMAND"])

        return config


def _positive_float(raw: str, name: str) -> float:
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if value <= 0:
        raise ValueError(f"{name} must be positive, got {raw!r}")
    return value
