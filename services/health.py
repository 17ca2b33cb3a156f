"""
Health probe logic for liveness and readiness checks.

Liveness  (/health/live)  — is the process running?
Readiness (/health/ready) — can it serve a recognition? (store writable,
                            credential present). Speech output is reported
                            but does not gate readiness: text still comes
                            back without a voice.
"""

import os
import tempfile
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Optional

if TYPE_CHECKING:
    from services.container import TrainerServices


@dataclass
class CheckResult:
    healthy: bool
    message: str
    details: Optional[Dict] = field(default=None)


class HealthChecker:
    """Liveness and readiness health checks."""

    def __init__(self, services: "TrainerServices" = None):
        self.start_time = time.time()
        self.services = services

    def liveness(self) -> CheckResult:
        """Liveness probe — always healthy if the process is alive."""
        return CheckResult(
            healthy=True,
            message="Process is running",
            details={"uptime_seconds": round(time.time() - self.start_time, 1)},
        )

    def readiness(self) -> CheckResult:
        checks: Dict[str, Dict] = {}
        all_ok = True

        for name, check, gating in (
            ("storage", self._check_storage, True),
            ("credential", self._check_credential, True),
            ("speech", self._check_speech, False),
        ):
            try:
                result = check()
            except Exception as exc:
                result = CheckResult(healthy=False, message=str(exc))
            checks[name] = result.__dict__
            if gating and not result.healthy:
                all_ok = False

        return CheckResult(
            healthy=all_ok,
            message="All checks passed" if all_ok else "One or more checks failed",
            details=checks,
        )

    # ------------------------------------------------------------------
    # Individual checks
    # ------------------------------------------------------------------

    def _check_storage(self) -> CheckResult:
        if self.services is None:
            return CheckResult(healthy=False, message="Services not initialised")
        root = self.services.slot_store.root_dir
        fd, path = tempfile.mkstemp(dir=root, prefix=".probe.")
        os.close(fd)
        os.unlink(path)
        return CheckResult(healthy=True, message=f"Store writable at {root}")

    def _check_credential(self) -> CheckResult:
        if self.services is None or not self.services.store.get_credential():
            return CheckResult(healthy=False, message="No transcription API key stored")
        return CheckResult(healthy=True, message="Transcription API key stored")

    def _check_speech(self) -> CheckResult:
        if self.services is None or self.services.voice_output is None:
            return CheckResult(healthy=False, message="No speech output configured")
        info = self.services.voice_output.sink.get_info()
        return CheckResult(
            healthy=bool(info.get("available")),
            message=f"Speech output: {info.get('name')}",
            details=info,
        )
