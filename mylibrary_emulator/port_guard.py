"""
Finds and frees the local ports the emulator suite needs.

Listeners are discovered with ``lsof -ti:<port>`` and terminated with
SIGKILL. A port nobody listens on is the normal case, not an error, and a
failed kill is reported without stopping the others.
"""

import logging
import os
import signal
import subprocess
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Prompt = Callable[[str], bool]

AFFIRMATIVE_ANSWERS = {"y", "yes", "s", "si", "sí"}


class PortStatus(NamedTuple):
    port: int
    label: str
    pids: List[int]

    @property
    def busy(self) -> bool:
        return bool(self.pids)


def stdin_prompt(question: str, read: Callable[[str], str] = input) -> bool:
    """Ask a yes/no question on the terminal. Anything but yes is no."""
    try:
        answer = read(f"{question} (y/N) ")
    except EOFError:
        return False
    return answer.strip().lower() in AFFIRMATIVE_ANSWERS


class PortGuard:

    def __init__(self, ports: Sequence[Tuple[int, str]], lsof_timeout: float = 2.0):
        self.ports = list(ports)
        self.lsof_timeout = lsof_timeout

    def find_listeners(self, port: int) -> List[int]:
        try:
            result = subprocess.run(
                ["lsof", f"-ti:{port}"],
                capture_output=True,
                text=True,
                timeout=self.lsof_timeout,
            )
        except FileNotFoundError:
            logger.warning(f"lsof not found; assuming port {port} is free")
            return []
        except subprocess.TimeoutExpired:
            logger.warning(f"lsof timed out on port {port}; assuming it is free")
            return []
        if result.returncode != 0:
            return []
        return [int(pid) for pid in result.stdout.split() if pid.strip().isdigit()]

    def scan(self) -> List[PortStatus]:
        statuses = []
        for port, label in self.ports:
            status = PortStatus(port, label, self.find_listeners(port))
            if status.busy:
                logger.info(f"Port {port} ({label}) busy, pids {status.pids}")
            else:
                logger.info(f"Port {port} ({label}) free")
            statuses.append(status)
        return statuses

    def busy_ports(self) -> List[PortStatus]:
        return [status for status in self.scan() if status.busy]

    def free_port(self, status: PortStatus) -> bool:
        """SIGKILL every listener. False when any of them could not be killed."""
        freed = True
        for pid in status.pids:
            try:
                os.kill(pid, signal.SIGKILL)
            except ProcessLookupError:
                logger.debug(f"Process {pid} on port {status.port} already gone")
            except OSError as exc:
                logger.warning(f"Could not kill pid {pid} on port {status.port}: {exc}")
                freed = False
        return freed

    def clean(self, busy: Sequence[PortStatus]) -> Dict[int, bool]:
        return {status.port: self.free_port(status) for status in busy}

    def verify_cleanup(self) -> List[PortStatus]:
        """Ports still busy after :meth:`clean`."""
        return self.busy_ports()

    def clean_with_confirmation(
        self, busy: Sequence[PortStatus], prompt: Optional[Prompt] = None
    ) -> Optional[Dict[int, bool]]:
        """Clean after ``prompt`` agrees; None when the user declines."""
        if prompt is not None and not prompt("Free the busy ports?"):
            logger.info("Port cleanup cancelled")
            return None
        return self.clean(busy)
