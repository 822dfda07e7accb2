from typing import List, Tuple

from .pydantic_compat import BaseModel


class EmulatorSettings(BaseModel):
    """
    Fixed configuration of the local emulator suite.

    Hosts are deliberately not read from the shell environment: the
    emulator suite is expected on these ports (see ``firebase.json`` of the
    emulator project). ``FirebaseHandle`` exports them to the variables the
    Google client libraries look for.
    """

    project_id: str = "mylibrary-demo"
    storage_bucket: str = "mylibrary-demo.appspot.com"
    host: str = "localhost"

    ui_port: int = 4000
    firestore_port: int = 8080
    auth_port: int = 9099
    storage_port: int = 9199

    # Seconds, used by the pre-flight HTTP probe
    probe_timeout: float = 2.0

    @property
    def firestore_host(self) -> str:
        return f"{self.host}:{self.firestore_port}"

    @property
    def auth_host(self) -> str:
        return f"{self.host}:{self.auth_port}"

    @property
    def storage_host(self) -> str:
        return f"{self.host}:{self.storage_port}"

    @property
    def ui_url(self) -> str:
        return f"http://{self.host}:{self.ui_port}"

    def emulator_ports(self) -> List[Tuple[int, str]]:
        """(port, label) pairs watched by the port guard."""
        return [
            (self.ui_port, "Firebase UI"),
            (self.firestore_port, "Firestore Emulator"),
            (self.auth_port, "Auth Emulator"),
            (self.storage_port, "Storage Emulator"),
        ]
