import os
import logging
from typing import Optional

import firebase_admin
from google.auth.credentials import AnonymousCredentials
from google.cloud import storage as gcs
from google.cloud.firestore_v1 import AsyncClient

from .config import EmulatorSettings

logger = logging.getLogger(__name__)

EMULATOR_ENV_VARS = (
    "FIRESTORE_EMULATOR_HOST",
    "FIREBASE_AUTH_EMULATOR_HOST",
    "STORAGE_EMULATOR_HOST",
)


class FirebaseHandle:
    """
    Explicit handle on every Firebase backend the toolkit talks to.

    Built once at process start and passed by reference to whatever needs
    it (seed writer, verifier, services, upload flow):

    * ``client``: a Firestore :class:`AsyncClient`,
    * ``app``: a named ``firebase_admin`` App, used for Auth,
    * ``bucket``: the Storage bucket of the project.

    With ``use_emulator=True`` (the default) the emulator hosts from
    :class:`EmulatorSettings` are exported before any client is created so
    that the Google libraries route all traffic to the local suite.
    """

    def __init__(
        self,
        settings: Optional[EmulatorSettings] = None,
        credentials=None,
        use_emulator: bool = True,
    ):
        """
        Parameters
        ----------
        settings :
            Emulator configuration; defaults to :class:`EmulatorSettings`.
        credentials :
            Explicit Google credentials for the Firestore client. Ignored by
            the emulators.
        use_emulator :
            Point every client at the local emulator suite.
        """
        self.settings = settings or EmulatorSettings()
        self.project_id = self.settings.project_id
        self.credentials = credentials
        self._use_emulator = use_emulator

        self._app: Optional[firebase_admin.App] = None
        self._bucket = None
        self.client: AsyncClient = self._init_client()

    # --------------------------------------------------------------------- #
    # Internal helpers                                                      #
    # --------------------------------------------------------------------- #

    def _export_emulator_hosts(self) -> None:
        os.environ["FIRESTORE_EMULATOR_HOST"] = self.settings.firestore_host
        os.environ["FIREBASE_AUTH_EMULATOR_HOST"] = self.settings.auth_host
        os.environ["STORAGE_EMULATOR_HOST"] = f"http://{self.settings.storage_host}"

    def _init_client(self) -> AsyncClient:
        if self._use_emulator:
            self._export_emulator_hosts()
            logger.info(f"Using Firestore emulator on {self.settings.firestore_host}")
        else:
            for name in EMULATOR_ENV_VARS:
                os.environ.pop(name, None)
        return AsyncClient(project=self.project_id, credentials=self.credentials)

    # --------------------------------------------------------------------- #
    # Lazily created backends                                               #
    # --------------------------------------------------------------------- #

    @property
    def is_emulator(self) -> bool:
        return self._use_emulator

    @property
    def app(self) -> firebase_admin.App:
        """Named ``firebase_admin`` App owned by this handle."""
        if self._app is None:
            self._app = firebase_admin.initialize_app(
                options={
                    "projectId": self.project_id,
                    "storageBucket": self.settings.storage_bucket,
                },
                name=f"mylibrary-{id(self)}",
            )
            logger.debug(f"Initialized firebase_admin app {self._app.name}")
        return self._app

    @property
    def bucket(self):
        """Storage bucket, anonymous against the emulator."""
        if self._bucket is None:
            if self._use_emulator:
                client = gcs.Client(
                    project=self.project_id,
                    credentials=AnonymousCredentials(),
                    client_options={"api_endpoint": f"http://{self.settings.storage_host}"},
                )
                self._bucket = client.bucket(self.settings.storage_bucket)
            else:
                from firebase_admin import storage

                self._bucket = storage.bucket(app=self.app)
        return self._bucket

    # --------------------------------------------------------------------- #
    # Public utility methods                                                #
    # --------------------------------------------------------------------- #

    def close(self) -> None:
        """Release the firebase_admin App. The Firestore client needs no cleanup."""
        if self._app is not None:
            firebase_admin.delete_app(self._app)
            logger.debug(f"Deleted firebase_admin app {self._app.name}")
            self._app = None

