class MyLibraryEmulatorError(Exception):
    """Base class for every error raised by this package."""


class EmulatorConnectionError(MyLibraryEmulatorError):
    """The emulator suite is not reachable."""

    hint = "Make sure the emulators are running: firebase emulators:start"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return f"{self.message} ({self.hint})"


class SeedError(MyLibraryEmulatorError):
    """A seeding step failed. Steps before ``step`` are already persisted."""

    def __init__(self, step: str, cause: BaseException):
        super().__init__(f"Seeding failed during '{step}': {cause}")
        self.step = step
        self.cause = cause


class StorageFlowError(MyLibraryEmulatorError):
    """A step of the storage upload flow failed."""
