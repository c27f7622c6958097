"""Custom exceptions for code-launcher."""


class LauncherError(Exception):
    """Base exception for all code-launcher errors."""


class InvalidRootError(LauncherError):
    """Raised when the scan root is missing or not a directory."""

    def __init__(self, root_path: str):
        self.root_path = root_path
        super().__init__(f"Not a directory: {root_path}")


class ScanCancelledError(LauncherError):
    """Raised when a scan observes cancellation before finishing.

    ``partial`` holds the sorted projects discovered up to that point.
    """

    def __init__(self, partial: list[str] | None = None):
        self.partial = list(partial or [])
        super().__init__(f"Scan cancelled after {len(self.partial)} project(s)")


class LaunchError(LauncherError):
    """Raised when an IDE command cannot be resolved or spawned."""


class SettingsError(LauncherError):
    """Raised when the settings file cannot be read or written."""
