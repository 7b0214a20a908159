"""errors.py - Exception types raised by the bindery pipeline."""

from pathlib import Path


class BinderyError(Exception):
    """Base class for every failure the CLI reports as ERROR."""


class InputError(BinderyError):
    """A source file, cover image or stylesheet could not be used."""


class ConfigError(InputError):
    pass


class UnrecognizedTextExtensionError(InputError):
    def __init__(self, path: Path):
        self.path = Path(path)
        super().__init__(
            f"unrecognized text file extension: '{self.path.suffix}' ({self.path})"
        )


class RegistrationError(BinderyError):
    """A file referenced from the text, stylesheet or files list is unreadable."""

    def __init__(self, path: Path, reason: str):
        self.path = Path(path)
        super().__init__(f"cannot embed {self.path}: {reason}")


class AssemblyError(BinderyError):
    pass
