"""Envar exceptions.

Load-phase errors fail the whole call. Conversion errors are only ever
logged by the binder; they are raised when the converter is used directly.
"""

from pathlib import Path


class EnvarError(Exception):
    """Base exception for envar."""

    pass


class InvalidTargetError(EnvarError, TypeError):
    """Bind target is not a dataclass or pydantic model instance."""

    pass


# ============================================================================
# LOAD PHASE
# ============================================================================


class EnvFileError(EnvarError):
    """A single config file could not be loaded."""

    def __init__(self, path: Path | str | None, message: str):
        self.path = Path(path) if path is not None else None
        super().__init__(f"{message}: {self.path}" if self.path else message)


class EnvFileReadError(EnvFileError):
    """Config file exists but could not be opened, read or decoded."""

    pass


class EnvSetError(EnvFileError):
    """The environment refused a key or value from the config file."""

    def __init__(self, path: Path | str | None, key: str, reason: str):
        self.key = key
        super().__init__(path, f"Error setting environment variable {key!r} ({reason})")


class CyclicReferenceError(EnvFileError):
    """Placeholder expansion did not settle within the pass limit."""

    def __init__(self, path: Path | str | None, key: str, value: str, passes: int):
        self.key = key
        self.value = value
        self.passes = passes
        super().__init__(
            path,
            f"Expansion of {key!r} did not settle after {passes} passes (last value {value!r})",
        )


class LoadError(EnvarError):
    """One or more config files failed to load; nothing was bound."""

    def __init__(self, errors: list[EnvFileError]):
        self.errors = list(errors)
        super().__init__(
            f"encountered errors while loading environment variables ({len(self.errors)} failed)"
        )


# ============================================================================
# BIND PHASE
# ============================================================================


class ConversionError(EnvarError, ValueError):
    """Raw string could not be parsed as the declared type."""

    def __init__(self, kind: str, value: str, reason: str | None = None):
        self.kind = kind
        self.value = value
        message = f"failed to convert {value!r} to {kind}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class UnsupportedTypeError(ConversionError):
    """Declared field type has no converter."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        EnvarError.__init__(self, f"unsupported field type {kind} for value {value!r}")
