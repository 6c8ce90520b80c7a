"""Config File Loader.

Reads KEY=VALUE files into an Environment. Each requested directory is
loaded by its own worker; a LoadedSet shared by the workers of one call
makes the first commit of a key win over every later one.
"""

import re
import threading
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass
from pathlib import Path

from envar.environment import Environment, ProcessEnvironment
from envar.exceptions import (
    CyclicReferenceError,
    EnvFileError,
    EnvFileReadError,
    EnvSetError,
    LoadError,
)
from envar_config.settings import Settings
from envar_obs.logging import get_logger

logger = get_logger(__name__)

PLACEHOLDER = re.compile(r"\$\{([^}]+)\}")


@dataclass(frozen=True)
class ConfigSource:
    """A parsed config file."""

    path: Path
    entries: tuple[tuple[str, str], ...]


class LoadedSet:
    """Keys committed during one load call.

    Check, set and mark happen under one lock so concurrent workers can
    never both commit the same key.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._keys: set[str] = set()

    def commit(self, key: str, value: str, env: Environment) -> bool:
        """Set key in env unless an earlier commit claimed it.

        Returns:
            True if the value was written, False if the key was already loaded

        Raises:
            ValueError: If env rejects the key or value (key is not marked)
        """
        with self._lock:
            if key in self._keys:
                return False
            env.set(key, value)
            self._keys.add(key)
            return True

    def keys(self) -> frozenset[str]:
        with self._lock:
            return frozenset(self._keys)

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)


def parse_line(line: str) -> tuple[str, str] | None:
    """Parse one line into (key, value).

    Blank lines, # comments and lines without '=' yield None. Only the first
    '=' splits; there is no quoting or escaping.
    """
    line = line.strip()
    if not line or line.startswith("#"):
        return None

    key, sep, value = line.partition("=")
    if not sep:
        return None
    return key.strip(), value.strip()


def parse_file(path: Path | str) -> ConfigSource:
    """Read and parse a UTF-8 config file.

    Raises:
        FileNotFoundError: If the file or one of its parent directories is missing
        NotADirectoryError: If a parent of the file is not a directory
        EnvFileReadError: If the file cannot be opened, read or decoded
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (FileNotFoundError, NotADirectoryError):
        raise
    except (OSError, UnicodeDecodeError) as e:
        raise EnvFileReadError(path, f"Error reading .env file ({e})") from e

    entries = []
    for line in text.splitlines():
        parsed = parse_line(line)
        if parsed is not None:
            entries.append(parsed)
    return ConfigSource(path=path, entries=tuple(entries))


def expand(
    value: str,
    env: Environment,
    max_passes: int = 10,
    *,
    key: str = "",
    path: Path | str | None = None,
) -> str:
    """Substitute ${NAME} placeholders from env until the value stops changing.

    Unset names are left as literal placeholders.

    Raises:
        CyclicReferenceError: If the value still changes after max_passes passes
    """

    def _replace(match: re.Match) -> str:
        resolved = env.get(match.group(1))
        return match.group(0) if resolved is None else resolved

    passes = 0
    while True:
        expanded = PLACEHOLDER.sub(_replace, value)
        if expanded == value:
            return value
        passes += 1
        if passes > max_passes:
            raise CyclicReferenceError(path, key, expanded, max_passes)
        value = expanded


def load(
    path: Path | str,
    loaded: LoadedSet,
    env: Environment | None = None,
    *,
    expand_variables: bool = True,
    max_passes: int = 10,
) -> int:
    """Load one config file into env.

    A missing file is logged and skipped. Keys already in loaded are left
    alone; a value that was in env before the call is overwritten.

    Args:
        path: Config file path
        loaded: Keys committed so far by this call (shared between workers)
        env: Target environment (process environment by default)
        expand_variables: Substitute ${NAME} placeholders before committing
        max_passes: Expansion pass limit

    Returns:
        Number of keys this file committed

    Raises:
        EnvFileReadError: If the file exists but cannot be read
        EnvSetError: If env rejects a key or value
        CyclicReferenceError: If a value never settles during expansion
    """
    path = Path(path)
    env = env if env is not None else ProcessEnvironment()

    try:
        source = parse_file(path)
    except (FileNotFoundError, NotADirectoryError):
        logger.warning("env_file_not_found", path=str(path))
        return 0

    committed = 0
    for key, value in source.entries:
        if key in loaded:
            continue
        if expand_variables:
            value = expand(value, env, max_passes, key=key, path=path)
        try:
            if loaded.commit(key, value, env):
                committed += 1
        except (ValueError, OSError) as e:
            raise EnvSetError(path, key, str(e)) from e

    logger.debug("env_file_loaded", path=str(path), committed=committed, entries=len(source.entries))
    return committed


def resolve_paths(paths: Iterable[Path | str], settings: Settings) -> list[Path]:
    """Map directories to config file paths.

    No directories means the working directory alone; explicit directories
    replace it rather than adding to it.
    """
    directories = [Path(p) for p in paths] or [Path.cwd()]
    return [directory / settings.ENV_FILENAME for directory in directories]


def load_env(
    *paths: Path | str,
    env: Environment | None = None,
    settings: Settings | None = None,
) -> frozenset[str]:
    """Load the config file of every directory concurrently.

    All workers finish before this returns. Every failure is logged, then
    reported together.

    Args:
        *paths: Directories holding a config file (default: working directory)
        env: Target environment (process environment by default)
        settings: Loader settings (read from ENVAR_* by default)

    Returns:
        Keys committed by this call

    Raises:
        LoadError: If any file failed to load
    """
    settings = settings or Settings()
    env = env if env is not None else ProcessEnvironment()
    files = resolve_paths(paths, settings)
    loaded = LoadedSet()

    with ThreadPoolExecutor(
        max_workers=settings.MAX_WORKERS or len(files),
        thread_name_prefix="envar-load",
    ) as pool:
        futures = [
            pool.submit(
                load,
                file,
                loaded,
                env,
                expand_variables=settings.EXPAND_VARIABLES,
                max_passes=settings.MAX_EXPANSION_PASSES,
            )
            for file in files
        ]
        wait(futures)

    errors: list[EnvFileError] = []
    for file, future in zip(files, futures):
        error = future.exception()
        if error is None:
            continue
        if not isinstance(error, EnvFileError):
            cause = error
            error = EnvFileReadError(file, f"Unexpected error loading .env file ({cause!r})")
            error.__cause__ = cause
        logger.error("env_load_failed", path=str(file), error=str(error))
        errors.append(error)

    if errors:
        raise LoadError(errors)

    return loaded.keys()
