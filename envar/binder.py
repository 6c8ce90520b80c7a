"""Record Binder.

Loads config files, then assigns environment values to the tagged fields
of a dataclass or pydantic model instance. Loading is all-or-nothing;
binding is best effort and only ever logs.
"""

import dataclasses
from dataclasses import dataclass
from pathlib import Path
from typing import Annotated, Any, get_type_hints

from pydantic import BaseModel

from envar.converter import ConverterRegistry, convert
from envar.environment import Environment, ProcessEnvironment
from envar.exceptions import ConversionError, InvalidTargetError
from envar.loader import load_env
from envar_config.settings import Settings
from envar_obs.logging import get_logger

logger = get_logger(__name__)

DEFAULT_TAG = "env"


@dataclass(frozen=True)
class BoundField:
    """A record field as seen by the binder."""

    name: str
    tag: str
    annotation: Any
    settable: bool


def env_field(name: str, *, tag: str = DEFAULT_TAG, **kwargs: Any) -> Any:
    """Dataclass field bound to environment variable name.

    Example:
        @dataclass
        class Config:
            port: int = env_field("PORT", default=8080)
    """
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[tag] = name
    return dataclasses.field(metadata=metadata, **kwargs)


def validate_target(target: Any) -> None:
    """Raise InvalidTargetError unless target is a record instance."""
    if isinstance(target, type):
        raise InvalidTargetError(
            f"expected a dataclass or pydantic model instance, got class {target.__name__}"
        )
    if not (dataclasses.is_dataclass(target) or isinstance(target, BaseModel)):
        raise InvalidTargetError(
            f"expected a dataclass or pydantic model instance, got {type(target).__name__}"
        )


def _dataclass_fields(target: Any, tag_name: str) -> list[BoundField]:
    cls = type(target)
    try:
        hints = get_type_hints(cls, include_extras=True)
    except NameError:
        # Unresolvable forward reference; fall back to the raw annotations
        hints = {}
    frozen = cls.__dataclass_params__.frozen

    return [
        BoundField(
            name=f.name,
            tag=f.metadata.get(tag_name) or "",
            annotation=hints.get(f.name, f.type),
            settable=not frozen and not f.name.startswith("_"),
        )
        for f in dataclasses.fields(target)
    ]


def _model_fields(target: BaseModel, tag_name: str) -> list[BoundField]:
    cls = type(target)
    frozen = bool(cls.model_config.get("frozen"))

    fields = []
    for name, info in cls.model_fields.items():
        extra = info.json_schema_extra
        tag = extra.get(tag_name) if isinstance(extra, dict) else None
        annotation = info.annotation
        if info.metadata:
            annotation = Annotated[(annotation, *info.metadata)]
        fields.append(
            BoundField(
                name=name,
                tag=tag if isinstance(tag, str) else "",
                annotation=annotation,
                settable=not frozen and not info.frozen and not name.startswith("_"),
            )
        )
    return fields


def record_fields(target: Any, tag_name: str = DEFAULT_TAG) -> list[BoundField]:
    """List the fields of a dataclass or pydantic model instance."""
    validate_target(target)
    if isinstance(target, BaseModel):
        return _model_fields(target, tag_name)
    return _dataclass_fields(target, tag_name)


def bind_fields(
    target: Any,
    env: Environment | None = None,
    *,
    registry: ConverterRegistry | None = None,
    tag_name: str = DEFAULT_TAG,
) -> list[str]:
    """Assign environment values to the tagged fields of target.

    Untagged fields are skipped. Missing variables, unsettable fields and
    conversion failures are logged and leave the field unchanged.

    Returns:
        Names of the fields that were assigned
    """
    env = env if env is not None else ProcessEnvironment()
    assigned = []

    for field in record_fields(target, tag_name):
        if not field.tag:
            continue

        raw = env.get(field.tag)
        if raw is None:
            logger.warning("env_variable_not_found", key=field.tag, field=field.name)
            continue

        if not field.settable:
            logger.warning("env_field_not_settable", key=field.tag, field=field.name)
            continue

        try:
            value = convert(raw, field.annotation, registry)
            setattr(target, field.name, value)
        except ConversionError as e:
            logger.warning("env_conversion_failed", key=field.tag, field=field.name, error=str(e))
            continue
        except ValueError as e:
            # pydantic validate_assignment rejected the converted value
            logger.warning("env_assignment_rejected", key=field.tag, field=field.name, error=str(e))
            continue

        assigned.append(field.name)

    return assigned


def bind(
    target: Any,
    *paths: Path | str,
    env: Environment | None = None,
    settings: Settings | None = None,
    registry: ConverterRegistry | None = None,
) -> None:
    """Load config files and bind environment variables onto target.

    Args:
        target: Dataclass or pydantic model instance with tagged fields
        *paths: Directories holding a config file (default: working directory)
        env: Environment to load into and bind from (process environment by default)
        settings: Envar settings (read from ENVAR_* by default)
        registry: Converters (built-in registry by default)

    Raises:
        InvalidTargetError: If target is not a record instance (nothing is loaded)
        LoadError: If any config file failed to load (nothing is bound)
    """
    validate_target(target)
    settings = settings or Settings()
    env = env if env is not None else ProcessEnvironment()

    load_env(*paths, env=env, settings=settings)

    assigned = bind_fields(target, env, registry=registry, tag_name=settings.TAG_NAME)
    logger.debug("env_bound", target=type(target).__name__, fields=assigned)
