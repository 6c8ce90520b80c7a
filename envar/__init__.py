"""
Envar: bind .env files onto dataclasses and pydantic models.

Example:
    @dataclass
    class Config:
        database_url: str = env_field("DATABASE_URL", default="")
        timeout: timedelta = env_field("TIMEOUT", default=timedelta(seconds=5))

    config = Config()
    bind(config)                      # ./.env
    bind(config, "conf", "conf/local")  # conf/.env and conf/local/.env, first writer wins

Pydantic models tag fields with Field(json_schema_extra={"env": "DATABASE_URL"}).
"""

from envar.binder import bind, bind_fields, env_field
from envar.converter import ConverterRegistry, convert, default_registry
from envar.environment import Environment, MappingEnvironment, ProcessEnvironment
from envar.exceptions import (
    ConversionError,
    CyclicReferenceError,
    EnvarError,
    EnvFileError,
    EnvFileReadError,
    EnvSetError,
    InvalidTargetError,
    LoadError,
    UnsupportedTypeError,
)
from envar.loader import LoadedSet, expand, load, load_env, parse_file, parse_line

__all__ = [
    "bind",
    "bind_fields",
    "env_field",
    "load",
    "load_env",
    "expand",
    "parse_file",
    "parse_line",
    "LoadedSet",
    "convert",
    "default_registry",
    "ConverterRegistry",
    "Environment",
    "MappingEnvironment",
    "ProcessEnvironment",
    "EnvarError",
    "InvalidTargetError",
    "EnvFileError",
    "EnvFileReadError",
    "EnvSetError",
    "CyclicReferenceError",
    "LoadError",
    "ConversionError",
    "UnsupportedTypeError",
]
