import codecs

from pydantic import BaseModel, Field, field_validator
from typing import Literal


def _known_codec(name: str) -> str:
    try:
        codecs.lookup(name)
    except LookupError:
        raise ValueError(f"unknown encoding: {name!r}") from None
    return name


class NavigationConfig(BaseModel):
    delimiter: str | None = "/"
    default_keyspace: str | None = None
    page_size: int = Field(default=50, gt=0)
    encoding: str = "utf-8"

    @field_validator("delimiter")
    @classmethod
    def validate_delimiter(cls, v: str | None) -> str | None:
        if v is not None and v == "":
            raise ValueError("delimiter cannot be empty; use null for flat mode")
        return v

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        return _known_codec(v)


class DisplayConfig(BaseModel):
    wrap_values: bool = True
    pretty_print: bool = True
    value_encoding: str = "utf-8"

    @field_validator("value_encoding")
    @classmethod
    def validate_value_encoding(cls, v: str) -> str:
        return _known_codec(v)


class SeedConfig(BaseModel):
    keys_per_level: int = Field(default=10, gt=0)
    delimiters: list[str] = Field(
        default_factory=lambda: ["/", "\\", ":", "::", ",", ".", "-", "_"]
    )

    @field_validator("delimiters")
    @classmethod
    def validate_delimiters(cls, v: list[str]) -> list[str]:
        if any(d == "" for d in v):
            raise ValueError("seed delimiters cannot be empty strings")
        return v


class KeyscopeConfig(BaseModel):
    navigation: NavigationConfig = Field(default_factory=NavigationConfig)
    display: DisplayConfig = Field(default_factory=DisplayConfig)
    seed: SeedConfig = Field(default_factory=SeedConfig)
    log_level: Literal["debug", "info", "warn", "error"] = "warn"
    log_file: str | None = None
