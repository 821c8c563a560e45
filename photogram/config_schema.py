from __future__ import annotations

import re
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, field_validator

_ENV_NAME_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

DEFAULT_URL_TEMPLATE = (
    "https://docs.google.com/spreadsheets/d/{sheet_id}/gviz/tq?tqx=out:csv&sheet={sheet_name}"
)
DEFAULT_MEDIA_BASE_URL = "https://philippmasur.de/research/photogram/"
DEFAULT_PLACEHOLDER_PATH = "/placeholder.svg"


def _validate_env_var_name(value: str) -> str:
    name = (value or "").strip()
    if not _ENV_NAME_RE.fullmatch(name):
        raise ValueError("must be a valid environment variable name")
    return name


PositiveFloat = Annotated[float, Field(gt=0)]


class SheetConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    sheet_id_env: str = "PHOTOGRAM_SHEET_ID"
    url_template: str = DEFAULT_URL_TEMPLATE
    timeout_seconds: PositiveFloat = 30.0

    @field_validator("sheet_id_env")
    @classmethod
    def _sheet_id_env_must_be_valid(cls, v: str) -> str:
        return _validate_env_var_name(v)

    @field_validator("url_template")
    @classmethod
    def _template_must_name_placeholders(cls, v: str) -> str:
        template = (v or "").strip()
        for placeholder in ("{sheet_id}", "{sheet_name}"):
            if placeholder not in template:
                raise ValueError(f"must contain {placeholder}")
        try:
            template.format(sheet_id="x", sheet_name="y")
        except (KeyError, IndexError, ValueError) as e:
            raise ValueError(
                "may only use the {sheet_id} and {sheet_name} placeholders"
            ) from e
        return template


class MediaConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    base_url: str = DEFAULT_MEDIA_BASE_URL
    extension: str = ".jpg"
    placeholder_path: str = DEFAULT_PLACEHOLDER_PATH

    @field_validator("placeholder_path")
    @classmethod
    def _placeholder_must_be_non_empty(cls, v: str) -> str:
        path = (v or "").strip()
        if not path:
            raise ValueError("must be non-empty")
        return path


class FeedConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    shuffle: bool = True
    shuffle_seed: int | None = None  # None draws fresh order per session


class AppConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    sheet: SheetConfig = Field(default_factory=SheetConfig)
    media: MediaConfig = Field(default_factory=MediaConfig)
    feed: FeedConfig = Field(default_factory=FeedConfig)
