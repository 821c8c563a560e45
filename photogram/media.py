from __future__ import annotations

from dataclasses import dataclass

from .config_schema import DEFAULT_MEDIA_BASE_URL, DEFAULT_PLACEHOLDER_PATH, MediaConfig


@dataclass(frozen=True)
class MediaUrls:
    """Builds hosted media URLs from the bare filenames stored in the sheet."""

    base_url: str = DEFAULT_MEDIA_BASE_URL
    extension: str = ".jpg"
    placeholder_path: str = DEFAULT_PLACEHOLDER_PATH

    @classmethod
    def from_config(cls, media: MediaConfig) -> "MediaUrls":
        return cls(
            base_url=media.base_url,
            extension=media.extension,
            placeholder_path=media.placeholder_path,
        )

    def _build(self, filename: str | None) -> str:
        name = (filename or "").strip()
        if not name:
            return self.placeholder_path
        return f"{self.base_url}{name}{self.extension}"

    def image_url(self, filename: str | None) -> str:
        return self._build(filename)

    def avatar_url(self, filename: str | None) -> str:
        return self._build(filename)


DEFAULT_MEDIA = MediaUrls()


def image_url(filename: str | None) -> str:
    return DEFAULT_MEDIA.image_url(filename)


def avatar_url(filename: str | None) -> str:
    return DEFAULT_MEDIA.avatar_url(filename)
