"""Value objects flowing through the conversion pipeline."""

from __future__ import annotations

import mimetypes
from dataclasses import dataclass, field
from pathlib import Path

from fchanger.image.encoder import validate_quality
from fchanger.image.formats import SupportedFormat, mime_type_for


@dataclass(frozen=True)
class SourceImage:
    """Immutable input: raw bytes, declared content type and display name."""

    data: bytes = field(repr=False)
    content_type: str
    name: str

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def stem(self) -> str:
        """Name with its last extension stripped (``"a.b.png"`` -> ``"a.b"``)."""
        stem = Path(self.name).stem
        return stem or self.name

    @property
    def is_image(self) -> bool:
        return self.content_type.lower().startswith("image/")

    @classmethod
    def from_path(cls, path: Path | str) -> SourceImage:
        """Read a file, guessing its content type from the extension."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            data=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
            name=path.name,
        )


@dataclass(frozen=True)
class ConversionOptions:
    """Target format and quality for one batch run."""

    format: SupportedFormat
    quality: float = 1.0

    def validate(self) -> ConversionOptions:
        """Raise InvalidQualityError unless quality is in [0, 1]."""
        validate_quality(self.quality)
        return self

    @classmethod
    def create(cls, format: str | SupportedFormat, quality: float = 1.0) -> ConversionOptions:
        """Parse the format name and validate quality up front."""
        return cls(format=SupportedFormat.parse(format), quality=quality).validate()


@dataclass(frozen=True)
class MetadataRecord:
    """Suggested filename, alt text and description for one image."""

    suggested_filename: str
    alt_text: str
    description: str


@dataclass(frozen=True)
class ConvertedOutput:
    """Encoded bytes plus the format they were produced in."""

    data: bytes = field(repr=False)
    format: SupportedFormat
    width: int
    height: int

    @property
    def mime_type(self) -> str:
        return mime_type_for(self.format)

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class DownloadArtifact:
    """What the caller persists for a converted item."""

    filename: str
    data: bytes = field(repr=False)
    mime_type: str
