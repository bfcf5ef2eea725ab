"""Per-item conversion state.

Each item carries exactly one of ``Idle | Converting | Succeeded | Failed``.
Transitions go through ``ConversionItem`` so an output can never be attached to
an item that is not converting, and a success is only replaced on a forced run.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from enum import Enum

from fchanger.core.models import ConvertedOutput, MetadataRecord, SourceImage
from fchanger.exceptions import ItemStateError


class ItemStatus(str, Enum):
    """Externally visible status of an item."""

    IDLE = "idle"
    CONVERTING = "converting"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.SUCCESS, ItemStatus.ERROR)


@dataclass(frozen=True)
class Idle:
    status = ItemStatus.IDLE


@dataclass(frozen=True)
class Converting:
    status = ItemStatus.CONVERTING


@dataclass(frozen=True)
class Succeeded:
    output: ConvertedOutput
    status = ItemStatus.SUCCESS


@dataclass(frozen=True)
class Failed:
    reason: str
    status = ItemStatus.ERROR


ItemState = Idle | Converting | Succeeded | Failed


def make_item_id(source: SourceImage) -> str:
    """Stable key derived from the source content and name."""
    digest = hashlib.sha256()
    digest.update(source.name.encode("utf-8"))
    digest.update(b"\0")
    digest.update(source.data)
    return digest.hexdigest()[:12]


@dataclass
class ConversionItem:
    """One unit of work in a batch."""

    id: str
    source: SourceImage
    state: ItemState = field(default_factory=Idle)
    metadata: MetadataRecord | None = None
    use_smart_name: bool = False
    is_analyzing: bool = False

    @property
    def status(self) -> ItemStatus:
        return self.state.status

    @property
    def output(self) -> ConvertedOutput | None:
        return self.state.output if isinstance(self.state, Succeeded) else None

    @property
    def error(self) -> str | None:
        return self.state.reason if isinstance(self.state, Failed) else None

    @property
    def display_name(self) -> str:
        """Suggested filename when smart naming is active, else the source name."""
        if self.use_smart_name and self.metadata is not None:
            return self.metadata.suggested_filename
        return self.source.name

    @property
    def base_name(self) -> str:
        """Filename stem used for downloads."""
        if self.use_smart_name and self.metadata is not None:
            return self.metadata.suggested_filename
        return self.source.stem

    # -- transitions -------------------------------------------------------

    def needs_conversion(self, force: bool = False) -> bool:
        return force or self.status is not ItemStatus.SUCCESS

    def start(self, force: bool = False) -> None:
        if isinstance(self.state, Converting):
            raise ItemStateError(f"Item {self.id} is already converting")
        if isinstance(self.state, Succeeded) and not force:
            raise ItemStateError(f"Item {self.id} already converted; re-run with force")
        self.state = Converting()

    def succeed(self, output: ConvertedOutput) -> None:
        if not isinstance(self.state, Converting):
            raise ItemStateError(f"Item {self.id} is not converting (status={self.status.value})")
        self.state = Succeeded(output)

    def fail(self, reason: str) -> None:
        if not isinstance(self.state, Converting):
            raise ItemStateError(f"Item {self.id} is not converting (status={self.status.value})")
        self.state = Failed(reason)
