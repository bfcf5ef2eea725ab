"""Batch orchestration: concurrent per-item conversion with status tracking."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Iterable, Iterator
from dataclasses import dataclass, field

import anyio

from fchanger.config.constants import MAX_BATCH_SIZE
from fchanger.core.intake import IntakeResult, accept_inputs
from fchanger.core.models import (
    ConversionOptions,
    ConvertedOutput,
    DownloadArtifact,
    MetadataRecord,
    SourceImage,
)
from fchanger.core.state import ConversionItem, ItemStatus, make_item_id
from fchanger.enrichment.base import MetadataEnricher
from fchanger.exceptions import EnrichmentError, ImageProcessingError, ItemStateError
from fchanger.image.formats import extension_for
from fchanger.image.pipeline import convert_image_async
from fchanger.utils.logging import get_logger, request_context

log = get_logger(__name__)

Converter = Callable[[SourceImage, ConversionOptions], Awaitable[ConvertedOutput]]
ItemCallback = Callable[[ConversionItem], None]


@dataclass
class BatchSummary:
    """Outcome of one batch run."""

    succeeded: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    complete: bool = False

    @property
    def processed(self) -> int:
        return len(self.succeeded) + len(self.failed)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed


class ConversionBatch:
    """Owns the items of the active batch and drives them through the pipeline.

    Conversion writes only an item's ``state``; enrichment writes only its
    ``metadata``, ``use_smart_name`` and ``is_analyzing``. The two can run
    side by side on the same item.
    """

    def __init__(
        self,
        items: Iterable[ConversionItem] = (),
        converter: Converter | None = None,
    ) -> None:
        """Initialize the batch.

        Args:
            items: Initial items, keyed by their id
            converter: Async single-image converter (defaults to the Pillow pipeline)
        """
        self._items: dict[str, ConversionItem] = {}
        for item in items:
            if item.id in self._items:
                raise ValueError(f"Duplicate item id: {item.id}")
            self._items[item.id] = item
        self._converter = converter or convert_image_async
        self._generation = 0
        self._run_lock: anyio.Lock | None = None

    @classmethod
    def from_sources(
        cls, sources: Iterable[SourceImage], converter: Converter | None = None
    ) -> ConversionBatch:
        """Create idle items for ``sources``, keeping their order."""
        items: list[ConversionItem] = []
        seen: set[str] = set()
        for index, source in enumerate(sources):
            item_id = make_item_id(source)
            if item_id in seen:
                item_id = f"{item_id}-{index}"
            seen.add(item_id)
            items.append(ConversionItem(id=item_id, source=source))
        return cls(items, converter=converter)

    @classmethod
    def accept(
        cls,
        inputs: Iterable[SourceImage],
        max_items: int = MAX_BATCH_SIZE,
        converter: Converter | None = None,
    ) -> tuple[ConversionBatch, IntakeResult]:
        """Run the input boundary and build a batch from what it accepted."""
        intake = accept_inputs(inputs, max_items=max_items)
        return cls.from_sources(intake.accepted, converter=converter), intake

    # -- collection --------------------------------------------------------

    @property
    def items(self) -> list[ConversionItem]:
        return list(self._items.values())

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def is_converting(self) -> bool:
        return any(item.status is ItemStatus.CONVERTING for item in self._items.values())

    def get(self, item_id: str) -> ConversionItem:
        try:
            return self._items[item_id]
        except KeyError:
            raise KeyError(f"No item with id {item_id!r} in this batch") from None

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[ConversionItem]:
        return iter(self.items)

    def clear(self) -> None:
        """Discard every item; late enrichment results for them are dropped."""
        self._items.clear()
        self._generation += 1
        log.debug("Batch cleared", generation=self._generation)

    # -- conversion --------------------------------------------------------

    async def run(
        self,
        options: ConversionOptions,
        *,
        force: bool = False,
        on_item_done: ItemCallback | None = None,
    ) -> BatchSummary:
        """Convert every item that has not already succeeded.

        Items run concurrently and independently; a failure marks only that
        item as ``error``. Returns once every dispatched item is terminal.

        Args:
            options: Target format and quality for this run
            force: Also re-convert items that already succeeded
            on_item_done: Called with each item as it reaches a terminal status

        Raises:
            InvalidQualityError: Before any item is touched
        """
        options.validate()

        if self._run_lock is None:
            self._run_lock = anyio.Lock()

        async with self._run_lock:
            generation = self._generation
            summary = BatchSummary()
            targets: list[ConversionItem] = []

            for item in self._items.values():
                if item.needs_conversion(force):
                    item.start(force=force)
                    targets.append(item)
                else:
                    summary.skipped.append(item.id)

            log.info(
                "Starting batch run",
                target=options.format.value,
                quality=options.quality,
                items=len(targets),
                skipped=len(summary.skipped),
            )

            async with anyio.create_task_group() as tg:
                for item in targets:
                    tg.start_soon(self._convert_item, item, options, generation, on_item_done)

            for item in targets:
                if item.status is ItemStatus.SUCCESS:
                    summary.succeeded.append(item.id)
                else:
                    summary.failed.append(item.id)
            summary.complete = all(item.status.is_terminal for item in targets)

            log.info(
                "Batch run complete",
                succeeded=len(summary.succeeded),
                failed=len(summary.failed),
                skipped=len(summary.skipped),
            )
            return summary

    async def _convert_item(
        self,
        item: ConversionItem,
        options: ConversionOptions,
        generation: int,
        on_item_done: ItemCallback | None,
    ) -> None:
        with request_context(item_id=item.id):
            log.debug("Converting image", name=item.source.name, target=options.format.value)
            try:
                output = await self._converter(item.source, options)
            except ImageProcessingError as e:
                log.warning("Image conversion failed", name=item.source.name, error=str(e))
                item.fail(str(e))
            except Exception as e:
                log.exception("Unexpected error converting image", name=item.source.name)
                item.fail(f"{type(e).__name__}: {e}")
            else:
                item.succeed(output)

        if on_item_done is not None and generation == self._generation:
            try:
                on_item_done(item)
            except Exception:
                log.exception("Item callback failed", item=item.id)

    # -- output ------------------------------------------------------------

    def download(self, item_id: str, options: ConversionOptions | None = None) -> DownloadArtifact:
        """Build the filename and bytes for a converted item.

        The extension follows the format the bytes were encoded in. Passing
        options for a different format means the item needs a forced re-run.

        Raises:
            ItemStateError: Item has not succeeded, or options target another format
        """
        item = self.get(item_id)
        output = item.output
        if output is None:
            raise ItemStateError(
                f"Item {item_id} is not converted (status={item.status.value})"
            )
        if options is not None and options.format is not output.format:
            raise ItemStateError(
                f"Item {item_id} was converted to {output.format.value}, "
                f"not {options.format.value}; re-run with force to re-target it"
            )

        return DownloadArtifact(
            filename=f"{item.base_name}.{extension_for(output.format)}",
            data=output.data,
            mime_type=output.mime_type,
        )

    def downloads(self) -> list[DownloadArtifact]:
        """Artifacts for every item that has succeeded, in batch order."""
        return [self.download(item.id) for item in self._items.values() if item.output is not None]

    # -- enrichment --------------------------------------------------------

    async def analyze(self, item_id: str, enricher: MetadataEnricher) -> MetadataRecord | None:
        """Fetch a suggested name for one item.

        A call while the item is already being analyzed, or after it already
        has metadata, does nothing. Failures are logged and absorbed: only
        ``is_analyzing`` is reset.

        Returns:
            The attached record, or None if nothing was attached
        """
        item = self.get(item_id)
        if item.is_analyzing or item.metadata is not None:
            return None

        generation = self._generation
        item.is_analyzing = True
        try:
            with request_context(item_id=item.id):
                record = await enricher.analyze(item.source.data, item.source.content_type)
        except EnrichmentError as e:
            log.warning("Image analysis failed", name=item.source.name, error=str(e))
            return None
        except Exception:
            log.exception("Unexpected error from enricher", name=item.source.name)
            return None
        finally:
            item.is_analyzing = False

        if generation != self._generation or self._items.get(item.id) is not item:
            log.debug("Discarding analysis for a cleared batch", item=item.id)
            return None

        item.metadata = record
        item.use_smart_name = True
        log.info("Suggested filename attached", name=item.source.name, suggested=record.suggested_filename)
        return record

    async def analyze_all(self, enricher: MetadataEnricher) -> dict[str, MetadataRecord]:
        """Analyze every item concurrently; returns the records that were attached."""
        results: dict[str, MetadataRecord] = {}

        async def _one(item_id: str) -> None:
            record = await self.analyze(item_id, enricher)
            if record is not None:
                results[item_id] = record

        async with anyio.create_task_group() as tg:
            for item_id in list(self._items):
                tg.start_soon(_one, item_id)

        return results

    def set_smart_name(self, item_id: str, enabled: bool) -> None:
        item = self.get(item_id)
        if enabled and item.metadata is None:
            raise ItemStateError(f"Item {item_id} has no suggested filename")
        item.use_smart_name = enabled

    def toggle_smart_name(self, item_id: str) -> bool:
        """Flip smart naming for an item that has metadata; returns the new value."""
        item = self.get(item_id)
        self.set_smart_name(item_id, not item.use_smart_name)
        return item.use_smart_name
