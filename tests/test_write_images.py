"""Tests for the card image writer and extraction pipeline."""

import logging
from collections.abc import Callable, Mapping
from pathlib import Path
from typing import Any

import pytest

from pnp_card_extractor.db.cache import LayeredCache
from pnp_card_extractor.models import (
    ExtractionOptions,
    OutOfRangeError,
    PositionNotFoundError,
    RangeError,
)
from pnp_card_extractor.services.extract_cards import (
    build_writer,
    extract_cards,
    select_pages,
)
from pnp_card_extractor.services.write_images import (
    DEFAULT_PREFIX,
    ImageWriter,
    build_text_metadata,
)

from conftest import FakeSource


class FakeImage:
    """Card image that writes a placeholder file and remembers its text chunks."""

    def __init__(self, width: int = 300, height: int = 419) -> None:
        self.width = width
        self.height = height
        self.saved: list[tuple[Path, dict[str, str]]] = []

    def save(self, path: Path, text: Mapping[str, str]) -> None:
        path.write_bytes(b"\x89PNG")
        self.saved.append((path, dict(text)))


def cac_options(tmp_path: Path, **overrides) -> ExtractionOptions:
    values = {
        "pack_code": "cac",
        "card_order": "1,2,3,2",
        "extra_start": 1,
        "pages": "-",
        "filename_template": '{pack.code}/{code}{is_variant ? "-"}{is_variant ? variant_position}.png',
        "extra_template": "{pack.code}/extra/{page_number}-{card_number}.png",
        "directory": tmp_path,
    }
    values.update(overrides)
    return ExtractionOptions(**values)


class TestTextMetadata:
    def test_prefixes_and_flattens(self) -> None:
        """Nested values become prefixed dotted keys."""
        metadata = {"code": "03001", "pack": {"code": "cac", "size": 3}, "is_variant": True}

        text = build_text_metadata(metadata)

        assert text[f"{DEFAULT_PREFIX}code"] == "03001"
        assert text["netrunner:pack.code"] == "cac"
        assert text["netrunner:pack.size"] == "3"
        assert text["netrunner:is_variant"] == "True"

    def test_missing_keys_skipped(self) -> None:
        """Keys absent from the metadata are left out."""
        assert build_text_metadata({"code": "03001"}) == {"netrunner:code": "03001"}

    def test_custom_keys_and_prefix(self) -> None:
        """Callers choose which keys to embed and their prefix."""
        text = build_text_metadata({"code": "03001", "title": "X"}, keys=["title"], prefix="nr.")

        assert text == {"nr.title": "X"}


class TestImageWriter:
    def test_writes_card_with_metadata(self, catalog: LayeredCache, tmp_path: Path) -> None:
        """Cards are saved under their template path with embedded metadata."""
        writer = build_writer(catalog, cac_options(tmp_path))
        image = FakeImage()
        writer.merger.next_position = 2

        path = writer.write(image, page_number=1, card_number=2)

        assert path == tmp_path / "cac" / "03001.png"
        assert path.exists()
        saved_path, text = image.saved[0]
        assert saved_path == path
        assert text["netrunner:code"] == "03001"
        assert text["netrunner:faction.color"] == "8f4fe8"
        assert text["netrunner:page_number"] == "1"

    def test_extra_card_uses_extra_template(self, catalog: LayeredCache, tmp_path: Path) -> None:
        """Extras are named by the extra template."""
        writer = build_writer(catalog, cac_options(tmp_path))

        path = writer.write(FakeImage(), page_number=1, card_number=1)

        assert path == tmp_path / "cac" / "extra" / "1-1.png"

    def test_no_pack_uses_fallback_template(self, tmp_path: Path) -> None:
        """Without a pack, cards are named by page and card number."""
        options = ExtractionOptions(directory=tmp_path, pages="-")
        writer = build_writer(None, options)

        path = writer.write(FakeImage(), page_number=2, card_number=5)

        assert path == tmp_path / "Page 2" / "Card 5.png"

    def test_existing_file_skipped(
        self, catalog: LayeredCache, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Existing files are left alone and a warning is logged."""
        existing = tmp_path / "cac" / "extra" / "1-1.png"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"keep")
        writer = build_writer(catalog, cac_options(tmp_path))
        image = FakeImage()

        with caplog.at_level(logging.WARNING):
            path = writer.write(image, page_number=1, card_number=1)

        assert path is None
        assert image.saved == []
        assert existing.read_bytes() == b"keep"
        assert "Skipping existing file" in caplog.text

    def test_force_replaces_existing_file(self, catalog: LayeredCache, tmp_path: Path) -> None:
        """Forced runs overwrite existing files."""
        existing = tmp_path / "cac" / "extra" / "1-1.png"
        existing.parent.mkdir(parents=True)
        existing.write_bytes(b"old")
        writer = build_writer(catalog, cac_options(tmp_path, force=True))

        path = writer.write(FakeImage(), page_number=1, card_number=1)

        assert path == existing
        assert existing.read_bytes() == b"\x89PNG"

    def test_writer_is_an_image_writer(self, catalog: LayeredCache, tmp_path: Path) -> None:
        """build_writer returns an ImageWriter."""
        assert isinstance(build_writer(catalog, cac_options(tmp_path)), ImageWriter)


class TestSelectPages:
    def test_default_skips_cover_page(self) -> None:
        """The default selection starts at page 2."""
        assert list(select_pages("2-", 4)) == [2, 3, 4]

    def test_duplicates_removed(self) -> None:
        """Pages selected twice are processed once."""
        assert list(select_pages("3, 1, 3", 4)) == [3, 1]

    def test_out_of_range(self) -> None:
        """Pages past the end of the document are rejected."""
        with pytest.raises(RangeError):
            select_pages("5", 4)


class TestExtractCards:
    def test_writes_every_card_in_document_order(
        self, catalog: LayeredCache, tmp_path: Path
    ) -> None:
        """Every image is written in page then card order."""
        options = cac_options(tmp_path)
        pages = [[FakeImage(), FakeImage(), FakeImage()], [FakeImage(), FakeImage()]]

        summary = extract_cards(pages, options, build_writer(catalog, options))

        assert [path.relative_to(tmp_path).as_posix() for path in summary.written] == [
            "cac/extra/1-1.png",
            "cac/03001.png",
            "cac/03002-1.png",
            "cac/03003.png",
            "cac/03002-2.png",
        ]
        assert summary.total == 5
        assert summary.failed == {}

    def test_pages_processed_in_ascending_order(
        self, catalog: LayeredCache, tmp_path: Path
    ) -> None:
        """Page selections are processed in page order."""
        options = cac_options(tmp_path, pages="2,1", extra_start=0, card_order="1-3")
        first, second = FakeImage(), FakeImage()

        extract_cards([[first], [second]], options, build_writer(catalog, options))

        assert first.saved[0][0].name == "03001.png"
        assert second.saved[0][0].name == "03002.png"

    def test_skipped_files_counted(self, catalog: LayeredCache, tmp_path: Path) -> None:
        """Skipped files are counted, not written."""
        options = cac_options(tmp_path)
        extra = tmp_path / "cac" / "extra" / "1-1.png"
        extra.parent.mkdir(parents=True)
        extra.write_bytes(b"keep")

        summary = extract_cards([[FakeImage(), FakeImage()]], options, build_writer(catalog, options))

        assert summary.skipped == 1
        assert len(summary.written) == 1

    def test_database_errors_recorded_as_failures(
        self,
        make_source: Callable[..., FakeSource],
        api_responses: dict[str, Any],
        tmp_path: Path,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Catalog failures are logged and the run continues."""
        without_cards = {key: value for key, value in api_responses.items() if key != "cards"}
        catalog = LayeredCache(source=make_source(without_cards))
        options = cac_options(tmp_path)

        with caplog.at_level(logging.ERROR):
            summary = extract_cards(
                [[FakeImage(), FakeImage()]], options, build_writer(catalog, options)
            )

        assert len(summary.written) == 1
        assert list(summary.failed) == ["page 1 card 2"]
        assert "Could not resolve metadata for page 1 card 2" in caplog.text

    def test_missing_catalog_card_raises(self, catalog: LayeredCache, tmp_path: Path) -> None:
        """A position past the pack's last catalog card stops the run."""
        options = ExtractionOptions(pack_code="ta", pages="-", directory=tmp_path)

        with pytest.raises(PositionNotFoundError):
            extract_cards([[FakeImage(), FakeImage()]], options, build_writer(catalog, options))

    def test_too_many_images_raise(self, catalog: LayeredCache, tmp_path: Path) -> None:
        """More images than the configuration allows stops the run."""
        options = cac_options(tmp_path, extra_start=0, card_order="1")

        with pytest.raises(OutOfRangeError):
            extract_cards([[FakeImage(), FakeImage()]], options, build_writer(catalog, options))

    def test_invalid_page_selection(self, catalog: LayeredCache, tmp_path: Path) -> None:
        """Bad page selections fail before anything is written."""
        options = cac_options(tmp_path, pages="3")

        with pytest.raises(RangeError):
            extract_cards([[FakeImage()]], options, build_writer(catalog, options))
