"""Tests for the input boundary."""

from fchanger.config.constants import NO_VALID_IMAGES_WARNING
from fchanger.core.intake import accept_inputs, load_sources
from fchanger.core.models import SourceImage


def _source(name: str, content_type: str = "image/png") -> SourceImage:
    return SourceImage(data=name.encode(), content_type=content_type, name=name)


class TestAcceptInputs:
    """Tests for accept_inputs()."""

    def test_all_accepted(self):
        result = accept_inputs([_source("a.png"), _source("b.png")])

        assert [s.name for s in result.accepted] == ["a.png", "b.png"]
        assert result.warnings == []
        assert not result.was_truncated

    def test_truncates_to_first_five(self):
        """Seven images keep the first five and warn once."""
        result = accept_inputs([_source(f"{i}.png") for i in range(7)])

        assert [s.name for s in result.accepted] == ["0.png", "1.png", "2.png", "3.png", "4.png"]
        assert result.truncated == 2
        assert result.warnings == ["You can only upload up to 5 images at a time."]

    def test_exactly_five_not_truncated(self):
        result = accept_inputs([_source(f"{i}.png") for i in range(5)])

        assert len(result.accepted) == 5
        assert not result.was_truncated

    def test_custom_limit(self):
        result = accept_inputs([_source(f"{i}.png") for i in range(3)], max_items=2)

        assert len(result.accepted) == 2
        assert "up to 2 images" in result.warnings[0]

    def test_non_images_filtered_before_truncation(self):
        """Rejected inputs do not count toward the limit."""
        inputs = [_source("notes.txt", "text/plain")] + [_source(f"{i}.png") for i in range(5)]

        result = accept_inputs(inputs)

        assert len(result.accepted) == 5
        assert result.rejected == ["notes.txt"]
        assert not result.was_truncated
        assert result.warnings == ["Skipped non-image files: notes.txt"]

    def test_no_images(self):
        result = accept_inputs([_source("a.pdf", "application/pdf")])

        assert result.accepted == []
        assert NO_VALID_IMAGES_WARNING in result.warnings

    def test_empty_input(self):
        result = accept_inputs([])

        assert result.accepted == []
        assert result.warnings == [NO_VALID_IMAGES_WARNING]


class TestLoadSources:
    def test_keeps_order(self, sample_image_files):
        sources = load_sources(sample_image_files)

        assert [s.name for s in sources] == ["red.png", "green.jpg", "logo.png"]
        assert [s.content_type for s in sources] == ["image/png", "image/jpeg", "image/png"]
