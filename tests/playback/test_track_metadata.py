"""Tests for the track metadata projection."""

import pytest

from squeezecloud.catalog.types import TrackRecord
from squeezecloud.playback.metadata import (
    TrackMetadata,
    better_artwork_url,
    derive_year,
    make_metadata,
    sanitize_bpm,
    track_uri,
)


class TestArtworkUpgrade:
    """Tests for better_artwork_url."""

    def test_replaces_large(self) -> None:
        url = "https://i1.sndcdn.com/artworks-000-large.jpg"
        assert better_artwork_url(url) == "https://i1.sndcdn.com/artworks-000-t500x500.jpg"

    def test_replaces_every_occurrence(self) -> None:
        assert better_artwork_url("a-large/b-large.jpg") == "a-t500x500/b-t500x500.jpg"

    def test_empty_and_none(self) -> None:
        assert better_artwork_url("") == ""
        assert better_artwork_url(None) == ""

    @pytest.mark.parametrize(
        "url",
        [
            "https://i1.sndcdn.com/artworks-000-large.jpg",
            "https://i1.sndcdn.com/avatars-large-large.png",
            "https://example.com/plain.jpg",
            "",
        ],
    )
    def test_idempotent(self, url: str) -> None:
        """Test applying the upgrade twice equals applying it once."""
        once = better_artwork_url(url)
        assert better_artwork_url(once) == once


class TestDeriveYear:
    """Tests for year derivation precedence."""

    def test_release_year_wins(self) -> None:
        assert derive_year(2020, "2015-06-01") == "2020"
        assert derive_year("2020", "2015-06-01") == "2020"

    def test_falls_back_to_created_at(self) -> None:
        assert derive_year(0, "2015-06-01") == "2015"
        assert derive_year(None, "2015/06/01 10:00:00 +0000") == "2015"
        assert derive_year("", "2015-06-01") == "2015"

    def test_both_absent(self) -> None:
        assert derive_year(None, None) == ""
        assert derive_year(0, "") == ""

    def test_malformed_timestamp(self) -> None:
        """Test short or non-numeric timestamps give an empty year."""
        assert derive_year(None, "15") == ""
        assert derive_year(None, "June 2015") == ""
        assert derive_year(-1, "abcd-01-01") == ""


class TestSanitizeBpm:
    """Tests for BPM sanitation."""

    def test_positive(self) -> None:
        assert sanitize_bpm("128") == 128
        assert sanitize_bpm(128) == 128
        assert sanitize_bpm(127.6) == 127

    def test_zero_or_absent(self) -> None:
        assert sanitize_bpm("0") == ""
        assert sanitize_bpm(0) == ""
        assert sanitize_bpm(None) == ""
        assert sanitize_bpm("fast") == ""
        assert sanitize_bpm(-5) == ""


class TestMakeMetadata:
    """Tests for make_metadata."""

    def test_full_projection(self) -> None:
        record = TrackRecord(
            id="42",
            title="Title",
            duration_ms=215999,
            username="Someone",
            artwork_url="https://i1.sndcdn.com/artworks-42-large.jpg",
            created_at="2015/06/01 10:00:00 +0000",
            release_year=2014,
            bpm="124",
        )

        metadata = make_metadata(record)

        assert metadata.id == "42"
        assert metadata.duration == 215  # Truncated
        assert metadata.name == "Title"
        assert metadata.title == "Title"
        assert metadata.artist == "Someone"
        assert metadata.album == "SoundCloud"
        assert metadata.play == "soundcloud://42"
        assert metadata.bitrate == "128kbps"
        assert metadata.bpm == 124
        assert metadata.type == "audio"
        assert metadata.icon == "https://i1.sndcdn.com/artworks-42-t500x500.jpg"
        assert metadata.image == metadata.icon
        assert metadata.cover == metadata.icon
        assert metadata.year == "2014"
        assert metadata.on_select == "play"

    def test_absent_fields_are_empty_strings(self) -> None:
        """Test year, bpm and artwork are "" rather than None."""
        metadata = make_metadata(TrackRecord(id="1"))

        assert metadata.year == ""
        assert metadata.bpm == ""
        assert metadata.icon == ""
        assert metadata.duration == 0

    def test_to_dict_round_trip(self) -> None:
        metadata = make_metadata(TrackRecord(id="1", title="T", bpm=90))
        data = metadata.to_dict()

        assert data["play"] == "soundcloud://1"
        assert data["bpm"] == 90
        assert TrackMetadata.from_dict({**data, "extra": "ignored"}) == metadata

    def test_track_uri(self) -> None:
        assert track_uri("99") == "soundcloud://99"
