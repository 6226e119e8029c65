"""Tests for module timestamp normalization."""

from datetime import UTC, datetime

import pytest

from zerotrace.core.errors import ParseError
from zerotrace.models.error import ErrorCode
from zerotrace.normalizer import normalize_timestamp


class TestFileTimes:
    def test_go_time_string(self):
        assert normalize_timestamp("file", "2016-08-01 10:00:00 +0000 UTC") == datetime(2016, 8, 1, 10, tzinfo=UTC)

    def test_fraction_truncated_to_microseconds(self):
        parsed = normalize_timestamp("file", "2016-08-01 10:00:00.123456789 +0000 UTC")
        assert parsed.microsecond == 123456

    def test_offset_converted_to_utc(self):
        parsed = normalize_timestamp("file", "2016-08-01 10:00:00 +0200 CEST")
        assert parsed == datetime(2016, 8, 1, 8, tzinfo=UTC)

    def test_numeric_zone_repeats_offset(self):
        parsed = normalize_timestamp("file", "2016-08-01 10:00:00 +0530 +0530")
        assert parsed == datetime(2016, 8, 1, 4, 30, tzinfo=UTC)

    def test_fallback_without_zone(self):
        assert normalize_timestamp("file", "2016-08-01 10:00:00") == datetime(2016, 8, 1, 10, tzinfo=UTC)


class TestRegistryTimes:
    def test_zulu(self):
        assert normalize_timestamp("registry", "2016-08-01 10:00:00Z") == datetime(2016, 8, 1, 10, tzinfo=UTC)

    def test_zulu_with_fraction(self):
        assert normalize_timestamp("registry", "2016-08-01 10:00:00.25Z").microsecond == 250000

    def test_missing_zulu_rejected(self):
        with pytest.raises(ParseError):
            normalize_timestamp("registry", "2016-08-01 10:00:00")


class TestPrefetchTimes:
    @pytest.mark.parametrize(
        "value",
        ["2023-01-01 10:00:00", "2023-01-01T10:00:00", "2023-01-01 10:00:00.000000"],
    )
    def test_accepted(self, value):
        assert normalize_timestamp("prefetch", value) == datetime(2023, 1, 1, 10, tzinfo=UTC)

    def test_result_is_aware(self):
        assert normalize_timestamp("prefetch", "2023-01-01 10:00:00").tzinfo is not None


class TestRejected:
    @pytest.mark.parametrize(
        "module,value",
        [
            ("prefetch", "yesterday"),
            ("prefetch", ""),
            ("prefetch", "2023-13-01 10:00:00"),
            ("file", "2023-01-01"),
            ("registry", "2023-02-30 10:00:00Z"),
        ],
    )
    def test_parse_error(self, module, value):
        with pytest.raises(ParseError) as exc:
            normalize_timestamp(module, value)
        error = exc.value.to_structured()
        assert error.code == ErrorCode.TIMESTAMP_PARSE_ERROR
        assert error.context["module"] == module
        assert error.context["value"] == value
        assert error.context["layouts"]

    def test_non_string(self):
        with pytest.raises(ParseError):
            normalize_timestamp("prefetch", None)
