"""
Unit tests for key casing, id parsing, list parameters and configuration parsing.
"""

import pytest

from callcoach_backend.app_config import DEFAULT_MAX_FILE_SIZE, parse_file_size
from callcoach_backend.exceptions import InvalidRequestError
from callcoach_backend.models.coaching_plan import CoachingPlan
from callcoach_backend.models.transcript import Transcript
from callcoach_backend.utils.casing import camel_case_keys, snake_case_keys, to_snake_path
from callcoach_backend.utils.object_ids import parse_object_id
from callcoach_backend.utils.pagination import ListParams, build_sort, pagination_block


class TestCasing:
    def test_nested_keys_round_trip(self):
        stored = {
            "_id": "abc",
            "overall_performance": {"score": 80},
            "action_items": [{"success_metrics": ["x"]}],
        }

        api = camel_case_keys(stored)

        assert api == {
            "_id": "abc",
            "overallPerformance": {"score": 80},
            "actionItems": [{"successMetrics": ["x"]}],
        }
        assert snake_case_keys(api) == stored

    def test_values_are_not_renamed(self):
        assert camel_case_keys({"level": "needs_improvement"}) == {"level": "needs_improvement"}

    def test_dotted_path(self):
        assert to_snake_path("issueResolution.wasResolved") == "issue_resolution.was_resolved"


class TestObjectIds:
    def test_valid(self):
        assert str(parse_object_id("0123456789abcdef01234567", "file")) == "0123456789abcdef01234567"

    @pytest.mark.parametrize("value", ["", "abc", "0123456789abcdef0123456z", "0123456789abcdef012345678"])
    def test_invalid(self, value):
        with pytest.raises(InvalidRequestError, match="Invalid file ID format"):
            parse_object_id(value, "file")


class TestListParams:
    def test_skip(self):
        assert ListParams(page=3, limit=20).skip == 40

    def test_default_sort_is_descending(self):
        assert build_sort(Transcript, ListParams(), "created_at") == "-created_at"

    def test_nested_sort_field(self):
        params = ListParams(sort_by="overallPerformance.score", sort_order="asc")

        assert build_sort(CoachingPlan, params, "generated_at") == "overall_performance.score"

    def test_nested_field_inside_list(self):
        params = ListParams(sort_by="actionItems.priority")

        assert build_sort(CoachingPlan, params, "generated_at") == "-action_items.priority"

    def test_unknown_sort_field(self):
        with pytest.raises(InvalidRequestError):
            build_sort(Transcript, ListParams(sort_by="overallPerformance"), "created_at")

    def test_empty_collection_pagination(self):
        assert pagination_block(ListParams(), 0) == {
            "current": 1,
            "total": 0,
            "limit": 10,
            "totalItems": 0,
            "hasNext": False,
            "hasPrev": False,
        }


class TestFileSizeParsing:
    @pytest.mark.parametrize(
        "value, expected",
        [
            ("50MB", 50 * 1024 * 1024),
            ("512kb", 512 * 1024),
            ("1GB", 1024 ** 3),
            ("2048", 2048),
            (None, DEFAULT_MAX_FILE_SIZE),
            ("lots", DEFAULT_MAX_FILE_SIZE),
            ("50XB", DEFAULT_MAX_FILE_SIZE),
        ],
    )
    def test_parse(self, value, expected):
        assert parse_file_size(value) == expected
