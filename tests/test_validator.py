"""Tests for JSON import payload validation."""

import json

import pytest

from kgb_assistant.models.employee import ReviewStatus
from kgb_assistant.validation import InvalidPayloadError, PayloadValidator


def _item(**overrides):
    item = {
        "id": "emp-1",
        "name": "Budi",
        "position": "Staf",
        "nip": "198701012010011001",
        "lastKGBDate": "2023-03-01T00:00:00.000Z",
        "kgbStatus": "Sudah Diajukan",
    }
    item.update(overrides)
    return item


class TestPayloadValidator:
    """Tests for PayloadValidator."""

    def test_valid_payload(self):
        result = PayloadValidator().validate([_item(), _item(id="emp-2")])

        assert result.is_valid
        assert result.error_count == 0
        assert [r.id for r in result.records] == ["emp-1", "emp-2"]
        assert result.records[0].review_status == ReviewStatus.SUBMITTED

    def test_status_is_optional(self):
        item = _item()
        del item["kgbStatus"]
        result = PayloadValidator().validate([item])

        assert result.records[0].review_status == ReviewStatus.NOT_SUBMITTED

    def test_empty_array_is_valid(self):
        result = PayloadValidator().validate([])
        assert result.is_valid
        assert result.records == []

    def test_not_an_array(self):
        result = PayloadValidator().validate({"employees": []})

        assert not result.is_valid
        assert result.issues[0].issue_type == "invalid_format"

    def test_item_not_an_object(self):
        result = PayloadValidator().validate([_item(), "Budi"])

        assert not result.is_valid
        assert result.issues[0].index == 1
        assert result.records == []

    @pytest.mark.parametrize("field", ["id", "name", "position", "nip", "lastKGBDate"])
    def test_missing_required_field(self, field):
        item = _item()
        del item[field]
        result = PayloadValidator().validate([item])

        assert not result.is_valid
        assert result.issues[0].field == field
        assert result.issues[0].issue_type == "missing"

    def test_blank_required_field(self):
        result = PayloadValidator().validate([_item(name="  ")])
        assert result.issues[0].field == "name"

    def test_invalid_status(self):
        result = PayloadValidator().validate([_item(kgbStatus="Ditolak")])

        assert not result.is_valid
        assert result.issues[0].issue_type == "invalid_value"

    def test_invalid_date(self):
        result = PayloadValidator().validate([_item(lastKGBDate="kemarin")])
        assert result.issues[0].issue_type == "invalid_value"

    def test_duplicate_ids(self):
        result = PayloadValidator().validate([_item(), _item()])

        assert not result.is_valid
        assert result.issues[0].issue_type == "duplicate"

    def test_every_problem_is_reported(self):
        result = PayloadValidator().validate([_item(name=""), _item(id="emp-2", nip="")])
        assert result.error_count == 2

    def test_numeric_nip_is_accepted(self):
        result = PayloadValidator().validate([_item(nip=12345)])
        assert result.records[0].national_id == "12345"


class TestParse:
    """Tests for decoding and validating in one step."""

    def test_parse_valid(self):
        records = PayloadValidator().parse(json.dumps([_item()]))
        assert records[0].name == "Budi"

    def test_parse_not_json(self):
        with pytest.raises(InvalidPayloadError, match="not valid JSON"):
            PayloadValidator().parse("{oops")

    def test_parse_invalid_carries_issues(self):
        with pytest.raises(InvalidPayloadError) as exc_info:
            PayloadValidator().parse(json.dumps([{"id": "1"}]))

        assert len(exc_info.value.issues) == 4

    def test_summary_is_truncated(self):
        validator = PayloadValidator()
        result = validator.validate([{"id": str(i)} for i in range(3)])
        summary = validator.get_user_friendly_summary(result, max_items=2)

        assert "12 problems" in summary
        assert "... and 10 more" in summary
