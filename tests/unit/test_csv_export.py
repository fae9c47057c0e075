"""Unit tests for CSV export."""

import csv
import io
import uuid
from datetime import datetime, timezone
from decimal import Decimal

import pytest

from earnings_api.utils.csv_export import NoDataError, to_csv


class TestToCsv:

    def test_header_plus_one_line_per_record(self):
        records = [{"id": i, "status": "pending"} for i in range(5)]

        lines = to_csv(records).splitlines()

        assert len(lines) == 6
        assert lines[0] == "id,status"

    def test_empty_input_fails(self):
        with pytest.raises(NoDataError, match="No data to export"):
            to_csv([])

    def test_values_with_separator_are_quoted(self):
        content = to_csv([{"name": "Doe, Jane", "note": 'said "hi"'}])

        assert '"Doe, Jane"' in content
        rows = list(csv.DictReader(io.StringIO(content)))
        assert rows[0]["name"] == "Doe, Jane"
        assert rows[0]["note"] == 'said "hi"'

    def test_fieldnames_control_column_order(self):
        content = to_csv([{"b": 2, "a": 1, "extra": "x"}], fieldnames=["a", "b"])
        assert content.splitlines() == ["a,b", "1,2"]

    def test_cell_formatting(self):
        record_id = uuid.uuid4()
        content = to_csv([{
            "id": record_id,
            "amount": Decimal("300"),
            "requested_at": datetime(2026, 10, 18, 10, 0, tzinfo=timezone.utc),
            "processed_at": None,
        }])

        row = content.splitlines()[1].split(",")
        assert row[0] == str(record_id)
        assert row[1] == "300.00"
        assert row[2] == "2026-10-18T10:00:00+00:00"
        assert row[3] == ""

    def test_custom_delimiter(self):
        content = to_csv([{"a": "x;y", "b": 1}], delimiter=";")
        assert content.splitlines()[1] == '"x;y";1'
