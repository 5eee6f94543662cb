from __future__ import annotations

from datetime import date, datetime, timezone

import pytest
from zoneinfo import ZoneInfo

from partslist_merge.models.revision_key import Category
from partslist_merge.services.normalizer import EmptySheetError, format_date_cell, normalize_rows
from conftest import RAW_HEADER, raw_row, raw_sheet

DOC = "20240105_J0123456789_Fabricated_01unit.xlsx"


def test_column_pruning_twelve_to_nine(merge_config):
    sheet = normalize_rows(DOC, raw_sheet(raw_row(1, "A1")), Category.FABRICATED, merge_config)
    # 9 pruned fields + category column
    assert len(sheet.header) == 10
    assert sheet.header[1:] == tuple(RAW_HEADER[1:10])
    assert len(sheet.rows[0].values) == 10
    assert sheet.rows[0].values[1:3] == (1, "A1")


def test_short_rows_are_padded(merge_config):
    raw = [list(RAW_HEADER), [0, 1, "A1"]]
    sheet = normalize_rows(DOC, raw, Category.FABRICATED, merge_config)
    assert sheet.rows[0].values == ("Fabricated", 1, "A1", "", "", "", "", "", "", "")


def test_stock_filter_drops_marked_rows(merge_config):
    raw = raw_sheet(
        raw_row(1, "A1"),
        raw_row(1, "A2", stock="no in-house stock"),
        raw_row(1, "A3", stock="in stock"),
    )
    sheet = normalize_rows(DOC, raw, Category.FABRICATED, merge_config)
    assert [r.values[2] for r in sheet.rows] == ["A1", "A3"]


def test_stock_filter_keeps_header(merge_config):
    header = list(RAW_HEADER)
    header[3] = "no in-house stock"
    raw = [header, raw_row(1, "A1", stock="no in-house stock")]
    sheet = normalize_rows(DOC, raw, Category.FABRICATED, merge_config)
    assert sheet.header[3] == "no in-house stock"
    assert sheet.rows == []


@pytest.mark.parametrize("category", [Category.PURCHASED, Category.ELECTRICAL])
def test_fabrication_field_blanked(merge_config, category: Category):
    raw = raw_sheet(raw_row(1, "A1", due_fab="2024/02/01", due="2024/03/01"))
    sheet = normalize_rows(DOC, raw, category, merge_config)
    values = sheet.rows[0].values
    assert values[8] == ""
    assert values[9] == "2024/03/01"
    # header untouched
    assert sheet.header[8] == "Due (fab)"


def test_fabrication_field_kept_for_fabricated(merge_config):
    raw = raw_sheet(raw_row(1, "A1", due_fab="2024/02/01"))
    sheet = normalize_rows(DOC, raw, Category.FABRICATED, merge_config)
    assert sheet.rows[0].values[8] == "2024/02/01"


def test_category_column_prepended(merge_config):
    sheet = normalize_rows(DOC, raw_sheet(raw_row(1, "A1")), Category.FABRICATED, merge_config)
    assert sheet.header[0] == "Category"
    assert sheet.rows[0].values[0] == "Fabricated"
    assert sheet.rows[0].source == DOC


def test_unknown_category_label_is_empty(merge_config):
    sheet = normalize_rows(DOC, raw_sheet(raw_row(1, "A1")), Category.UNKNOWN, merge_config)
    assert sheet.rows[0].values[0] == ""


def test_dates_reformatted(merge_config):
    raw = raw_sheet(raw_row(1, "A1", due_fab=datetime(2024, 2, 1, 9, 30), due=date(2024, 3, 5)))
    sheet = normalize_rows(DOC, raw, Category.FABRICATED, merge_config)
    assert sheet.rows[0].values[8] == "2024/02/01"
    assert sheet.rows[0].values[9] == "2024/03/05"


def test_non_date_values_pass_through(merge_config):
    raw = raw_sheet(raw_row(1, "A1", due_fab="TBD", due=42))
    sheet = normalize_rows(DOC, raw, Category.FABRICATED, merge_config)
    assert sheet.rows[0].values[8:] == ("TBD", 42)


def test_aware_datetime_converted_to_configured_zone():
    tokyo = ZoneInfo("Asia/Tokyo")
    # 2024-01-31 20:00 UTC == 2024-02-01 05:00 JST
    value = datetime(2024, 1, 31, 20, 0, tzinfo=timezone.utc)
    assert format_date_cell(value, tokyo) == "2024/02/01"


def test_empty_sheet_raises(merge_config):
    with pytest.raises(EmptySheetError):
        normalize_rows(DOC, [], Category.FABRICATED, merge_config)


def test_header_only_sheet_has_no_rows(merge_config):
    sheet = normalize_rows(DOC, raw_sheet(), Category.FABRICATED, merge_config)
    assert len(sheet) == 0
    assert sheet.header[0] == "Category"


def test_source_identity_stamped_on_rows(merge_config):
    raw = raw_sheet(raw_row(1, "A1"), raw_row(1, "A2"))
    sheet = normalize_rows(DOC, raw, Category.FABRICATED, merge_config, source=f"parts list 2/{DOC}")
    assert sheet.document_name == DOC
    assert sheet.owner == f"parts list 2/{DOC}"
    assert {r.source for r in sheet.rows} == {f"parts list 2/{DOC}"}
