from __future__ import annotations

import pytest

from partslist_merge.models.revision_key import Category, RevisionKey
from partslist_merge.models.row_data import NormalizedRow, NormalizedSheet
from partslist_merge.services.key_extractor import (
    build_filename_token,
    build_revision_key,
    classify_category,
    extract_project_id,
    extract_revision_date,
    extract_unit_digits,
    token_sort_value,
)


def test_extract_project_id_first_match():
    assert extract_project_id("20240105_J0123456789_Purchased_J9999999999.xlsx") == "J0123456789"


def test_extract_project_id_absent():
    assert extract_project_id("20240105_J12345_Purchased.xlsx") == ""


def test_extract_revision_date_prefix():
    assert extract_revision_date("20240105_J0123456789_Purchased.xlsx") == 20240105


@pytest.mark.parametrize("name", ["2024010_x.xlsx", "draft_J0123456789.xlsx", "2024-01-05.xlsx", "short"])
def test_extract_revision_date_non_numeric_is_none(name: str):
    assert extract_revision_date(name) is None


@pytest.mark.parametrize(
    "name, expected",
    [
        ("20240105_J0123456789_Purchased_01unit.xlsx", Category.PURCHASED),
        ("20240105_J0123456789_Fabricated_.xlsx", Category.FABRICATED),
        ("20240105_J0123456789_Electrical_panel.xlsx", Category.ELECTRICAL),
        ("20240105_J0123456789_購入_01unit.xlsx", Category.PURCHASED),
        ("20240105_J0123456789_製作_02unit.xlsx", Category.FABRICATED),
        ("20240105_J0123456789_電気_.xlsx", Category.ELECTRICAL),
        ("20240105_J0123456789_Purchased.xlsx", Category.UNKNOWN),
        ("20240105_J0123456789_Other_.xlsx", Category.UNKNOWN),
    ],
)
def test_classify_category(name: str, expected: Category):
    assert classify_category(name) is expected


def test_filename_token_with_unit_is_zero_padded():
    assert build_filename_token("20240105_J0123456789_Purchased_2unit.xlsx", Category.PURCHASED) == "P02"
    assert build_filename_token("20240105_J0123456789_Fabricated_12UNIT.xlsx", Category.FABRICATED) == "F12"


def test_filename_token_without_unit_is_prefix_only():
    assert build_filename_token("20240105_J0123456789_Purchased_.xlsx", Category.PURCHASED) == "P"


def test_filename_token_electrical_never_has_unit():
    assert build_filename_token("20240105_J0123456789_Electrical_3unit.xlsx", Category.ELECTRICAL) == "E"


def test_filename_token_unknown_is_empty():
    assert build_filename_token("20240105_J0123456789_3unit.xlsx", Category.UNKNOWN) == ""


def test_token_sort_value():
    assert token_sort_value("P03") == 3
    assert token_sort_value("F") == 0
    assert sorted(["P03", "P01", "P10"], key=token_sort_value) == ["P01", "P03", "P10"]


def test_extract_unit_digits_first_non_empty():
    rows = [
        ("Purchased", "", "A1"),
        ("Purchased", " 02unit ", "A2"),
        ("Purchased", "5", "A3"),
    ]
    assert extract_unit_digits(rows) == "02"


def test_extract_unit_digits_integral_float():
    assert extract_unit_digits([("Purchased", 3.0, "A1")]) == "3"


def test_extract_unit_digits_no_rows():
    assert extract_unit_digits([]) == ""


def test_build_revision_key_dedup_key():
    sheet = NormalizedSheet(
        document_name="20240105_J0123456789_Purchased_01unit.xlsx",
        category=Category.PURCHASED,
        header=("Category",),
        rows=[NormalizedRow(values=("Purchased", 1, "A1"), source="x")],
    )
    key = build_revision_key(sheet.document_name, sheet)
    assert key == RevisionKey("J0123456789", 20240105, Category.PURCHASED, "1")
    assert key.dedup_key == "J0123456789_Purchased_1"
