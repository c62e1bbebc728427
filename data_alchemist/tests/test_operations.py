"""Tests for row search and applying modifications."""

from __future__ import annotations

from conftest import make_client
from data_alchemist.backend import operations


def test_search_is_case_insensitive_across_all_fields() -> None:
    rows = [make_client('C1'), dict(make_client('C2'), ClientName='ACME Corp'), make_client('C3')]
    assert operations.search_rows(rows, 'acme') == [rows[1]]
    assert operations.search_rows(rows, 'ny') == rows
    assert operations.search_rows(rows, 'zzz') == []


def test_search_matches_numbers_as_displayed() -> None:
    rows = [{'ID': 1, 'Score': 5.0}, {'ID': 2, 'Score': 2.5}, {'ID': 3, 'Active': True}]
    assert operations.search_rows(rows, '5') == [rows[0], rows[1]]
    assert operations.search_rows(rows, '5.0') == []
    assert operations.search_rows(rows, 'TRUE') == [rows[2]]


def test_stringify() -> None:
    assert operations.stringify(None) == ''
    assert operations.stringify(False) == 'false'
    assert operations.stringify(3.0) == '3'
    assert operations.stringify(3.25) == '3.25'
    assert operations.stringify('x') == 'x'


def test_apply_modifications_returns_edited_copy() -> None:
    rows = [make_client('C1'), make_client('C2')]
    mods = [
        {'rowIndex': 1, 'column': 'PriorityLevel', 'newValue': '5'},
        {'rowIndex': 0, 'column': 'Notes', 'newValue': 'new column'},
    ]
    updated, applied = operations.apply_modifications(rows, mods)
    assert applied == 2
    assert updated[1]['PriorityLevel'] == '5'
    assert updated[0]['Notes'] == 'new column'
    # The input rows are untouched
    assert rows[1]['PriorityLevel'] == '3'
    assert 'Notes' not in rows[0]


def test_apply_modifications_skips_invalid_edits() -> None:
    rows = [make_client('C1')]
    mods = [
        {'rowIndex': 5, 'column': 'ClientName', 'newValue': 'x'},
        {'rowIndex': -1, 'column': 'ClientName', 'newValue': 'x'},
        {'rowIndex': '0', 'column': 'ClientName', 'newValue': 'x'},
        {'rowIndex': 0, 'newValue': 'x'},
        {'rowIndex': 0, 'column': 'ClientName', 'newValue': 'Renamed'},
    ]
    updated, applied = operations.apply_modifications(rows, mods)
    assert applied == 1
    assert updated[0]['ClientName'] == 'Renamed'
