"""
Tests for Risk Index Column Resolution.
"""

from risk_index.columns import build_column_index_map, find_column_index


HEADERS = ["Student Name", "Course Grade", "Days Out", "Re-entry", "Missing Assignments"]


class TestFindColumnIndex:

    def test_case_insensitive(self):
        assert find_column_index(HEADERS, ["days out"]) == 2

    def test_first_alias_wins(self):
        assert find_column_index(HEADERS, ["nope", "course grade", "days out"]) == 1

    def test_not_found(self):
        assert find_column_index(HEADERS, ["lda"]) == -1

    def test_blank_headers_tolerated(self):
        assert find_column_index([None, "", "Grade"], ["grade"]) == 2


class TestBuildColumnIndexMap:

    def test_alias_resolution(self):
        """Formula asks for "Grade"; the sheet says "Course Grade"."""
        mapping = build_column_index_map(HEADERS, ["Grade", "Days Out", "Re-entry"])
        assert mapping == {"Grade": 1, "Days Out": 2, "Re-entry": 3}

    def test_unresolved_columns_omitted(self):
        mapping = build_column_index_map(HEADERS, ["GPA", "Days Out"])
        assert mapping == {"Days Out": 2}

    def test_custom_alias_table(self):
        mapping = build_column_index_map(HEADERS, ["Absence"], aliases={"Absence": ["days out"]})
        assert mapping == {"Absence": 2}

    def test_name_itself_tried_before_aliases(self):
        headers = ["grade", "Current Score"]
        assert build_column_index_map(headers, ["Current Score"]) == {"Current Score": 1}
