from __future__ import annotations

from sheet_export.export.detector import (
    ContentDetection,
    NameDetection,
    detect_by_content,
    detect_by_name,
    detect_shape,
    resolve_shape,
    should_transform,
)
from sheet_export.models.export_models import AttendanceShape, ColumnRole
from sheet_export.models.table import Table


def _table(columns: list[str], rows: list[list[object]], name: str = "Sheet1") -> Table:
    return Table(name=name, columns=columns, rows=[dict(zip(columns, r)) for r in rows])


def test_content_roles_for_attendance_layout(content_table: Table):
    content = detect_by_content(content_table.columns, content_table.rows)
    assert content.roles == {
        "ID": ColumnRole.IDENTIFIER,
        "Дата": ColumnRole.DATE,
        "Вход": ColumnRole.TIME,
        "Изход": ColumnRole.TIME,
    }
    assert content.time_columns == ["Вход", "Изход"]
    assert content.matches_shape is True


def test_content_detection_without_rows_has_no_roles():
    content = detect_by_content(["A", "B"], [])
    assert content.roles == {}
    assert content.matches_shape is False


def test_content_detection_samples_only_first_five_rows():
    # rows 6+ are not times; the first five are
    rows = [["8:00"]] * 5 + [["x"]] * 20
    content = detect_by_content(["In"], [dict(In=r[0]) for r in rows])
    assert content.roles["In"] is ColumnRole.TIME


def test_sixty_percent_threshold():
    # 3 of 5 time values -> TIME, 2 of 5 -> not TIME
    three = _table(["T"], [["8:00"], ["8:01"], ["8:02"], ["x"], ["y"]])
    two = _table(["T"], [["8:00"], ["8:01"], ["x"], ["y"], ["z"]])
    assert detect_by_content(three.columns, three.rows).roles["T"] is ColumnRole.TIME
    assert detect_by_content(two.columns, two.rows).roles["T"] is ColumnRole.IDENTIFIER


def test_time_checked_before_date():
    t = _table(["X"], [["8:00"], ["1/1/2025"], ["8:30"]])
    # 2 of 3 times >= 1.8 -> TIME even though a date is present
    assert detect_by_content(t.columns, t.rows).roles["X"] is ColumnRole.TIME


def test_identifier_depends_on_last_sampled_value_only():
    filled_last = _table(["Code"], [[""], [""], ["A7"]])
    empty_last = _table(["Code"], [["A5"], ["A6"], [""]])
    assert detect_by_content(filled_last.columns, filled_last.rows).roles["Code"] is ColumnRole.IDENTIFIER
    assert detect_by_content(empty_last.columns, empty_last.rows).roles["Code"] is ColumnRole.UNCLASSIFIED


def test_missing_key_counts_as_empty():
    t = Table(name="S", columns=["A", "B"], rows=[{"A": "x"}])
    roles = detect_by_content(t.columns, t.rows).roles
    assert roles["A"] is ColumnRole.IDENTIFIER
    assert roles["B"] is ColumnRole.UNCLASSIFIED


def test_name_detection_bulgarian(attendance_table: Table):
    names = detect_by_name(attendance_table.columns)
    assert names == NameDetection(
        first_in="Първи вътре",
        last_out="Последно излизане",
        personnel_code="Код на персонала",
        date="Дата",
    )
    assert names.complete is True


def test_name_detection_english_case_insensitive():
    names = detect_by_name(["PERSONNEL CODE", "date", "First In", "last out", "Dept"])
    assert names.personnel_code == "PERSONNEL CODE"
    assert names.date == "date"
    assert names.first_in == "First In"
    assert names.last_out == "last out"
    assert names.complete


def test_name_detection_alternate_personnel_spelling():
    names = detect_by_name(["Кодекс на персонала"])
    assert names.personnel_code == "Кодекс на персонала"
    assert not names.complete


def test_name_detection_partial():
    names = detect_by_name(["Employee", "Date", "First In"])
    assert names.first_in == "First In"
    assert names.last_out is None
    assert names.complete is False


def test_should_transform_either_detector():
    content_only = ContentDetection(
        roles={"a": ColumnRole.IDENTIFIER, "b": ColumnRole.DATE, "c": ColumnRole.TIME, "d": ColumnRole.TIME}
    )
    names_only = NameDetection(first_in="f", last_out="l", personnel_code="p", date="d")
    assert should_transform(content_only, NameDetection())
    assert should_transform(ContentDetection(), names_only)
    assert not should_transform(ContentDetection(), NameDetection(first_in="f"))


def test_three_time_columns_do_not_match_content_shape():
    content = ContentDetection(
        roles={
            "a": ColumnRole.IDENTIFIER,
            "b": ColumnRole.DATE,
            "c": ColumnRole.TIME,
            "d": ColumnRole.TIME,
            "e": ColumnRole.TIME,
        }
    )
    assert content.matches_shape is False


def test_name_roles_take_precedence_over_content():
    # content sees "Вход"/"Изход" as the time columns, names point elsewhere
    columns = ["Personnel Code", "Date", "First In", "Last Out", "Вход", "Изход"]
    rows = [
        ["7", "1/1/2025", "", "", "8:00", "17:00"],
        ["8", "1/1/2025", "", "", "8:05", "17:10"],
    ]
    table = _table(columns, rows)
    shape = detect_shape(table)
    assert shape == AttendanceShape(
        identifier_column="Personnel Code",
        date_column="Date",
        first_time_column="First In",
        second_time_column="Last Out",
    )


def test_content_roles_used_when_names_partial(content_table: Table):
    shape = detect_shape(content_table)
    assert shape == AttendanceShape(
        identifier_column="ID",
        date_column="Дата",
        first_time_column="Вход",
        second_time_column="Изход",
    )


def test_resolve_shape_content_fallbacks():
    columns = ["Shift date", "T1", "Who"]
    content = ContentDetection(roles={"Shift date": ColumnRole.UNCLASSIFIED, "T1": ColumnRole.TIME, "Who": ColumnRole.UNCLASSIFIED})
    shape = resolve_shape(columns, content, NameDetection())
    assert shape.date_column == "Shift date"
    assert shape.first_time_column == "T1"
    assert shape.second_time_column is None
    # first column neither TIME nor DATE
    assert shape.identifier_column == "Shift date"


def test_resolve_shape_falls_back_to_first_column():
    columns = ["T1", "T2"]
    content = ContentDetection(roles={"T1": ColumnRole.TIME, "T2": ColumnRole.TIME})
    shape = resolve_shape(columns, content, NameDetection())
    assert shape.date_column == "T1"
    assert shape.identifier_column == "T1"


def test_plain_table_has_no_shape(plain_table: Table):
    assert detect_shape(plain_table) is None


def test_empty_table_has_no_shape():
    assert detect_shape(Table(name="S", columns=[], rows=[])) is None
    assert detect_shape(Table(name="S", columns=["ID", "Date"], rows=[])) is None
