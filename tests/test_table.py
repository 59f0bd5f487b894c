from hand_ocr.core.table import chartability, parse_csv


def test_labelled_numeric_grid_is_chartable() -> None:
    grid = [["Month", "Sales", "Costs"], ["Jan", "10", "4"], ["Feb", "12", "5"]]

    charts = chartability(grid)

    assert charts.is_chartable is True
    assert charts.suitable_charts == ["ColumnChart", "BarChart"]


def test_two_column_grid_also_suggests_pie() -> None:
    charts = chartability([["Fruit", "Count"], ["Apples", "3.5"]])

    assert "PieChart" in charts.suitable_charts


def test_text_only_or_tiny_grids_are_not_chartable() -> None:
    assert chartability(None).is_chartable is False
    assert chartability([["Only header", "x"]]).is_chartable is False
    assert chartability([["a"], ["1"]]).is_chartable is False
    assert chartability([["Name", "Town"], ["Ann", "Oslo"]]).is_chartable is False
    assert chartability([["Name", "Value"], ["Ann", "nan"]]).is_chartable is False


def test_parse_csv_drops_trailing_blank_lines() -> None:
    assert parse_csv('a,b\n"c,d",e\n\n') == [["a", "b"], ["c,d", "e"]]


def test_numbers_are_read_from_the_start_of_a_cell() -> None:
    assert chartability([["Item", "Weight"], ["Flour", "12kg"]]).is_chartable is True
    assert chartability([["Item", "Qty"], ["Eggs", " 1e3"]]).is_chartable is True
    assert chartability([["Item", "Price"], ["Milk", "$5"]]).is_chartable is False
    assert chartability([["Item", "Qty"], ["Salt", "Infinity"]]).is_chartable is False
    assert chartability([["Item", "Qty"], ["Salt", "1e999"]]).is_chartable is False
