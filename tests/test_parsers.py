"""Unit tests for parsers module."""

import pytest

from companion.errors import FormatError, SchemaError, NoDataError
from companion.parsers import extract_average, find_value_column, decode_upload


def test_extract_average():
    """Test averaging of the percentage column."""
    assert extract_average("percentage\n10\n20\n30") == 20.0


def test_extract_average_header_aliases():
    assert extract_average("Percent\n50\n100") == 75.0
    assert extract_average("student,VALUE\nA,40\nB,60") == 50.0
    assert extract_average("name, percentage ,notes\nx, 88 ,late\n") == 88.0


def test_extract_average_first_matching_column():
    assert extract_average("value,percentage\n10,90\n20,80") == 15.0


def test_extract_average_skips_bad_rows():
    """Non-numeric and short rows are skipped, not counted."""
    text = "name,percentage\nA,80\nB,abc\nC\nD,\nE,60"
    assert extract_average(text) == 70.0


def test_extract_average_percent_sign_and_crlf():
    assert extract_average("percentage\r\n85%\r\n95%\r\n") == 90.0


def test_extract_average_ignores_non_finite():
    assert extract_average("percentage\ninf\nnan\n40") == 40.0


def test_extract_average_header_only():
    with pytest.raises(FormatError):
        extract_average("percentage")
    with pytest.raises(FormatError):
        extract_average("percentage\n\n")
    with pytest.raises(FormatError):
        extract_average("")


def test_extract_average_missing_column():
    with pytest.raises(SchemaError):
        extract_average("foo\n1\n2")


def test_extract_average_no_data():
    with pytest.raises(NoDataError):
        extract_average("percentage\nabc")
    with pytest.raises(NoDataError):
        extract_average("name,percentage\nA\nB")


def test_find_value_column():
    assert find_value_column("Name,Percentage") == 1
    assert find_value_column("name,score") is None


def test_decode_upload():
    assert decode_upload("\ufeffpercentage\n10".encode("utf-8")) == "percentage\n10"
    with pytest.raises(FormatError):
        decode_upload(b"\xff\xfe\x00bad")


def test_extract_average_skips_values_with_trailing_text():
    """The whole cell must be numeric; '85 students' is not read as 85."""
    assert extract_average("percentage\n85 students\n95") == 95.0
