import pytest

from markitup.common import ConversionError
from markitup.generator import csv2md


def test_table_shape():
    md = csv2md.run(b"name, age\nann , 3\nbob,4\n")
    lines = md.splitlines()
    assert lines[0] == "| name | age |"
    assert lines[1] == "| --- | --- |"
    assert lines[2] == "| ann | 3 |"
    assert len(lines) == 4


def test_blank_lines_skipped():
    md = csv2md.run(b"a\n\n1\n")
    assert md.splitlines()[-1] == "| 1 |"


def test_quoted_field():
    md = csv2md.run(b'a,b\n"x, y",z\n')
    assert "| x, y | z |" in md


def test_uneven_row_raises():
    with pytest.raises(ConversionError):
        csv2md.run(b"a,b\n1,2,3\n")


def test_invalid_utf8_raises():
    with pytest.raises(ConversionError):
        csv2md.run(b"a\n\xff\xfe\n")