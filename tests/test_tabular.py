import pandas as pd

from finboard.tabular import parse_delimited


def test_parse_basic_rows_and_trimming():
    rows = parse_delimited("a, b ,c\n1,2,3\n")
    assert rows == [["a", "b", "c"], ["1", "2", "3"]]


def test_parse_quoted_fields_with_delimiters_and_newlines():
    text = 'Label,Amount\n"Cash, restricted","$1,234"\n"multi\nline",x\n'
    rows = parse_delimited(text)
    assert rows[1] == ["Cash, restricted", "$1,234"]
    assert rows[2] == ["multi\nline", "x"]


def test_parse_escaped_quote():
    rows = parse_delimited('"say ""hi""",b')
    assert rows == [['say "hi"', "b"]]


def test_parse_record_separators():
    assert parse_delimited("a\r\nb\rc\nd") == [["a"], ["b"], ["c"], ["d"]]


def test_parse_drops_blank_rows():
    rows = parse_delimited("a,b\n,\n  ,   \n\n\nc,d")
    assert rows == [["a", "b"], ["c", "d"]]


def test_parse_empty_text():
    assert parse_delimited("") == []


def test_parse_unterminated_quote_is_lenient():
    rows = parse_delimited('a,"unterminated\nstill,quoted')
    assert rows == [["a", "unterminated\nstill,quoted"]]


def test_parse_reads_back_pandas_csv():
    rows = [["Metric", "Value"], ["Total Revenue", "$1,000"], ["Note", 'says "ok"'], ["Multi", "line\nbreak"]]
    text = pd.DataFrame(rows[1:], columns=rows[0]).to_csv(index=False)
    assert parse_delimited(text) == rows


def test_parse_reads_back_crlf_csv():
    text = pd.DataFrame([["a,b", "1"]], columns=["L", "Y"]).to_csv(index=False, lineterminator="\r\n")
    assert parse_delimited(text) == [["L", "Y"], ["a,b", "1"]]
