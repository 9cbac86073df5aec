from __future__ import annotations

from esg_tracker.ingestion import decode_upload, parse
from esg_tracker.ingestion.utils import clean_field, parse_decimal, to_snake_case


def test_parse_returns_one_mapping_per_data_row_with_every_header() -> None:
    text = "name,industry,email\nAcme,Mining,a@x.io\nBeta,Energy,b@x.io\n"
    parsed = parse(text)
    assert parsed.headers == ["name", "industry", "email"]
    assert len(parsed.rows) == 2
    for row in parsed.rows:
        assert set(row) == {"name", "industry", "email"}
    assert parsed.rows[1]["industry"] == "Energy"


def test_parse_pads_short_rows_and_drops_blank_lines() -> None:
    text = "a,b,c\n\n1,2\n   \n4,5,6,7\n"
    parsed = parse(text)
    assert parsed.rows == [
        {"a": "1", "b": "2", "c": ""},
        {"a": "4", "b": "5", "c": "6"},
    ]


def test_parse_trims_whitespace_and_surrounding_quotes() -> None:
    text = ' "Client Name" , "Email"\r\n "Acme Ltd" ,  acme@x.io \r\n'
    parsed = parse(text)
    assert parsed.headers == ["Client Name", "Email"]
    assert parsed.rows == [{"Client Name": "Acme Ltd", "Email": "acme@x.io"}]


def test_parse_splits_quoted_commas() -> None:
    # quoted delimiters are not supported; the comma always splits
    parsed = parse('name,industry\n"Acme, Inc",Mining\n')
    assert parsed.rows == [{"name": "Acme", "industry": "Inc"}]


def test_parse_empty_and_header_only_uploads_have_nothing_to_import() -> None:
    assert parse("").is_empty
    assert parse("\n\n").headers == []
    header_only = parse("name,email\n")
    assert header_only.headers == ["name", "email"]
    assert header_only.is_empty


def test_decode_upload_strips_bom_and_falls_back_to_latin1() -> None:
    assert decode_upload("\ufeffname,email".encode("utf-8")) == "name,email"
    assert decode_upload("Zürich".encode("latin-1")) == "Zürich"
    assert decode_upload("already text") == "already text"


def test_clean_field_removes_one_quote_layer() -> None:
    assert clean_field('  ""x""  ') == '"x"'
    assert clean_field('"') == ""
    assert clean_field("plain") == "plain"


def test_to_snake_case_handles_labels_and_camel_case() -> None:
    assert to_snake_case("Metric Name") == "metric_name"
    assert to_snake_case("ESG Risk Level") == "esg_risk_level"
    assert to_snake_case("ProjectID") == "project_id"
    assert to_snake_case(" client-id ") == "client_id"


def test_parse_decimal_rejects_non_finite_and_text() -> None:
    assert parse_decimal(" 12.5 ") == 12.5
    assert parse_decimal("-3") == -3.0
    assert parse_decimal("1e3") == 1000.0
    assert parse_decimal("abc") is None
    assert parse_decimal("") is None
    assert parse_decimal("nan") is None
    assert parse_decimal("inf") is None
    assert parse_decimal(None) is None
