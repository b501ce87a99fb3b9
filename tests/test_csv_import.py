"""
Tests for the delimited text importer (Layer 1: raw text -> RowStore).

We need to:
1. Decode records against a given schema (fast path)
2. Infer kinds and widths from untyped text (slow path)
3. Restart inference when a numeric column turns out to hold text
4. Reject malformed records without returning a partial store
"""

import logging

import pytest

from tabstore.csv_import import (
    ColumnGuess,
    GuessState,
    infer_schema_file,
    infer_schema_string,
    read_csv_file,
    read_csv_string,
    split_record,
)
from tabstore.errors import (
    FieldTooLongError,
    InvalidSchemaError,
    MalformedRecordError,
    SizeMismatchError,
    StoreIOError,
    UndeterminedSchemaError,
)
from tabstore.model import Schema, VarKind, Variable
from tabstore.settings import StoreSettings


def make_schema() -> Schema:
    return Schema([
        Variable("a", VarKind.QUANTITATIVE, 8),
        Variable("b", VarKind.CATEGORICAL, 3),
    ])


class TestSchemaGivenImport:
    """Fast path: decode against a caller-supplied schema."""

    def test_basic_import(self):
        store = read_csv_string("a,b\n1,x\n2,yy\n", make_schema())
        assert store.row_count() == 2
        assert store.values(0) == (1.0, "x")
        assert store.values(1) == (2.0, "yy")

    def test_categorical_zero_padded(self):
        store = read_csv_string("a,b\n1,x\n", make_schema())
        assert store.field(0, "b") == b"x\0\0"

    def test_no_header(self):
        store = read_csv_string("1,x\n2,y\n", make_schema(), skip_header=False)
        assert store.row_count() == 2

    def test_blank_lines_skipped(self):
        store = read_csv_string("a,b\n1,x\n\n2,y\n\n", make_schema())
        assert store.row_count() == 2

    def test_last_line_without_newline(self):
        store = read_csv_string("a,b\n1,x\n2,y", make_schema())
        assert store.row_count() == 2
        assert store.value(1, "b") == "y"

    def test_crlf_line_endings(self):
        store = read_csv_string("a,b\r\n1,x\r\n2,y\r\n", make_schema())
        assert store.column_values("b") == ["x", "y"]

    def test_very_long_token(self):
        token = "x" * 200_000
        schema = Schema([
            Variable("a", VarKind.QUANTITATIVE, 8),
            Variable("b", VarKind.CATEGORICAL, 200_001),
        ])
        store = read_csv_string("a,b\n1," + token + "\n", schema)
        assert store.value(0, "b") == token

    def test_lone_carriage_return_stays_in_token(self):
        store = read_csv_string("a,b\n1,x\ry\n", make_schema())
        assert store.row_count() == 1
        assert store.value(0, "b") == "x\ry"

    def test_too_few_fields(self):
        with pytest.raises(MalformedRecordError, match="too few"):
            read_csv_string("a,b\n1\n", make_schema())

    def test_too_many_fields(self):
        with pytest.raises(MalformedRecordError, match="too many"):
            read_csv_string("a,b\n1,x\n2,y,z\n", make_schema())

    def test_unparsable_number(self):
        with pytest.raises(MalformedRecordError, match="line 2"):
            read_csv_string("a,b\nabc,x\n", make_schema())

    def test_token_too_long(self):
        with pytest.raises(FieldTooLongError):
            read_csv_string("a,b\n1,wxyz\n", make_schema())

    def test_field_too_long_is_malformed_record(self):
        with pytest.raises(MalformedRecordError):
            read_csv_string("a,b\n1,wxyz\n", make_schema())

    def test_quantitative_width_mismatch(self):
        schema = Schema([Variable("a", VarKind.QUANTITATIVE, 4)])
        with pytest.raises(SizeMismatchError):
            read_csv_string("a\n1\n", schema)

    def test_custom_delimiter(self):
        settings = StoreSettings(delimiter=";")
        store = read_csv_string("a;b\n1;x\n", make_schema(), settings=settings)
        assert store.values(0) == (1.0, "x")

    def test_integer_format(self):
        settings = StoreSettings(quant_format="q")
        store = read_csv_string("a,b\n-12,x\n", make_schema(), settings=settings)
        assert store.value(0, "a") == -12

    def test_file_import(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("a,b\n1,x\n2,yy\n")
        store = read_csv_file(str(path), make_schema())
        assert store.row_count() == 2

    def test_missing_file(self, tmp_path):
        with pytest.raises(StoreIOError):
            read_csv_file(str(tmp_path / "missing.csv"), make_schema())

    def test_missing_file_is_os_error(self, tmp_path):
        with pytest.raises(OSError):
            read_csv_file(str(tmp_path / "missing.csv"))


class TestInference:
    """Slow path: discover kinds and widths from text."""

    def test_end_to_end(self):
        store = read_csv_string("a,b\n1,x\n2,yy\n3,z\n")
        a = store.schema.lookup("a")
        b = store.schema.lookup("b")
        assert a.kind is VarKind.QUANTITATIVE
        assert a.width == 8
        assert b.kind is VarKind.CATEGORICAL
        assert b.width == 3
        assert b.offset == 8
        assert store.row_count() == 3
        assert store.column_values("a") == [1.0, 2.0, 3.0]
        assert store.column_values("b") == ["x", "yy", "z"]

    def test_demotion_restarts_scan(self):
        schema = infer_schema_string("c\n1\n2\nabc\n")
        c = schema.lookup("c")
        assert c.kind is VarKind.CATEGORICAL
        assert c.width >= 4

    def test_demotion_width_covers_earlier_rows(self):
        schema = infer_schema_string("c\n123456\nab\n")
        assert schema.lookup("c").kind is VarKind.CATEGORICAL
        assert schema.lookup("c").width == 7

    def test_demoted_column_imports_numbers_as_text(self):
        store = read_csv_string("c,d\n1,5\n2,6\nabc,7\n")
        assert store.column_values("c") == ["1", "2", "abc"]
        assert store.schema.lookup("d").kind is VarKind.QUANTITATIVE

    def test_demotion_is_logged(self, caplog):
        with caplog.at_level(logging.INFO, logger="tabstore.csv_import"):
            infer_schema_string("c\n1\nabc\n")
        assert any("demoting" in r.getMessage() for r in caplog.records)

    def test_text_first_stays_categorical(self):
        schema = infer_schema_string("c\nabc\n12345\n")
        c = schema.lookup("c")
        assert c.kind is VarKind.CATEGORICAL
        assert c.width == 6

    def test_several_demotions(self):
        schema = infer_schema_string("p,q,r\n1,2,3\n4,x,6\ny,7,zz\n")
        assert [v.kind for v in schema] == [VarKind.CATEGORICAL, VarKind.CATEGORICAL, VarKind.CATEGORICAL]
        assert [v.width for v in schema] == [2, 2, 3]
        assert [v.offset for v in schema] == [0, 2, 4]

    def test_width_counts_encoded_bytes(self):
        schema = infer_schema_string("w\nné\n")
        assert schema.lookup("w").width == 4

    def test_integer_format_treats_decimals_as_text(self):
        schema = infer_schema_string("n\n1\n2.5\n", StoreSettings(quant_format="i"))
        assert schema.lookup("n").kind is VarKind.CATEGORICAL

    def test_idempotent(self):
        content = "a,b,c\n1,foo,2.5\n2,barbaz,x\n"
        assert infer_schema_string(content) == infer_schema_string(content)

    def test_very_long_token(self):
        token = "y" * 200_000
        store = read_csv_string("a,b\n1," + token + "\n")
        assert store.schema.lookup("b").width == 200_001
        assert store.value(0, "b") == token

    def test_lone_carriage_return_in_file(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_bytes(b"a,b\r\n1,x\ry\r\n2,z\r\n")
        store = read_csv_file(str(path))
        assert store.row_count() == 2
        assert store.column_values("b") == ["x\ry", "z"]

    def test_no_data_rows(self):
        with pytest.raises(UndeterminedSchemaError):
            read_csv_string("a,b\n")

    def test_empty_input(self):
        with pytest.raises(UndeterminedSchemaError):
            infer_schema_string("")

    def test_ragged_rows(self):
        with pytest.raises(MalformedRecordError):
            infer_schema_string("a,b\n1,2\n3\n")
        with pytest.raises(MalformedRecordError):
            infer_schema_string("a,b\n1,2\n3,4,5\n")

    def test_duplicate_header(self):
        with pytest.raises(InvalidSchemaError):
            infer_schema_string("a,a\n1,2\n")

    def test_infer_from_file(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("a,b\n1,x\n2,yy\n")
        schema = infer_schema_file(str(path))
        assert schema.names() == ["a", "b"]
        assert read_csv_file(str(path)).row_count() == 2


class TestColumnGuess:
    """Tri-state working state of one column."""

    def test_states(self):
        guess = ColumnGuess("a")
        assert guess.state is GuessState.UNDETERMINED
        guess.width = 8
        assert guess.state is GuessState.QUANTITATIVE
        guess.kind = VarKind.CATEGORICAL
        assert guess.state is GuessState.CATEGORICAL


class TestSplitRecord:
    """Physical line -> tokens."""

    def test_line_endings(self):
        assert split_record("1,x\n", ",") == ["1", "x"]
        assert split_record("1,x\r\n", ",") == ["1", "x"]
        assert split_record("1,x", ",") == ["1", "x"]

    def test_inner_carriage_return_kept(self):
        assert split_record("1,x\ry\n", ",") == ["1", "x\ry"]

    def test_blank(self):
        assert split_record("\n", ",") == []
        assert split_record("\r\n", ",") == []
