"""
Delimited text importer (raw text -> Schema + RowStore).

Two entry modes:
    - Schema given (fast path): every record is decoded against the
      caller's Schema.
    - Schema inferred (slow path): a header pass names the columns, scan
      passes settle each column's kind and width, then the file is read again
      through the fast path to materialize rows. Inference never stores rows.

Format:
    - One record per line, fields split on the delimiter (default ",")
    - Records end at "\n" or "\r\n"; a lone "\r" is part of its token
    - Tokens may be any length
    - No quoting or escaping: a delimiter inside a categorical value splits
      it into two fields
    - Blank lines are skipped

Inference rules:
    - Every column starts quantitative with an undetermined width
    - A numeric token fixes a quantitative column's width to the numeric
      format size
    - A text token in a column already committed to numeric demotes it to
      categorical and restarts the scan from the first data line
    - Otherwise text (or any token in a categorical column) grows the
      column's width to max(width, encoded_length + 1), keeping one byte for
      a terminator
    - A column can only move numeric -> categorical, so there is at most one
      restart per column
"""

import io
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, IO, Iterator, List, Optional, Tuple

from tabstore.classify import TokenClass, classify
from tabstore.errors import (
    DataStoreError,
    MalformedRecordError,
    StoreIOError,
    UndeterminedSchemaError,
)
from tabstore.model import Schema, VarKind, VarRole, Variable
from tabstore.settings import StoreSettings, resolve_settings
from tabstore.store import RowStore, encode_field


logger = logging.getLogger(__name__)

Source = Callable[[], IO[str]]


class GuessState(Enum):
    """Working state of one column during inference."""
    UNDETERMINED = "undetermined"
    QUANTITATIVE = "quantitative"
    CATEGORICAL = "categorical"


@dataclass
class ColumnGuess:
    """Tentative kind and width for one column while scanning."""
    name: str
    kind: VarKind = VarKind.QUANTITATIVE
    width: Optional[int] = None

    @property
    def state(self) -> GuessState:
        if self.width is None:
            return GuessState.UNDETERMINED
        if self.kind is VarKind.QUANTITATIVE:
            return GuessState.QUANTITATIVE
        return GuessState.CATEGORICAL

    def to_variable(self) -> Variable:
        return Variable(name=self.name, kind=self.kind, width=self.width, role=VarRole.EXPLANATORY)


def _file_source(path: str, encoding: str) -> Source:
    def open_source() -> IO[str]:
        try:
            return open(path, "r", encoding=encoding, newline="\n")
        except OSError as e:
            raise StoreIOError(f"Failed to open CSV file {path}: {e}") from e
    return open_source


def _string_source(content: str) -> Source:
    return lambda: io.StringIO(content, newline="\n")


def split_record(line: str, delimiter: str) -> List[str]:
    """
    Split one physical line into tokens.

    Only a trailing "\\n" or "\\r\\n" ends the record; any other "\\r" stays in
    its token. A blank line yields no tokens.
    """
    if line.endswith("\n"):
        line = line[:-1]
        if line.endswith("\r"):
            line = line[:-1]
    if not line:
        return []
    return line.split(delimiter)


def _records(fh: IO[str], delimiter: str) -> Iterator[Tuple[int, List[str]]]:
    """Yield (line_number, tokens) for every physical record, blank ones included."""
    line_no = 0
    try:
        for line in fh:
            line_no += 1
            yield line_no, split_record(line, delimiter)
    except UnicodeDecodeError as e:
        raise StoreIOError(f"Failed to decode input near line {line_no + 1}: {e}") from e


def _data_records(fh: IO[str], delimiter: str, skip_header: bool) -> Iterator[Tuple[int, List[str]]]:
    for line_no, tokens in _records(fh, delimiter):
        if skip_header and line_no == 1:
            continue
        if not tokens:
            continue
        yield line_no, tokens


def _check_count(tokens: List[str], expected: int, line_no: int) -> None:
    if len(tokens) > expected:
        raise MalformedRecordError(
            f"line {line_no}: inconsistent file format (too many fields: expected {expected}, got {len(tokens)})"
        )
    if len(tokens) < expected:
        raise MalformedRecordError(
            f"line {line_no}: inconsistent file format (too few fields: expected {expected}, got {len(tokens)})"
        )


def decode_record(schema: Schema, tokens: List[str], line_no: int, settings: StoreSettings) -> bytes:
    """Encode one split record into a packed row for schema."""
    _check_count(tokens, len(schema), line_no)
    numeric = settings.numeric
    parts = []
    for var, token in zip(schema, tokens):
        try:
            value = numeric.parse(token) if var.is_quantitative else token
            parts.append(encode_field(var, value, settings))
        except DataStoreError as e:
            raise type(e)(f"line {line_no}, column {var.name!r}: {e}") from e
    return b"".join(parts)


def _materialize(source: Source, schema: Schema, skip_header: bool, settings: StoreSettings) -> RowStore:
    store = RowStore(schema, settings)
    with source() as fh:
        for line_no, tokens in _data_records(fh, settings.delimiter, skip_header):
            store.append(decode_record(schema, tokens, line_no, settings))
    logger.debug("Imported %d rows against %r", store.row_count(), schema)
    return store


def _is_numeric(token: str, settings: StoreSettings) -> bool:
    token_class = classify(token)
    if token_class is TokenClass.INTEGER:
        return True
    return token_class is TokenClass.REAL and not settings.numeric.is_integral


def _read_header(source: Source, settings: StoreSettings) -> List[ColumnGuess]:
    with source() as fh:
        for _, tokens in _records(fh, settings.delimiter):
            if not tokens:
                break
            return [ColumnGuess(name=name) for name in tokens]
    raise UndeterminedSchemaError("Cannot infer a schema without a header line")


def _scan(source: Source, guesses: List[ColumnGuess], settings: StoreSettings) -> Optional[Tuple[int, int]]:
    """
    One scan pass over the data lines, updating guesses in place.

    Returns:
        (column_index, line_number) of a demotion, which ends the pass early,
        or None when the pass reached the end of input.
    """
    numeric_size = settings.numeric.size
    with source() as fh:
        for line_no, tokens in _data_records(fh, settings.delimiter, skip_header=True):
            _check_count(tokens, len(guesses), line_no)
            for i, token in enumerate(tokens):
                guess = guesses[i]
                if guess.kind is VarKind.QUANTITATIVE and _is_numeric(token, settings):
                    if guess.width is None:
                        guess.width = numeric_size
                    continue
                if guess.kind is VarKind.QUANTITATIVE and guess.width is not None:
                    guess.kind = VarKind.CATEGORICAL
                    guess.width = None
                    return i, line_no
                guess.kind = VarKind.CATEGORICAL
                needed = len(token.encode(settings.encoding)) + 1
                if guess.width is None or guess.width < needed:
                    guess.width = needed
    return None


def _infer(source: Source, settings: StoreSettings) -> Schema:
    guesses = _read_header(source, settings)

    # Each restart demotes a different column, so len(guesses) restarts is the bound.
    for _ in range(len(guesses) + 1):
        demotion = _scan(source, guesses, settings)
        if demotion is None:
            break
        index, line_no = demotion
        logger.info(
            "Column %r has non-numeric data at line %d; demoting to categorical and rescanning",
            guesses[index].name, line_no,
        )
    else:
        raise UndeterminedSchemaError("Column inference did not converge")

    undetermined = [g.name for g in guesses if g.state is GuessState.UNDETERMINED]
    if undetermined:
        raise UndeterminedSchemaError(
            f"Cannot determine variable sizes for columns: {', '.join(undetermined)}"
        )

    schema = Schema(g.to_variable() for g in guesses)
    logger.debug("Inferred %r", schema)
    return schema


def infer_schema_string(content: str, settings: Optional[StoreSettings] = None) -> Schema:
    """
    Infer a Schema from delimited text whose first line is a header.

    Raises:
        UndeterminedSchemaError: no header, or a column never received data
        MalformedRecordError: a line has the wrong number of fields
        InvalidSchemaError: duplicate header names
    """
    return _infer(_string_source(content), resolve_settings(settings))


def infer_schema_file(path: str, settings: Optional[StoreSettings] = None) -> Schema:
    settings = resolve_settings(settings)
    return _infer(_file_source(path, settings.encoding), settings)


def read_csv_string(
    content: str,
    schema: Optional[Schema] = None,
    *,
    skip_header: Optional[bool] = None,
    settings: Optional[StoreSettings] = None,
) -> RowStore:
    """
    Build a RowStore from delimited text.

    Args:
        content: Text to import
        schema: Layout to decode against; inferred from the text when omitted
        skip_header: Skip the first line (defaults to settings.skip_header;
                     always True when the schema is inferred)
        settings: Encoding rules (defaults to get_settings())

    Returns:
        RowStore holding one row per non-blank data line, in input order

    Raises:
        MalformedRecordError: wrong field count or unparsable numeric token
        FieldTooLongError: categorical token wider than its column
        SizeMismatchError: quantitative column width differs from the numeric format
        UndeterminedSchemaError: inference could not settle every column
    """
    settings = resolve_settings(settings)
    return _read(_string_source(content), schema, skip_header, settings)


def read_csv_file(
    path: str,
    schema: Optional[Schema] = None,
    *,
    skip_header: Optional[bool] = None,
    settings: Optional[StoreSettings] = None,
) -> RowStore:
    """
    Build a RowStore from a delimited text file.

    Same contract as read_csv_string; StoreIOError if the file cannot be
    opened or decoded.
    """
    settings = resolve_settings(settings)
    return _read(_file_source(path, settings.encoding), schema, skip_header, settings)


def _read(source: Source, schema: Optional[Schema], skip_header: Optional[bool], settings: StoreSettings) -> RowStore:
    if schema is None:
        schema = _infer(source, settings)
        skip_header = True
    elif skip_header is None:
        skip_header = settings.skip_header
    return _materialize(source, schema, skip_header, settings)


__all__ = [
    "GuessState",
    "ColumnGuess",
    "split_record",
    "decode_record",
    "infer_schema_string",
    "infer_schema_file",
    "read_csv_string",
    "read_csv_file",
]
