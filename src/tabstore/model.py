"""
Core Schema Objects

Defines the column model shared by every row in a store:
    - VarRole / VarKind (descriptive tags)
    - Variable (one named, typed, fixed-width column)
    - Schema (ordered, non-empty list of Variables = the row layout)

ARCHITECTURAL RULE:
    A Schema is immutable. Structural changes (drop, add) return a new
    Schema whose offsets are recomputed from scratch, so a layout can never
    hold a stale offset. Rows are interpreted only through a Schema.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from tabstore.errors import InvalidSchemaError, NotFoundError, OutOfRangeError


class VarRole(Enum):
    """Descriptive role of a column in an analysis. Not enforced."""
    EXPLANATORY = "explanatory"
    RESPONSE = "response"
    OTHER = "other"


class VarKind(Enum):
    """How a column's bytes are encoded."""
    CATEGORICAL = "categorical"
    QUANTITATIVE = "quantitative"


@dataclass(frozen=True)
class Variable:
    """
    Declares one column of a store.

    Properties:
        name: Identifier, unique within its Schema
        kind: VarKind, decides how the field bytes are read and written
        width: Byte width of the encoded value
        role: VarRole tag (metadata only)
        offset: Byte position of the value inside a row. Assigned by Schema;
                whatever a caller passes is overwritten.

    Equality compares all five properties, so a Variable taken from one
    Schema does not match a same-named column at a different offset.
    """

    name: str
    kind: VarKind
    width: int
    role: VarRole = VarRole.EXPLANATORY
    offset: int = 0

    @property
    def is_quantitative(self) -> bool:
        return self.kind is VarKind.QUANTITATIVE

    @property
    def is_categorical(self) -> bool:
        return self.kind is VarKind.CATEGORICAL


Column = Union[Variable, str, int]


class Schema:
    """
    Ordered sequence of Variables defining a row layout.

    Column order is both the canonical order (export, column_names) and the
    physical packing order.

    INVARIANTS:
        - At least one Variable
        - Names are unique
        - Variable[i].offset == sum(Variable[j].width for j < i)
        - Every width is a positive integer

    row_width() is computed from the Variables on every call.
    """

    def __init__(self, variables: Iterable[Variable]):
        variables = list(variables)
        if not variables:
            raise InvalidSchemaError("Too few variables for a schema (need at least one)")

        seen = set()
        packed: List[Variable] = []
        offset = 0
        for var in variables:
            if var.name in seen:
                raise InvalidSchemaError(f"Duplicate column name: {var.name!r}")
            if not isinstance(var.width, int) or var.width <= 0:
                raise InvalidSchemaError(f"Column {var.name!r} has invalid width {var.width!r}")
            seen.add(var.name)
            packed.append(replace(var, offset=offset))
            offset += var.width

        self._variables: Tuple[Variable, ...] = tuple(packed)

    @property
    def variables(self) -> Tuple[Variable, ...]:
        return self._variables

    def __len__(self) -> int:
        return len(self._variables)

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables)

    def __getitem__(self, index: int) -> Variable:
        return self.variable_at(index)

    def __eq__(self, other) -> bool:
        if not isinstance(other, Schema):
            return NotImplemented
        return self._variables == other._variables

    def __hash__(self) -> int:
        return hash(self._variables)

    def __repr__(self) -> str:
        cols = ", ".join(f"{v.name}:{v.kind.value}[{v.width}]" for v in self._variables)
        return f"Schema({cols})"

    def row_width(self) -> int:
        """Sum of all column widths."""
        return sum(v.width for v in self._variables)

    def names(self) -> List[str]:
        """Column names in order (a fresh list each call)."""
        return [v.name for v in self._variables]

    def lookup(self, name: str) -> Optional[Variable]:
        """
        Retrieve a column by exact name.

        Returns:
            Variable or None if not found
        """
        for var in self._variables:
            if var.name == name:
                return var
        return None

    def index_of(self, name: str) -> int:
        for i, var in enumerate(self._variables):
            if var.name == name:
                return i
        raise NotFoundError(f"Column {name!r} not in schema")

    def variable_at(self, index: int) -> Variable:
        if not isinstance(index, int) or isinstance(index, bool) or index < 0 or index >= len(self._variables):
            raise OutOfRangeError(
                f"Column index {index} out of range for {len(self._variables)} columns"
            )
        return self._variables[index]

    def resolve(self, column: Column) -> Variable:
        """
        Turn a Variable, name or index into this schema's Variable.

        Raises:
            NotFoundError: unknown name, or a Variable that is not a member
            OutOfRangeError: index outside [0, column count)
        """
        if isinstance(column, Variable):
            if column not in self._variables:
                raise NotFoundError(f"Variable {column.name!r} is not a member of this schema")
            return column
        if isinstance(column, str):
            var = self.lookup(column)
            if var is None:
                raise NotFoundError(f"Column {column!r} not in schema")
            return var
        if isinstance(column, int) and not isinstance(column, bool):
            return self.variable_at(column)
        raise TypeError(f"Column must be a Variable, name or index, got {type(column).__name__}")

    def drop(self, variable: Variable) -> "Schema":
        """
        Return a new Schema without variable.

        Columns that followed the removed one shift left by its width; order
        is otherwise preserved.

        Raises:
            NotFoundError: variable is not a member (full value equality)
            InvalidSchemaError: variable is the only column
        """
        if variable not in self._variables:
            raise NotFoundError(f"Variable {variable.name!r} to be removed is not in the schema")
        return Schema(v for v in self._variables if v != variable)

    def add(self, variable: Variable) -> "Schema":
        """Return a new Schema with variable appended at offset row_width()."""
        return Schema(self._variables + (replace(variable, offset=self.row_width()),))

    def all_quantitative(self) -> bool:
        return all(v.is_quantitative for v in self._variables)

    def all_categorical(self) -> bool:
        return all(v.is_categorical for v in self._variables)


__all__ = ["VarRole", "VarKind", "Variable", "Column", "Schema"]
