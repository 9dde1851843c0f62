"""Field selection for Tripletex queries.

Most Tripletex search and get endpoints accept a `fields` query parameter
that chooses which attributes of the returned objects are populated. Nested
objects are selected with parentheses and `*` stands for every scalar field
of a level:

    *,customer(id,name),orderLines(*,product(number))

`FieldsBuilder` constructs such strings fluently. Output is canonical: the
entries of every level are sorted, so the same tree always renders to the
same string no matter in which order it was built.

Example:
    ```python
    from tripletex_client.fields import FieldsBuilder

    fields = (
        FieldsBuilder()
        .all()
        .group("customer", "id", "name")
        .group("orderLines", "*", FieldsBuilder().group("product", "number"))
    )
    str(fields)  # "*,customer(id,name),orderLines(*,product(number))"
    ```
"""

import copy
from collections.abc import Mapping
from typing import TypeAlias, Union

# Field name -> nested selection, or None for a leaf
Fields: TypeAlias = dict[str, Union["Fields", None]]

WILDCARD = "*"


def fields_to_string(fields: Mapping[str, Mapping | None]) -> str:
    """Render a field tree as a Tripletex `fields` parameter value."""
    parts = []
    for name in sorted(fields):
        nested = fields[name]
        if nested is not None:
            parts.append(f"{name}({fields_to_string(nested)})")
        else:
            parts.append(name)
    return ",".join(parts)


def _check_selection(fields: Mapping, path: str = "") -> None:
    """Reject a raw field mapping whose values are not None or nested mappings."""
    for name, nested in fields.items():
        if not isinstance(name, str):
            raise TypeError(f"field names must be str, not {type(name).__name__}")
        if nested is None:
            continue
        if not isinstance(nested, Mapping):
            raise TypeError(
                f"field {path + name!r} must map to None or a mapping, not {type(nested).__name__}"
            )
        _check_selection(nested, f"{path}{name}.")


class FieldsBuilder:
    """Fluent builder for nested field selections.

    Every method returns the builder itself so calls can be chained.
    """

    def __init__(self) -> None:
        self._fields: Fields = {}

    def all(self) -> "FieldsBuilder":
        """Select every scalar field of this level (`*`)."""
        self._fields[WILDCARD] = None
        return self

    def add(self, name: str) -> "FieldsBuilder":
        """Select a single field without nesting."""
        self._fields[name] = None
        return self

    def group(self, name: str, *members: "str | FieldsBuilder | Mapping") -> "FieldsBuilder":
        """Select a nested object and the fields to include from it.

        Each member is a field name, another builder whose selection is merged
        in, or a raw field mapping that is merged in. A repeated group name
        replaces the earlier selection.

        Raises:
            TypeError: If a member is none of the supported types, or a raw
                mapping holds values other than None or nested mappings.
        """
        nested: Fields = {}
        for member in members:
            if isinstance(member, str):
                nested[member] = None
            elif isinstance(member, FieldsBuilder):
                nested.update(copy.deepcopy(member._fields))
            elif isinstance(member, Mapping):
                _check_selection(member)
                nested.update(copy.deepcopy(dict(member)))
            else:
                raise TypeError(
                    f"group members must be str, FieldsBuilder or a mapping, not {type(member).__name__}"
                )

        self._fields[name] = nested
        return self

    @property
    def fields(self) -> Fields:
        """A copy of the selection tree."""
        return copy.deepcopy(self._fields)

    def __str__(self) -> str:
        return fields_to_string(self._fields)

    def __repr__(self) -> str:
        return f"FieldsBuilder({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, FieldsBuilder):
            return NotImplemented
        return self._fields == other._fields

    def __bool__(self) -> bool:
        return bool(self._fields)
