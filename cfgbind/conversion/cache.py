"""
Conversion cache: per-configuration memo of converted accessor values.

**Conceptual**: Parsing `--ports=80,443,8080` into an int array on every
attribute read would be wasteful, so the first successful conversion of an
accessor is remembered and returned on every later read.

**Key**: `(contract, accessor_index)`. Contracts hash by identity, so the
same contract bound twice from one Configuration shares its cached values,
while two Configuration instances never share anything.

**Caveat**: Entries are never invalidated. Adding entries after an accessor
has been read does not change that accessor's value; accessors that have not
been read yet still see the new entries. Finish adding entries before
reading views.
"""

from typing import Any

from cfgbind.schema.contracts import SchemaContract

# Sentinel for "no cached value"; None is a legitimate cached value.
MISSING = object()


class ConversionCache:
    """Memo table keyed by (contract, accessor_index). No eviction."""

    def __init__(self):
        self._values: dict[tuple[SchemaContract, int], Any] = {}

    def lookup(self, contract: SchemaContract, index: int) -> Any:
        """Return the cached value, or MISSING."""
        return self._values.get((contract, index), MISSING)

    def store(self, contract: SchemaContract, index: int, value: Any) -> None:
        self._values[(contract, index)] = value

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)
