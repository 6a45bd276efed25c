"""
Entry store: the ordered collection of raw configuration values.

**Conceptual**: Every source of configuration (command-line tokens, plain
mappings, property sets, the process environment) ends up here as a flat
key -> raw value mapping. Nothing is converted at this stage; conversion
happens lazily when a typed view reads an accessor.

**Raw value shapes**:
  - `str`: a single `--key=value` token or a property value.
  - `True`: a bare flag token (`--key`).
  - `list[str]`: a key given several times as `--key=value`, in the order
    the tokens arrived.
  - Any object: values merged through add_mapping are stored as given.

**Accumulation vs. overwrite**:
  - Tokens accumulate: a second `--key=value` promotes the entry to
    `[first, second]`, further tokens append.
  - Mappings and properties overwrite: last write wins, no accumulation.
"""

import logging
import os
from typing import Any, Iterable, Iterator, Mapping, Optional

from cfgbind.config.settings import BindingSettings, get_settings
from cfgbind.utils.errors import MalformedArgumentError

logger = logging.getLogger(__name__)


class EntryStore:
    """
    Insertion-ordered mapping from key to raw value.

    The store is mutated only through the add_* methods and is never
    pruned. It is not thread-safe: callers that share a store across
    threads must serialize adds and reads themselves.

    Args:
        settings: Token grammar settings. Defaults to the global settings.
    """

    def __init__(self, settings: Optional[BindingSettings] = None):
        self.settings = settings or get_settings()
        self._entries: dict[str, Any] = {}

    def add_tokens(self, tokens: Iterable[str]) -> None:
        """
        Add `--key=value` and `--key` tokens.

        **Functionally**:
          - Each token must start with the argument prefix, else
            MalformedArgumentError. Tokens before the bad one stay applied.
          - The remainder is split at the first key/value separator.
          - With a value: a new key stores the string; a key holding a string
            is promoted to a two-element list; a key holding a list gets the
            value appended. Any other existing value (flag, mapping object)
            is replaced.
          - Without a value: the key is set to True, replacing any previous
            value. Flags never join a list.

        Args:
            tokens: Tokens in command-line order. A single string is treated
                    as one token, not as a sequence of characters.

        Raises:
            MalformedArgumentError: If a token lacks the argument prefix.
        """
        if isinstance(tokens, str):
            tokens = [tokens]

        prefix = self.settings.argument_prefix
        separator = self.settings.key_value_separator

        for token in tokens:
            if not isinstance(token, str) or not token.startswith(prefix):
                raise MalformedArgumentError(token, prefix)

            stripped = token[len(prefix):]
            key, found, value = stripped.partition(separator)
            if found:
                self._accumulate(key, value)
            else:
                logger.debug(f"flag {key!r} set")
                self._entries[key] = True

    def _accumulate(self, key: str, value: str) -> None:
        existing = self._entries.get(key)
        if isinstance(existing, list):
            self._entries[key] = [*existing, value]
            logger.debug(f"entry {key!r} appended ({len(existing) + 1} values)")
        elif isinstance(existing, str):
            self._entries[key] = [existing, value]
            logger.debug(f"entry {key!r} promoted to list")
        else:
            self._entries[key] = value
            logger.debug(f"entry {key!r} set")

    def add_mapping(self, entries: Mapping[str, Any]) -> None:
        """
        Merge a mapping of already-materialized values.

        Last write wins; values are stored as given (no list promotion), so
        pre-typed objects can satisfy accessors without string parsing.
        Adding the same mapping twice has the same effect as adding it once.
        """
        for key, value in entries.items():
            self._entries[key] = value
        logger.debug(f"merged {len(entries)} mapping entries")

    def add_properties(self, entries: Mapping[str, str]) -> None:
        """
        Merge a string-valued property set (same semantics as add_mapping).

        Raises:
            TypeError: If a key or value is not a string.
        """
        for key, value in entries.items():
            if not isinstance(key, str) or not isinstance(value, str):
                raise TypeError(
                    f"Properties must map strings to strings, got: {key!r} -> {value!r}"
                )
        self.add_mapping(entries)

    def add_environment(self, environ: Optional[Mapping[str, str]] = None) -> None:
        """
        Merge the process environment as a property set.

        Args:
            environ: Mapping to merge instead of os.environ (useful in tests).
        """
        self.add_properties(dict(os.environ if environ is None else environ))

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __getitem__(self, key: str) -> Any:
        return self._entries[key]

    def get(self, key: str, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def keys(self):
        return self._entries.keys()

    def items(self):
        return self._entries.items()

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"EntryStore({self._entries!r})"
