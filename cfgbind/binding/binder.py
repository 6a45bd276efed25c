"""
Descriptor binder: lazy, per-accessor resolution of typed values.

**Conceptual**: Binding a contract is free: it just creates a view. All the
work happens when an accessor is read, and it happens for that accessor
only. An unused accessor whose raw value is garbage never raises.

**Resolution algorithm** (on every attribute read):
  1. Lookup key: the accessor's key override, else its name.
  2. Key absent from the store:
       - contract-typed accessor: bind the nested contract over the same
         store (a nested contract is always "present"; its own accessors
         resolve independently and may fall back to their own defaults);
       - otherwise: return the declared default.
  3. Key present: return the cached conversion if there is one.
  4. Otherwise convert, cache, return. A failed conversion is not cached,
     so every later read raises again.
"""

import logging

from cfgbind.binding.views import TypedView, view_class_for
from cfgbind.config.settings import BindingSettings
from cfgbind.conversion.cache import MISSING, ConversionCache
from cfgbind.conversion.converter import TypeConverter
from cfgbind.schema.contracts import SchemaContract, TypeKind
from cfgbind.store.entries import EntryStore

logger = logging.getLogger(__name__)


class DescriptorBinder:
    """
    Produces typed views and resolves their accessors.

    The binder borrows the entry store and conversion cache of the owning
    Configuration; views created by it must not outlive that Configuration.
    """

    def __init__(self, entries: EntryStore, cache: ConversionCache, settings: BindingSettings):
        self.entries = entries
        self.cache = cache
        self.converter = TypeConverter(bind=self.bind, settings=settings)

    def bind(self, contract: SchemaContract) -> TypedView:
        """
        Return a view satisfying `contract`. Never fails for a valid contract.

        Raises:
            TypeError: If `contract` is not a SchemaContract.
        """
        if not isinstance(contract, SchemaContract):
            raise TypeError(f"bind expects a SchemaContract, got: {contract!r}")
        return view_class_for(contract)(contract, self)

    def resolve(self, contract: SchemaContract, index: int):
        accessor = contract.accessors[index]
        key = accessor.lookup_key

        if key not in self.entries:
            if accessor.type.kind is TypeKind.CONTRACT:
                return self.bind(accessor.type.contract)
            return accessor.default

        cached = self.cache.lookup(contract, index)
        if cached is not MISSING:
            logger.debug(f"cache hit {contract.name}.{accessor.name}")
            return cached

        value = self.converter.convert(accessor.type, self.entries[key], key)
        self.cache.store(contract, index, value)
        return value
