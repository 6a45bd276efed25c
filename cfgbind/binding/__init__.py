"""
Typed views over an entry store.

Generates one view class per schema contract and resolves each accessor
lazily through the conversion cache and type converter.
"""
