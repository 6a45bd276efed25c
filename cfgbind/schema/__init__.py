"""
Schema contracts and type descriptors.

Describes configuration shapes: named accessors with declared types,
defaults and optional lookup-key overrides.
"""
