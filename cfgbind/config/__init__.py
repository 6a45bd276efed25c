"""
Settings for the binding engine itself.

Provides the token grammar and list-splitting settings, loaded from
environment variables with upfront validation.
"""
