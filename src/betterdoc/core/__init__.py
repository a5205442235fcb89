"""Core domain - pure authorization and invite logic.

The core only depends on the Protocols it defines, never on concrete
storage adapters.
"""
