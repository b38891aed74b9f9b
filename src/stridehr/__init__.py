"""StrideHR relational schema, migrations and migration tooling."""

__version__ = "0.1.0"
