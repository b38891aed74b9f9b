# src/stridehr/db/__init__.py
# Don't import session on package import; expose lazily instead
from .base import Base  # safe to import


def get_session(url=None):  # returns async context manager
    from .session import get_session as _get
    return _get(url)


def get_sessionmaker(url=None):
    from .session import get_sessionmaker as _gsm
    return _gsm(url)


__all__ = ["Base", "get_session", "get_sessionmaker"]
