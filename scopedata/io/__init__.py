# scopedata/io/__init__.py
from .load import load_mdf

__all__ = ["load_mdf"]
