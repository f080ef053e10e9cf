"""classcodable - Keyed serialization code generator for class declarations."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("classcodable")
except PackageNotFoundError:
    __version__ = "(local)"
