"""I/O utilities for sdfarch."""

from .model_json import read_model_json, write_model_json

__all__ = ['read_model_json', 'write_model_json']
