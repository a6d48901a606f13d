"""Pure transformation adapters for the remote model service."""

from .openai import ResponsesAdapter, parse_arguments

__all__ = ["ResponsesAdapter", "parse_arguments"]
