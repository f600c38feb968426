"""Service resources."""

from paxsenix.resources.chat import COMPLETIONS_PATH, Chat

__all__ = ["COMPLETIONS_PATH", "Chat"]
