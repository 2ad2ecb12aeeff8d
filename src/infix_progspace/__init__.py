"""Program-space exploration and ambiguity-aware round-trip testing for infix."""

from .config import Config
from .lazy import LazyStream
from .rope import Rope
from .reader import ParseResult, parse

__all__ = ["Config", "LazyStream", "ParseResult", "Rope", "parse"]
