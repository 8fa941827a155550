"""Field extraction from episode list and viewer pages."""

from .protocols import FieldExtractor, FieldKind
from .webtoon_extractor import WebtoonExtractor

__all__ = ["FieldExtractor", "FieldKind", "WebtoonExtractor"]
