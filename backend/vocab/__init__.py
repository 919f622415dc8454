"""Vocabulary records, topics and the seed loader."""

from backend.vocab.repo import VocabLoadError, load_vocab
from backend.vocab.types import Level, Topic, VocabItem

__all__ = ["Level", "Topic", "VocabItem", "VocabLoadError", "load_vocab"]
