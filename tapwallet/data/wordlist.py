"""
Loads a given wordlist
"""
from functools import lru_cache
from pathlib import Path

from tapwallet.core import WALLET

__all__ = ["DEFAULT_FILE", "load_wordlist", "word_index"]

DEFAULT_FILE = Path(__file__).parent / "wordlists" / "english.txt"


@lru_cache(maxsize=None)
def load_wordlist(wordlist_file: Path = DEFAULT_FILE) -> tuple[str, ...]:
    """Return the BIP39 wordlist as a tuple of strings."""
    with Path(wordlist_file).open(encoding="utf-8") as f:
        words = tuple(line.strip() for line in f if line.strip())
    if len(words) != WALLET.WORDLIST_SIZE:
        raise ValueError(f"Wordlist {wordlist_file} has {len(words)} words, expected {WALLET.WORDLIST_SIZE}")
    return words


@lru_cache(maxsize=None)
def _index_map(wordlist_file: Path = DEFAULT_FILE) -> dict[str, int]:
    return {word: i for i, word in enumerate(load_wordlist(wordlist_file))}


def word_index(word: str, wordlist_file: Path = DEFAULT_FILE) -> int | None:
    """Position of the word in the list, or None if absent"""
    return _index_map(wordlist_file).get(word)
