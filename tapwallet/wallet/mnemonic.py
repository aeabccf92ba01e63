"""
The Mnemonic class - the BIP39 codec between entropy and a checksummed word sequence.

    entropy (ENT bits) || checksum (ENT/32 bits of SHA256(entropy))  ->  11-bit groups  ->  wordlist indices

Constructing a Mnemonic only normalizes the words. decode() and validate() check the word count, the words and the
checksum. Use Mnemonic.parse() to construct and validate in one step.
"""
import secrets

from tapwallet.core import WALLET, ChecksumMismatchError, EntropySourceError, InvalidEntropyError, \
    InvalidWordCountError, ScopedSecret, UnknownWordError, get_logger
from tapwallet.cryptography.hash_functions import sha256
from tapwallet.data import load_wordlist, word_index
from tapwallet.wallet.seed import derive_seed, normalize_text

__all__ = ["Mnemonic", "generate", "validate", "decode"]

# --- CONSTANTS --- #
ALLOWED_ENTROPY_BYTELEN = tuple(WALLET.MNEMONIC.keys())
CHECKSUM_KEY = WALLET.CHECKSUM_KEY
WORD_KEY = WALLET.WORD_KEY
BITLEN_KEY = WALLET.BITLEN_KEY
WORD_BITS = WALLET.WORD_BITS
WORD_MASK = (1 << WORD_BITS) - 1

# word count -> entropy byte length
ENTROPY_BYTELEN_BY_WORDS = {spec[WORD_KEY]: bytelen for bytelen, spec in WALLET.MNEMONIC.items()}

logger = get_logger(__name__)


def _checksum(entropy: bytes) -> int:
    """
    Return the leading ENT/32 bits of SHA256(entropy) as an integer
    """
    checksum_bitlen = WALLET.MNEMONIC[len(entropy)][CHECKSUM_KEY]
    return int.from_bytes(sha256(entropy), "big") >> (256 - checksum_bitlen)


class Mnemonic:
    __slots__ = ("_words",)

    def __init__(self, words: list[str] | tuple[str, ...] | str):
        """
        Takes a list of words or a whitespace-separated phrase. Each word is NFKD normalized.
        """
        if isinstance(words, str):
            words = words.split()
        self._words = tuple(normalize_text(w).strip() for w in words)

    # --- CONSTRUCTORS --- #

    @classmethod
    def generate(cls, word_count: int = WALLET.DEFAULT_WORD_COUNT) -> "Mnemonic":
        """
        New mnemonic from fresh entropy drawn from the operating system CSPRNG
        """
        entropy_bytelen = ENTROPY_BYTELEN_BY_WORDS.get(word_count)
        if entropy_bytelen is None:
            raise InvalidWordCountError(
                f"Word count {word_count} not BIP39 compliant. Must be one of {tuple(ENTROPY_BYTELEN_BY_WORDS)}")
        try:
            entropy = bytearray(secrets.token_bytes(entropy_bytelen))
        except (OSError, NotImplementedError) as e:
            raise EntropySourceError(f"No secure random source available: {e}") from e

        try:
            mnemonic = cls.from_entropy(entropy)
        finally:
            entropy[:] = bytes(len(entropy))
        logger.debug(f"Generated {word_count}-word mnemonic")
        return mnemonic

    @classmethod
    def from_entropy(cls, entropy: bytes | bytearray) -> "Mnemonic":
        """
        Encode entropy of an allowed byte length as words
        """
        entropy_bytelen = len(entropy)
        if entropy_bytelen not in ALLOWED_ENTROPY_BYTELEN:
            raise InvalidEntropyError(
                f"Entropy byte length {entropy_bytelen} not BIP39 compliant. Must be one of {ALLOWED_ENTROPY_BYTELEN}")

        checksum_bitlen = WALLET.MNEMONIC[entropy_bytelen][CHECKSUM_KEY]
        word_count = WALLET.MNEMONIC[entropy_bytelen][WORD_KEY]
        ent_check = (int.from_bytes(entropy, "big") << checksum_bitlen) | _checksum(bytes(entropy))

        wordlist = load_wordlist()
        words = [wordlist[(ent_check >> (WORD_BITS * i)) & WORD_MASK] for i in reversed(range(word_count))]
        return cls(words)

    @classmethod
    def parse(cls, phrase: list[str] | str) -> "Mnemonic":
        """
        Construct and validate. Raises the specific decoding error for an invalid phrase.
        """
        mnemonic = cls(phrase)
        mnemonic.decode()
        return mnemonic

    # --- OVERRIDES --- #

    def __eq__(self, other):
        if not isinstance(other, Mnemonic):
            return NotImplemented
        return self._words == other._words

    def __hash__(self):
        return hash(self._words)

    def __len__(self):
        return len(self._words)

    def __repr__(self):
        # Words are secret
        return f"Mnemonic(<{self.word_count} words>)"

    # --- PROPERTIES --- #

    @property
    def words(self) -> tuple[str, ...]:
        return self._words

    @property
    def phrase(self) -> str:
        return " ".join(self._words)

    @property
    def word_count(self) -> int:
        return len(self._words)

    # --- CODEC --- #

    def decode(self) -> bytes:
        """
        Recover the entropy. Raises InvalidWordCountError, UnknownWordError or ChecksumMismatchError.
        """
        entropy_bytelen = ENTROPY_BYTELEN_BY_WORDS.get(self.word_count)
        if entropy_bytelen is None:
            raise InvalidWordCountError(
                f"Mnemonic has {self.word_count} words. Must be one of {tuple(ENTROPY_BYTELEN_BY_WORDS)}")

        ent_check = 0
        for position, word in enumerate(self._words):
            index = word_index(word)
            if index is None:
                raise UnknownWordError(f"Word at position {position + 1} is not in the wordlist")
            ent_check = (ent_check << WORD_BITS) | index

        checksum_bitlen = WALLET.MNEMONIC[entropy_bytelen][CHECKSUM_KEY]
        checksum = ent_check & ((1 << checksum_bitlen) - 1)
        entropy = (ent_check >> checksum_bitlen).to_bytes(entropy_bytelen, "big")

        if _checksum(entropy) != checksum:
            raise ChecksumMismatchError("Mnemonic checksum does not match its entropy")
        return entropy

    def validate(self) -> bool:
        """
        For a given mnemonic phrase, we validate word count, words and checksum according to BIP-39
        """
        try:
            self.decode()
        except (InvalidWordCountError, UnknownWordError, ChecksumMismatchError):
            return False
        return True

    def to_seed(self, passphrase: str | bytes = "") -> ScopedSecret:
        """
        Returns the seed value associated with the mnemonic phrase
        """
        return derive_seed(list(self._words), passphrase)


# --- MODULE LEVEL --- #

def _as_mnemonic(mnemonic: Mnemonic | list[str] | str) -> Mnemonic:
    return mnemonic if isinstance(mnemonic, Mnemonic) else Mnemonic(mnemonic)


def generate(word_count: int = WALLET.DEFAULT_WORD_COUNT) -> Mnemonic:
    return Mnemonic.generate(word_count)


def validate(mnemonic: Mnemonic | list[str] | str) -> bool:
    return _as_mnemonic(mnemonic).validate()


def decode(mnemonic: Mnemonic | list[str] | str) -> bytes:
    return _as_mnemonic(mnemonic).decode()
