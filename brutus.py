from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import List, Optional

"""
Single-byte XOR key recovery

Decode hex ciphertext, try every one-byte key, score each decryption for how English-like it looks and keep
the best key. The search can be split across several worker threads.
"""


KEY_SPACE = 256


class HexError(ValueError):
    pass


class InvalidDigitError(HexError):
    byte: int
    position: Optional[int]

    def __init__(self, byte: int, position: Optional[int] = None):
        self.byte = byte
        self.position = position
        if position is None:
            super().__init__(f"Not a valid hexadecimal digit: {byte:#04x}")
        else:
            super().__init__(f"Not a valid hexadecimal digit: {byte:#04x} at position {position}")


class OddLengthError(HexError):
    length: int

    def __init__(self, length: int):
        self.length = length
        super().__init__(f"Hex input has an odd number of digits ({length})")


class EmptyInputError(ValueError):
    pass


def decode_hex_digit(byte: int) -> int:
    """
    Convert a single ASCII hexadecimal digit into its integer value

    >>> decode_hex_digit(ord("A"))
    10
    >>> decode_hex_digit(ord("f"))
    15
    >>> decode_hex_digit(ord("7"))
    7
    >>> decode_hex_digit(0x12)
    Traceback (most recent call last):
    brutus.InvalidDigitError: Not a valid hexadecimal digit: 0x12
    >>> decode_hex_digit(ord("\\r"))
    Traceback (most recent call last):
    brutus.InvalidDigitError: Not a valid hexadecimal digit: 0x0d
    """
    if 0x30 <= byte <= 0x39:
        return byte - 0x30
    if 0x41 <= byte <= 0x46:
        return byte - 0x41 + 0xa
    if 0x61 <= byte <= 0x66:
        return byte - 0x61 + 0xa
    raise InvalidDigitError(byte)


def decode_hexbytes(hexbytes: bytes) -> bytes:
    """
    Decode a hexadecimal representation of some bytes

    Input must be exactly an even number of hex digits. Nothing is stripped, see strip_trailing_whitespace()

    >>> decode_hexbytes(b"41414141")
    b'AAAA'
    >>> decode_hexbytes(b"546869732069732074686520656e642c20686f6c6420796f75722062726561746820616e6420636f756e7420746f2031302e")
    b'This is the end, hold your breath and count to 10.'
    >>> decode_hexbytes(b"")
    b''
    >>> decode_hexbytes(b"414")
    Traceback (most recent call last):
    brutus.OddLengthError: Hex input has an odd number of digits (3)
    >>> decode_hexbytes(b"41zz")
    Traceback (most recent call last):
    brutus.InvalidDigitError: Not a valid hexadecimal digit: 0x7a at position 2
    """
    if len(hexbytes) % 2 != 0:
        raise OddLengthError(len(hexbytes))

    nibbles: List[int] = []
    for position, byte in enumerate(hexbytes):
        try:
            nibbles.append(decode_hex_digit(byte))
        except InvalidDigitError:
            raise InvalidDigitError(byte, position) from None

    res = []
    for i in range(0, len(nibbles), 2):
        res.append(nibbles[i] * 0x10 + nibbles[i + 1])
    return bytes(res)


def strip_trailing_whitespace(hexbytes: bytes) -> bytes:
    """
    Remove trailing ASCII whitespace (e.g. a CRLF line ending) from hex text before decoding it

    >>> strip_trailing_whitespace(b"41414141\\r\\n")
    b'41414141'
    >>> decode_hexbytes(strip_trailing_whitespace(b"4142\\n"))
    b'AB'
    """
    return hexbytes.rstrip(b" \t\r\n\v\f")


def single_byte_xor(data: bytes, key: int) -> bytes:
    """
    XOR every byte of data with the same one-byte key

    >>> single_byte_xor(b"Attack at dawn", 0x42).hex()
    '033636232129622336622623352c'
    >>> single_byte_xor(single_byte_xor(b"Attack at dawn", 0x42), 0x42)
    b'Attack at dawn'
    >>> single_byte_xor(b"AAAA", 256)
    Traceback (most recent call last):
    ValueError: Key must be a single byte (0-255), got 256
    """
    if not 0 <= key < KEY_SPACE:
        raise ValueError(f"Key must be a single byte (0-255), got {key}")
    return bytes(b ^ key for b in data)


# Lowercase only. Uppercase and punctuation count as "anything else"
COMMON_LETTERS = frozenset(b"etaoin")
COMMON_LETTER_SCORE = 20
LETTER_SCORE = 10
SPACE_SCORE = 0
OTHER_SCORE = -10


def score_english_text(text: bytes) -> float:
    """
    Give a score for how English-like text is. Higher score means more English-like input

    The score is the mean per-byte score, so it can only be compared between candidate decryptions of the same
    ciphertext

    >>> score_english_text(b"eat")
    20.0
    >>> score_english_text(b"hi")
    15.0
    >>> score_english_text(b"HI!?")
    -10.0
    >>> score_english_text(b"    ")
    0.0
    >>> score_english_text(b"")
    Traceback (most recent call last):
    brutus.EmptyInputError: Cannot score an empty byte sequence
    """
    if not text:
        raise EmptyInputError("Cannot score an empty byte sequence")

    score = 0
    for b in text:
        if b in COMMON_LETTERS:
            score += COMMON_LETTER_SCORE
        elif 0x61 <= b <= 0x7a:
            score += LETTER_SCORE
        elif b == 0x20:
            score += SPACE_SCORE
        else:
            score += OTHER_SCORE

    return score / len(text)


@dataclass(frozen=True)
class ScoredCandidate:
    score: float
    key: int

    def __repr__(self):
        return f"ScoredCandidate(score={self.score:.2f}, key={self.key:#04x})"

    def beats(self, other: "ScoredCandidate") -> bool:
        """
        Strictly greater score wins. A tie keeps whichever candidate was seen first
        """
        return self.score > other.score


SEED_CANDIDATE = ScoredCandidate(score=0, key=0)


def _best_in(ciphertext: bytes, keys: range) -> ScoredCandidate:
    best = SEED_CANDIDATE
    for k in keys:
        candidate = ScoredCandidate(score=score_english_text(single_byte_xor(ciphertext, k)), key=k)
        if candidate.beats(best):
            best = candidate
    return best


def _require_ciphertext(ciphertext: bytes):
    if not ciphertext:
        raise EmptyInputError("Cannot search for a key on an empty ciphertext")


def break_single_xor(ciphertext: bytes) -> ScoredCandidate:
    """
    Brute-force the key of a single-byte XOR ciphertext, trying keys 0 to 255 in order

    If no key scores above zero the result is key 0 with a score of 0

    >>> ciphertext = decode_hexbytes(b"033636232129622336622623352c")
    >>> break_single_xor(ciphertext)
    ScoredCandidate(score=12.14, key=0x42)
    >>> break_single_xor(b"")
    Traceback (most recent call last):
    brutus.EmptyInputError: Cannot search for a key on an empty ciphertext
    """
    _require_ciphertext(ciphertext)
    return _best_in(ciphertext, range(KEY_SPACE))


def key_partitions(workers: int) -> List[range]:
    """
    Split the key space into contiguous, non-overlapping ranges, one per worker

    >>> key_partitions(2)
    [range(0, 128), range(128, 256)]
    >>> key_partitions(3)
    [range(0, 86), range(86, 171), range(171, 256)]
    >>> key_partitions(0)
    Traceback (most recent call last):
    ValueError: Need at least one worker, got 0
    """
    if workers < 1:
        raise ValueError(f"Need at least one worker, got {workers}")

    def ceil_div(a: int, b: int) -> int:
        return -(-a // b)

    return [range(ceil_div(KEY_SPACE * i, workers), ceil_div(KEY_SPACE * (i + 1), workers))
            for i in range(workers)]


def break_single_xor_parallel(ciphertext: bytes, workers: int = 2) -> ScoredCandidate:
    """
    Brute-force the key of a single-byte XOR ciphertext, searching partitions of the key space concurrently

    Every worker reports the best key in its own partition. Those reports are reduced in the order they complete,
    so when two keys share the top score the winner may differ from break_single_xor()

    >>> ciphertext = decode_hexbytes(b"033636232129622336622623352c")
    >>> break_single_xor_parallel(ciphertext, workers=4)
    ScoredCandidate(score=12.14, key=0x42)
    """
    partitions = key_partitions(workers)
    _require_ciphertext(ciphertext)

    best = SEED_CANDIDATE
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(_best_in, ciphertext, keys) for keys in partitions]
        for future in as_completed(futures):
            candidate = future.result()
            if candidate.beats(best):
                best = candidate
    return best


def rank_keys(ciphertext: bytes) -> List[ScoredCandidate]:
    """
    Score every key and return them best first. Keys with equal scores stay in ascending order

    >>> ciphertext = single_byte_xor(b"Attack at dawn", ord("X"))
    >>> [chr(c.key) for c in rank_keys(ciphertext)[:1]]
    ['X']
    >>> len(rank_keys(ciphertext))
    256
    """
    _require_ciphertext(ciphertext)
    candidates = [ScoredCandidate(score=score_english_text(single_byte_xor(ciphertext, k)), key=k)
                  for k in range(KEY_SPACE)]
    return sorted(candidates, key=lambda x: x.score, reverse=True)
