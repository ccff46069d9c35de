"""Random data generators defined by the TPC-C specification."""

from __future__ import annotations

import random
import time

CHARACTERS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ1234567890"
LETTERS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
NUMBERS = "1234567890"
ORIGINAL_STRING = "ORIGINAL"

C_LAST_TOKENS = (
    "BAR",
    "OUGHT",
    "ABLE",
    "PRI",
    "PRES",
    "ESE",
    "ANTI",
    "CALLY",
    "ATION",
    "EING",
)

_seed_rng = random.Random(time.time_ns())
C_LOAD = _seed_rng.randrange(256)
C_ITEM_ID = _seed_rng.randrange(1024)
C_CUSTOMER_ID = _seed_rng.randrange(8192)


def convert_to_pq(query: str, driver: str) -> str:
    """Rewrite ``?`` placeholders as ``$1, $2, ...`` for the postgres driver."""
    if driver != "postgres":
        return query
    pieces = query.split("?")
    out = [pieces[0]]
    for number, piece in enumerate(pieces[1:], start=1):
        out.append(f"${number}{piece}")
    return "".join(out)


def rand_int(rng: random.Random, low: int, high: int) -> int:
    """Return a random integer in [low, high] (spec 4.3.2.5)."""
    return rng.randint(low, high)


def _rand_string(rng: random.Random, source: str, low: int, high: int) -> str:
    return "".join(rng.choices(source, k=rand_int(rng, low, high)))


def rand_chars(rng: random.Random, low: int, high: int) -> str:
    """Random alphanumeric string of length in [low, high]."""
    return _rand_string(rng, CHARACTERS, low, high)


def rand_letters(rng: random.Random, low: int, high: int) -> str:
    """Random upper-case string of length in [low, high]."""
    return _rand_string(rng, LETTERS, low, high)


def rand_numbers(rng: random.Random, low: int, high: int) -> str:
    """Random digit string of length in [low, high]."""
    return _rand_string(rng, NUMBERS, low, high)


def rand_zip(rng: random.Random) -> str:
    """Nine-character zip: four random digits followed by 11111 (spec 4.3.2.7)."""
    return rand_numbers(rng, 4, 4) + "11111"


def rand_state(rng: random.Random) -> str:
    """Two random upper-case letters."""
    return rand_letters(rng, 2, 2)


def rand_tax(rng: random.Random) -> float:
    """Tax rate in [0.0000, 0.2000]."""
    return rand_int(rng, 0, 2000) / 10000.0


def rand_original_string(rng: random.Random) -> str:
    """String of 26..50 characters; one in ten holds ``ORIGINAL`` (spec 4.3.3.1)."""
    if rng.randrange(10) == 0:
        buf = rand_chars(rng, 26, 50)
        index = rng.randrange(len(buf) - len(ORIGINAL_STRING))
        return buf[:index] + ORIGINAL_STRING + buf[index + len(ORIGINAL_STRING):]
    return rand_chars(rng, 26, 50)


def rand_c_last_syllables(n: int) -> str:
    """Customer last name built from the three digits of n (0..999)."""
    if not 0 <= n < 1000:
        raise ValueError(f"last name number must be in [0, 999], got {n}")
    return C_LAST_TOKENS[n // 100] + C_LAST_TOKENS[n // 10 % 10] + C_LAST_TOKENS[n % 10]


def rand_c_last(rng: random.Random) -> str:
    """Non-uniform random customer last name (spec 4.3.2.3, 2.1.6)."""
    a = rng.randrange(256)
    b = rng.randrange(1000)
    return rand_c_last_syllables(((a | b) + C_LOAD) % 1000)


def rand_customer_id(rng: random.Random) -> int:
    """Non-uniform random customer id in [1, 3000] (spec 2.1.6)."""
    a = rng.randrange(1024)
    b = rng.randrange(3000) + 1
    return ((a | b) + C_CUSTOMER_ID) % 3000 + 1


def rand_item_id(rng: random.Random) -> int:
    """Non-uniform random item id in [1, 100000] (spec 2.1.6)."""
    a = rng.randrange(8190)
    b = rng.randrange(100000) + 1
    return ((a | b) + C_ITEM_ID) % 100000 + 1