import random

import pytest

from tpccbench.rand import (
    CHARACTERS,
    C_LAST_TOKENS,
    LETTERS,
    NUMBERS,
    ORIGINAL_STRING,
    convert_to_pq,
    rand_c_last,
    rand_c_last_syllables,
    rand_chars,
    rand_customer_id,
    rand_int,
    rand_item_id,
    rand_letters,
    rand_numbers,
    rand_original_string,
    rand_state,
    rand_tax,
    rand_zip,
)


@pytest.fixture
def rng():
    return random.Random(12345)


def test_convert_to_pq_numbers_placeholders():
    assert convert_to_pq("SELECT ?, ?", "postgres") == "SELECT $1, $2"


def test_convert_to_pq_leaves_mysql_alone():
    query = "SELECT a FROM t WHERE a = ? AND b = ?"
    assert convert_to_pq(query, "mysql") == query


def test_convert_to_pq_many_placeholders():
    query = ",".join("?" for _ in range(12))
    result = convert_to_pq(query, "postgres")
    assert "?" not in result
    assert result.split(",")[-1] == "$12"


def test_rand_int_bounds(rng):
    values = {rand_int(rng, 3, 7) for _ in range(500)}
    assert values == set(range(3, 8))


def test_rand_int_degenerate(rng):
    assert rand_int(rng, 5, 5) == 5


def test_rand_int_empty_range(rng):
    with pytest.raises(ValueError):
        rand_int(rng, 5, 3)


def test_rand_chars_lengths_and_alphabet(rng):
    for _ in range(200):
        s = rand_chars(rng, 10, 20)
        assert 10 <= len(s) <= 20
        assert set(s) <= set(CHARACTERS)


def test_rand_letters_and_numbers(rng):
    letters = rand_letters(rng, 24, 24)
    digits = rand_numbers(rng, 16, 16)
    assert len(letters) == 24 and set(letters) <= set(LETTERS)
    assert len(digits) == 16 and set(digits) <= set(NUMBERS)


def test_rand_zip_shape(rng):
    for _ in range(50):
        z = rand_zip(rng)
        assert len(z) == 9
        assert z.endswith("11111")
        assert z.isdigit()


def test_rand_state_shape(rng):
    state = rand_state(rng)
    assert len(state) == 2 and set(state) <= set(LETTERS)


def test_rand_tax_range(rng):
    for _ in range(200):
        assert 0 <= rand_tax(rng) <= 2000 / 10000


def test_rand_original_string(rng):
    samples = [rand_original_string(rng) for _ in range(1000)]
    assert all(26 <= len(s) <= 50 for s in samples)
    with_original = [s for s in samples if ORIGINAL_STRING in s]
    assert 0 < len(with_original) < len(samples)
    assert all(not s.endswith(ORIGINAL_STRING) or s.count(ORIGINAL_STRING) > 1
               for s in with_original)


def test_c_last_syllables_pinned():
    assert rand_c_last_syllables(0) == "BARBARBAR"
    assert rand_c_last_syllables(999) == "EINGEINGEING"


def test_c_last_syllables_distinct_and_tokenised():
    names = [rand_c_last_syllables(n) for n in range(1000)]
    assert len(set(names)) == 1000
    for name in names:
        assert name.startswith(C_LAST_TOKENS)
        assert name.endswith(C_LAST_TOKENS)


def test_c_last_syllables_out_of_range():
    with pytest.raises(ValueError):
        rand_c_last_syllables(1000)
    with pytest.raises(ValueError):
        rand_c_last_syllables(-1)


def test_rand_c_last_is_a_valid_name(rng):
    valid = {rand_c_last_syllables(n) for n in range(1000)}
    assert all(rand_c_last(rng) in valid for _ in range(200))


def test_rand_customer_id_range(rng):
    ids = [rand_customer_id(rng) for _ in range(2000)]
    assert min(ids) >= 1 and max(ids) <= 3000


def test_rand_item_id_range(rng):
    ids = [rand_item_id(rng) for _ in range(2000)]
    assert min(ids) >= 1 and max(ids) <= 100000


def test_generators_are_deterministic_for_a_seed():
    a, b = random.Random(99), random.Random(99)
    assert [rand_chars(a, 5, 9) for _ in range(5)] == [rand_chars(b, 5, 9) for _ in range(5)]
    assert rand_customer_id(a) == rand_customer_id(b)