from kanime.poster_engine.cache_key import ALPHABET, KEY_LENGTH, is_cache_key, new_cache_key


def test_key_shape():
    key = new_cache_key()
    assert len(key) == KEY_LENGTH
    assert set(key) <= set(ALPHABET)
    assert is_cache_key(key)


def test_alphabet_has_no_ambiguous_characters():
    assert not set("0Oo1lI") & set(ALPHABET)


def test_keys_differ():
    assert len({new_cache_key() for _ in range(200)}) == 200


def test_unsafe_keys_rejected():
    for bad in ("", "../etc", "a/b", "key.webp", "x" * 65, None):
        assert not is_cache_key(bad)
