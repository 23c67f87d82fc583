import pytest

from anistream.core.security import compare_passwords, generate_session_token, hash_password, hash_session_token


def test_hash_format_is_hex_digest_dot_hex_salt():
    stored = hash_password("hunter22")
    digest, salt = stored.split(".")
    assert len(digest) == 128  # 64-byte scrypt output
    assert len(salt) == 32  # 16-byte salt
    int(digest, 16)
    int(salt, 16)


@pytest.mark.parametrize("password", ["hunter22", "pässwörd", "x" * 200, " spaced out "])
def test_compare_accepts_the_right_password(password):
    assert compare_passwords(password, hash_password(password)) is True


def test_compare_rejects_a_different_password():
    assert compare_passwords("hunter23", hash_password("hunter22")) is False


def test_same_password_hashes_differently():
    assert hash_password("hunter22") != hash_password("hunter22")


@pytest.mark.parametrize("stored", ["", "no-separator", "abc.", ".deadbeef", "zz" * 64 + ".00ff"])
def test_malformed_stored_value_fails_without_raising(stored):
    assert compare_passwords("whatever", stored) is False


def test_session_tokens_are_random_and_hashed():
    a, b = generate_session_token(), generate_session_token()
    assert a != b
    assert len(hash_session_token(a)) == 64
    assert hash_session_token(a) == hash_session_token(a)
