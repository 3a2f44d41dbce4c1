from task_manager.core.auth.passwords import ALGORITHM, hash_password, verify_password


def test_hash_is_salted_and_verifiable():
    a = hash_password("qwerty", iterations=1000)
    b = hash_password("qwerty", iterations=1000)

    assert a != b
    assert a.startswith(f"{ALGORITHM}$1000$")
    assert "qwerty" not in a
    assert verify_password("qwerty", a)
    assert verify_password("qwerty", b)


def test_wrong_password_rejected():
    digest = hash_password("qwerty", iterations=1000)
    assert not verify_password("qwertz", digest)


def test_fixed_salt_is_deterministic():
    salt = b"0123456789abcdef"
    assert hash_password("pw", iterations=1000, salt=salt) == hash_password("pw", iterations=1000, salt=salt)


def test_malformed_digest_is_rejected_not_raised():
    assert not verify_password("qwerty", "")
    assert not verify_password("qwerty", "plain-text-password")
    assert not verify_password("qwerty", "md5$1$abc$def")
    assert not verify_password("qwerty", "pbkdf2_sha256$notanint$abc$def")
