from todos.security import hash_password, verify_password


def test_hash_and_verify():
    password_hash = hash_password("secret")
    assert password_hash != "secret"
    assert verify_password("secret", password_hash) is True
    assert verify_password("other", password_hash) is False


def test_malformed_hash():
    assert verify_password("secret", "plain-text") is False
