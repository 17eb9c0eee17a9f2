import pytest

from src.Services.crypto import PassphraseCipher


def test_encrypt_decrypt():
    cipher = PassphraseCipher("s3cret")
    token = cipher.encrypt("passw0rd", "jan:meteo1")

    assert token != "passw0rd"
    assert cipher.decrypt(token, "jan:meteo1") == "passw0rd"


def test_key_depends_on_device_name():
    cipher = PassphraseCipher("s3cret")
    token = cipher.encrypt("passw0rd", "jan:meteo1")

    with pytest.raises(ValueError):
        cipher.decrypt(token, "jan:meteo2")


def test_key_depends_on_secret():
    token = PassphraseCipher("one").encrypt("passw0rd", "jan:meteo1")

    with pytest.raises(ValueError):
        PassphraseCipher("two").decrypt(token, "jan:meteo1")
