from atlasstudio.services.password_service import PasswordService


def test_hash_verifies_and_hides_plaintext():
    service = PasswordService(rounds=4)

    hashed = service.hash("pw")

    assert hashed != "pw"
    assert service.verify("pw", hashed)
    assert not service.verify("pw2", hashed)


def test_missing_hash_never_verifies():
    service = PasswordService(rounds=4)

    assert not service.verify("pw", None)
    assert not service.verify("pw", "")


def test_password_over_72_bytes_is_too_long():
    assert not PasswordService.is_too_long("x" * 72)
    assert PasswordService.is_too_long("x" * 73)
    # 36 two-byte characters fill the limit exactly
    assert not PasswordService.is_too_long("é" * 36)
    assert PasswordService.is_too_long("é" * 37)


def test_over_long_password_never_verifies_against_its_prefix():
    service = PasswordService(rounds=4)
    hashed = service.hash("x" * 72)

    assert service.verify("x" * 72, hashed)
    assert not service.verify("x" * 72 + "WRONG", hashed)
