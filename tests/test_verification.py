import pytest

from cash_report.verification import TEST_CODE, CodeStore, EmailVerifier, VerificationError


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def verifier(clock):
    return EmailVerifier(CodeStore(ttl=600, clock=clock))


def test_issue_and_verify_once(verifier):
    code = verifier.issue("Owner@Example.org")
    assert len(code) == 6 and code.isdigit()

    verifier.verify("owner@example.org", code)
    with pytest.raises(VerificationError, match="No verification code"):
        verifier.verify("owner@example.org", code)


def test_test_address_gets_fixed_code(verifier):
    assert verifier.issue("test@example.com") == TEST_CODE


def test_rejects_bad_email(verifier):
    with pytest.raises(VerificationError, match="Invalid email"):
        verifier.issue("not-an-email")


def test_wrong_code_keeps_entry(verifier):
    verifier.issue("test@example.com")
    with pytest.raises(VerificationError, match="Invalid verification code"):
        verifier.verify("test@example.com", "000000")
    verifier.verify("test@example.com", TEST_CODE)


def test_expired_code_is_deleted(verifier, clock):
    verifier.issue("test@example.com")
    clock.now += 601
    with pytest.raises(VerificationError, match="expired"):
        verifier.verify("test@example.com", TEST_CODE)
    assert verifier.store.get("test@example.com") is None


def test_purge_expired(clock):
    store = CodeStore(ttl=10, clock=clock)
    store.set("a", "1")
    clock.now += 5
    store.set("b", "2")
    clock.now += 6
    assert store.purge_expired() == 1
    assert store.get("a") is None
    assert store.get("b") is not None
