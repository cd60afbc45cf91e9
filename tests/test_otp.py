# tests/test_otp.py
from datetime import timedelta

from account_service.models import Account
from account_service.otp import OtpService


def test_generate_sets_code_and_expiry(clock):
    otp = OtpService(clock=clock)
    account = Account()

    code = otp.generate(account)
    assert len(code) == 6 and code.isdigit()
    assert account.otp_code == code
    assert account.otp_expires == clock.now + timedelta(minutes=10)


def test_generate_respects_length_and_lifetime(clock):
    otp = OtpService(expire_minutes=3, length=8, clock=clock)
    account = Account()

    code = otp.generate(account)
    assert len(code) == 8
    assert account.otp_expires - clock.now == timedelta(minutes=3)


def test_verify_requires_exact_match(clock):
    otp = OtpService(clock=clock)
    account = Account()
    code = otp.generate(account)

    assert otp.verify(account, code)
    assert not otp.verify(account, code[:-1])
    assert not otp.verify(account, "x" + code[1:])
    assert not otp.verify(account, None)
    assert not otp.verify(account, f"  {code}\n")
    assert not otp.verify(account, code + " ")
    assert not otp.verify(account, int(code))


def test_verify_at_and_after_expiry(clock):
    otp = OtpService(clock=clock)
    account = Account()
    code = otp.generate(account)

    clock.advance(10)
    assert otp.verify(account, code)

    clock.now += timedelta(seconds=1)
    assert not otp.verify(account, code)
    # still closed on retry
    assert not otp.verify(account, code)


def test_verify_without_code(clock):
    otp = OtpService(clock=clock)
    assert not otp.verify(Account(), "123456")


def test_consume_clears_code_and_marks_verified(clock):
    otp = OtpService(clock=clock)
    account = Account(is_verified=False)
    code = otp.generate(account)

    otp.consume(account)
    assert account.is_verified is True
    assert account.otp_code is None
    assert account.otp_expires is None
    assert not otp.verify(account, code)


def test_codes_are_not_sequential(clock):
    otp = OtpService(clock=clock)
    codes = {otp.generate(Account()) for _ in range(50)}
    assert len(codes) > 40
