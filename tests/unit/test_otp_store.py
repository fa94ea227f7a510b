"""Tests for one-time code storage."""

from datetime import timedelta
from unittest.mock import patch

import pytest

from salon_booking.core.enums import ConfirmationStatus, VerificationMethod, VerificationOutcome
from salon_booking.services.otp.models import OTPEntry, normalize_contact, otp_key
from salon_booking.services.otp.store import OTPStore, generate_code

SMS = VerificationMethod.SMS
EMAIL = VerificationMethod.EMAIL
TELEGRAM = VerificationMethod.TELEGRAM


@pytest.fixture
def otp_store(backend, clock):
    return OTPStore(backend, ttl_minutes=10, code_length=6, clock=clock)


def test_generate_code_is_zero_padded():
    with patch("salon_booking.services.otp.store.secrets.randbelow", return_value=42):
        assert generate_code(6) == "000042"
    assert len(generate_code(4)) == 4
    assert generate_code(8).isdigit()


def test_contact_normalization():
    assert normalize_contact(EMAIL, " Anna@Example.COM ") == "anna@example.com"
    assert normalize_contact(SMS, "+49 (170) 123-45") == "+4917012345"
    assert normalize_contact(TELEGRAM, " 12345 ") == "12345"
    assert otp_key(SMS, "+49 170", "drf_1") == "otp:sms:+49170:drf_1"


class TestOTPStore:
    @pytest.mark.asyncio
    async def test_save_generates_code(self, otp_store, clock):
        entry = await otp_store.save(SMS, "+4917012345", "drf_1")
        assert len(entry.code) == 6
        assert (entry.expires_at - clock.now).total_seconds() == 600
        assert (await otp_store.get(SMS, "+4917012345", "drf_1")).code == entry.code

    @pytest.mark.asyncio
    async def test_keys_are_per_draft_and_method(self, otp_store):
        await otp_store.save(SMS, "+4917012345", "drf_1", code="111111")
        assert await otp_store.get(SMS, "+4917012345", "drf_2") is None
        assert await otp_store.get(TELEGRAM, "+4917012345", "drf_1") is None

    @pytest.mark.asyncio
    async def test_equivalent_contacts_share_an_entry(self, otp_store):
        await otp_store.save(EMAIL, "Anna@Example.com", "drf_1", code="123456")
        assert await otp_store.verify(EMAIL, "anna@example.com", "drf_1", "123456") == (
            VerificationOutcome.OK
        )

    @pytest.mark.asyncio
    async def test_resave_replaces_code(self, otp_store):
        await otp_store.save(SMS, "+491", "drf_1", code="111111")
        await otp_store.save(SMS, "+491", "drf_1", code="222222")
        assert await otp_store.verify(SMS, "+491", "drf_1", "111111") == VerificationOutcome.MISMATCH
        assert await otp_store.verify(SMS, "+491", "drf_1", "222222") == VerificationOutcome.OK

    @pytest.mark.asyncio
    async def test_verify_outcomes(self, otp_store, clock):
        await otp_store.save(SMS, "+491", "drf_1", code="123456")
        assert await otp_store.verify(SMS, "+491", "drf_1", "654321") == VerificationOutcome.MISMATCH
        assert await otp_store.verify(SMS, "+491", "drf_1", " 123456 ") == VerificationOutcome.OK
        clock.advance(minutes=10, microseconds=1)
        assert await otp_store.verify(SMS, "+491", "drf_1", "123456") == VerificationOutcome.EXPIRED

    @pytest.mark.asyncio
    async def test_verify_does_not_consume(self, otp_store):
        await otp_store.save(SMS, "+491", "drf_1", code="123456")
        await otp_store.verify(SMS, "+491", "drf_1", "123456")
        assert await otp_store.get(SMS, "+491", "drf_1") is not None

    @pytest.mark.asyncio
    async def test_expired_entry_is_deleted_on_read(self, otp_store, backend, clock):
        await otp_store.save(SMS, "+491", "drf_1", ttl_minutes=1)
        clock.advance(minutes=2)
        assert await otp_store.get(SMS, "+491", "drf_1") is None
        assert len(backend) == 0

    @pytest.mark.asyncio
    async def test_confirm_and_poll(self, otp_store, clock):
        await otp_store.save(TELEGRAM, "777", "drf_1")
        assert await otp_store.is_confirmed(TELEGRAM, "777", "drf_1") == ConfirmationStatus.PENDING

        assert await otp_store.confirm(TELEGRAM, "777", "drf_1", actor="tg:42") is True
        assert await otp_store.is_confirmed(TELEGRAM, "777", "drf_1") == ConfirmationStatus.CONFIRMED

        entry = await otp_store.get(TELEGRAM, "777", "drf_1")
        assert entry.actor == "tg:42"
        assert entry.confirmed_at == clock.now

    @pytest.mark.asyncio
    async def test_confirm_keeps_original_expiry(self, otp_store, clock):
        saved = await otp_store.save(TELEGRAM, "777", "drf_1")
        clock.advance(minutes=4)
        await otp_store.confirm(TELEGRAM, "777", "drf_1", actor="tg:42")
        assert (await otp_store.get(TELEGRAM, "777", "drf_1")).expires_at == saved.expires_at
        clock.advance(minutes=6, microseconds=1)
        assert await otp_store.is_confirmed(TELEGRAM, "777", "drf_1") == ConfirmationStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_confirm_without_entry(self, otp_store):
        assert await otp_store.confirm(TELEGRAM, "777", "drf_1", actor="tg:42") is False
        assert await otp_store.is_confirmed(TELEGRAM, "777", "drf_1") == ConfirmationStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_delete_by_key(self, otp_store):
        await otp_store.save(SMS, "+491", "drf_1")
        assert await otp_store.delete_key(otp_key(SMS, "+491", "drf_1")) is True
        assert await otp_store.get(SMS, "+491", "drf_1") is None
        assert await otp_store.delete(SMS, "+491", "drf_1") is False


def test_entry_lives_through_its_expiry_instant(clock):
    entry = OTPEntry(code="1", expires_at=clock.now)
    assert not entry.is_expired(clock.now)
    assert entry.is_expired(clock.now + timedelta(microseconds=1))


@pytest.mark.asyncio
async def test_code_verifies_at_expiry_instant(otp_store, clock):
    saved = await otp_store.save(SMS, "+491", "drf_1", code="123456")
    clock.now = saved.expires_at
    assert await otp_store.verify(SMS, "+491", "drf_1", "123456") == VerificationOutcome.OK
    clock.advance(microseconds=1)
    assert await otp_store.verify(SMS, "+491", "drf_1", "123456") == VerificationOutcome.EXPIRED
