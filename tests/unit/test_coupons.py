"""Unit tests for coupon redemption"""

import pytest
from dataclasses import replace
from datetime import timedelta
from receipt_rewards.domain.coupons import available_coupons, redeem_coupon
from receipt_rewards.domain.exceptions import (
    CouponAlreadyRedeemedError,
    CouponExpiredError,
    CouponNotFoundError,
    InsufficientFundsError,
)

from conftest import NOW


def test_redeem_debits_price_and_stores_coupon(account, config):
    account.wallet.credit(500)

    owned = redeem_coupon(account, "c1", config, NOW)

    assert account.wallet.balance_cents == 350
    assert owned.coupon_id == "c1"
    assert owned.qr_payload == "LIDL-FRESH-10PCT"
    assert owned.redeemed_at == NOW
    assert "c1" in account.owned_coupons


def test_redeem_exact_balance(account, config):
    account.wallet.credit(50)

    redeem_coupon(account, "c4", config, NOW)

    assert account.wallet.balance_cents == 0


def test_redeem_insufficient_funds_changes_nothing(account, config):
    account.wallet.credit(199)

    with pytest.raises(InsufficientFundsError) as exc_info:
        redeem_coupon(account, "c3", config, NOW)

    assert exc_info.value.requested_cents == 200
    assert account.wallet.balance_cents == 199
    assert account.owned_coupons == {}


def test_redeem_unknown_coupon(account, config):
    account.wallet.credit(1000)

    with pytest.raises(CouponNotFoundError):
        redeem_coupon(account, "nope", config, NOW)

    assert account.wallet.balance_cents == 1000


def test_redeem_twice_rejected(account, config):
    account.wallet.credit(1000)
    redeem_coupon(account, "c2", config, NOW)

    with pytest.raises(CouponAlreadyRedeemedError):
        redeem_coupon(account, "c2", config, NOW)

    assert account.wallet.balance_cents == 900


def test_redeem_expired_coupon_rejected(account, config):
    account.wallet.credit(1000)
    c6 = config.coupon("c6")

    with pytest.raises(CouponExpiredError):
        redeem_coupon(account, "c6", config, c6.expires_at)

    assert account.wallet.balance_cents == 1000


def test_redeem_just_before_expiry(account, config):
    account.wallet.credit(1000)
    c6 = config.coupon("c6")

    redeem_coupon(account, "c6", config, c6.expires_at - timedelta(seconds=1))

    assert account.wallet.balance_cents == 925


def test_available_coupons_hides_owned_and_expired(account, config):
    account.wallet.credit(1000)
    redeem_coupon(account, "c1", config, NOW)

    later = NOW + timedelta(days=8)  # c3 (7 days) and c6 (3 days) have lapsed
    ids = [c.id for c in available_coupons(account, config, later)]

    assert ids == ["c2", "c4", "c5"]


def test_free_coupon_with_empty_wallet(account, config):
    free = replace(config.coupons[0], id="free", price_cents=0)
    cfg = replace(config, coupons=config.coupons + (free,))

    redeem_coupon(account, "free", cfg, NOW)

    assert account.wallet.balance_cents == 0
    assert "free" in account.owned_coupons
