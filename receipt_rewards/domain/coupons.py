"""Coupon redemption against the wallet"""

from datetime import datetime
from typing import List

from receipt_rewards.domain.account import RewardAccount
from receipt_rewards.domain.catalog import RewardConfig
from receipt_rewards.domain.exceptions import (
    CouponAlreadyRedeemedError,
    CouponExpiredError,
    CouponNotFoundError,
    InsufficientFundsError,
)
from receipt_rewards.domain.models import Coupon, OwnedCoupon


def available_coupons(account: RewardAccount, config: RewardConfig, now: datetime) -> List[Coupon]:
    """Catalog coupons the user neither owns nor missed"""
    return [
        c for c in config.coupons
        if c.id not in account.owned_coupons and c.expires_at > now
    ]


def redeem_coupon(
    account: RewardAccount,
    coupon_id: str,
    config: RewardConfig,
    now: datetime,
) -> OwnedCoupon:
    """
    Buy a coupon with wallet balance.

    Checks (catalog, ownership, expiry, balance) all run before the wallet is
    debited; a failure leaves the account unchanged.
    """
    coupon = config.coupon(coupon_id)
    if coupon is None:
        raise CouponNotFoundError(f"Unknown coupon: {coupon_id}")
    if coupon_id in account.owned_coupons:
        raise CouponAlreadyRedeemedError(f"Coupon {coupon_id} already redeemed")
    if coupon.expires_at <= now:
        raise CouponExpiredError(f"Coupon {coupon_id} expired at {coupon.expires_at.isoformat()}")
    if not account.wallet.can_afford(coupon.price_cents):
        raise InsufficientFundsError(account.wallet.balance_cents, coupon.price_cents)

    account.wallet.debit(coupon.price_cents)
    owned = OwnedCoupon(coupon_id=coupon.id, redeemed_at=now, qr_payload=coupon.qr_payload)
    account.owned_coupons[coupon.id] = owned
    return owned
