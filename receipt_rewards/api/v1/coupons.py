"""Coupon catalog and redemption endpoints"""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request

from receipt_rewards.api.dependencies import get_engine, get_repository, get_request_id
from receipt_rewards.api.v1.rewards import badge_schemas
from receipt_rewards.api.v1.schemas import CouponSchema, RedeemResponse
from receipt_rewards.domain.engine import RewardEngine
from receipt_rewards.domain.exceptions import (
    CouponAlreadyRedeemedError,
    CouponExpiredError,
    CouponNotFoundError,
    InsufficientFundsError,
)
from receipt_rewards.domain.money import format_euros
from receipt_rewards.infrastructure.observability.metrics import coupon_redemption_counter
from receipt_rewards.infrastructure.repositories import AccountRepository

router = APIRouter()


@router.get("/coupons", response_model=List[CouponSchema])
def list_coupons(engine: RewardEngine = Depends(get_engine)):
    """Coupons in the store catalog that have not expired"""
    now = engine.clock()
    return [
        CouponSchema(
            id=c.id,
            store_name=c.store_name,
            title=c.title,
            description=c.description,
            discount_text=c.discount_text,
            price_cents=c.price_cents,
            price_formatted=format_euros(c.price_cents),
            expires_at=c.expires_at,
        )
        for c in engine.config.coupons
        if c.expires_at > now
    ]


@router.post("/users/{user_id}/coupons/{coupon_id}/redeem", response_model=RedeemResponse)
def redeem_coupon(
    user_id: str,
    coupon_id: str,
    request: Request,
    engine: RewardEngine = Depends(get_engine),
    accounts: AccountRepository = Depends(get_repository),
):
    """
    Buy a coupon with wallet balance.

    Errors:
    - 404 unknown coupon
    - 402 insufficient balance
    - 409 already redeemed or expired
    """
    request_id = get_request_id(request)

    with accounts.session(user_id) as account:
        try:
            outcome = engine.redeem_coupon(account, coupon_id)
        except CouponNotFoundError:
            coupon_redemption_counter.labels(outcome="not_found").inc()
            raise HTTPException(status_code=404, detail="Coupon not found")
        except InsufficientFundsError as e:
            coupon_redemption_counter.labels(outcome="insufficient_funds").inc()
            logging.warning(f"Redemption rejected: {e}", extra={"request_id": request_id, "user_id": user_id})
            raise HTTPException(status_code=402, detail="Insufficient balance")
        except CouponAlreadyRedeemedError as e:
            coupon_redemption_counter.labels(outcome="already_redeemed").inc()
            raise HTTPException(status_code=409, detail=str(e))
        except CouponExpiredError as e:
            coupon_redemption_counter.labels(outcome="expired").inc()
            raise HTTPException(status_code=409, detail=str(e))

        return RedeemResponse(
            coupon_id=outcome.coupon.coupon_id,
            qr_payload=outcome.coupon.qr_payload,
            redeemed_at=outcome.coupon.redeemed_at,
            balance_cents=account.wallet.balance_cents,
            badges_unlocked=badge_schemas(outcome.badges_unlocked, account),
        )
