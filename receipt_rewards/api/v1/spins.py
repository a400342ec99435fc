"""POST /v1/users/{user_id}/spins - reward wheel endpoints"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from receipt_rewards.api.dependencies import get_engine, get_repository, get_request_id
from receipt_rewards.api.v1.rewards import badge_schemas
from receipt_rewards.api.v1.schemas import SpinCompleteResponse, SpinResponse
from receipt_rewards.domain.engine import RewardEngine
from receipt_rewards.domain.exceptions import NoSpinsAvailableError, SpinInProgressError
from receipt_rewards.infrastructure.observability.metrics import spin_rejections_counter
from receipt_rewards.infrastructure.repositories import AccountRepository

router = APIRouter()


@router.post("/users/{user_id}/spins", response_model=SpinResponse)
def spin_wheel(
    user_id: str,
    request: Request,
    engine: RewardEngine = Depends(get_engine),
    accounts: AccountRepository = Depends(get_repository),
):
    """
    Spend one spin token and resolve the prize.

    The prize is credited immediately. rotation_degrees is the absolute wheel
    angle the client animates to; call /spins/complete once it has been shown.
    Until then further spins get 409, unless the spin is older than the reveal
    timeout (SPIN_REVEAL_TIMEOUT_SECONDS), after which the wheel is released.
    """
    request_id = get_request_id(request)

    with accounts.session(user_id) as account:
        try:
            outcome = engine.spin(account)
        except NoSpinsAvailableError as e:
            spin_rejections_counter.labels(reason="no_spins").inc()
            logging.warning(f"Spin rejected: {e}", extra={"request_id": request_id, "user_id": user_id})
            raise HTTPException(status_code=409, detail="No spins available")
        except SpinInProgressError as e:
            spin_rejections_counter.labels(reason="in_progress").inc()
            logging.warning(f"Spin rejected: {e}", extra={"request_id": request_id, "user_id": user_id})
            raise HTTPException(status_code=409, detail="Spin already in progress")

        result = outcome.result
        segment = engine.config.segments[result.segment_index]
        return SpinResponse(
            segment_index=result.segment_index,
            label=segment.label,
            value_euros=result.value_euros,
            is_jackpot=result.is_jackpot,
            rotation_degrees=outcome.rotation_degrees,
            spins_available=account.spin_pool.count,
            balance_cents=account.wallet.balance_cents,
            badges_unlocked=badge_schemas(outcome.badges_unlocked, account),
        )


@router.post("/users/{user_id}/spins/complete", response_model=SpinCompleteResponse)
def complete_spin(
    user_id: str,
    engine: RewardEngine = Depends(get_engine),
    accounts: AccountRepository = Depends(get_repository),
):
    """Reveal finished; the wheel accepts the next spin"""
    with accounts.session(user_id) as account:
        result = engine.complete_spin(account)
        return SpinCompleteResponse(
            segment_index=result.segment_index if result else None,
            state=account.wheel.state.value,
        )
