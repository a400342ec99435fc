"""FastAPI application factory"""

from datetime import datetime
from random import Random
from typing import Callable, Optional

from fastapi import FastAPI
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from starlette.responses import Response

from receipt_rewards.api.middleware import RequestIDMiddleware, MetricsMiddleware
from receipt_rewards.api.v1 import coupons, rewards, spins
from receipt_rewards.config import settings
from receipt_rewards.domain.catalog import RewardConfig
from receipt_rewards.domain.engine import RewardEngine
from receipt_rewards.infrastructure.config_loader import load_reward_config
from receipt_rewards.infrastructure.observability.listeners import observe_engine_event
from receipt_rewards.infrastructure.observability.logging import setup_logging
from receipt_rewards.infrastructure.repositories import AccountRepository

# Setup structured logging
setup_logging(settings.log_level)


def create_app(
    config: Optional[RewardConfig] = None,
    rng: Optional[Random] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    config, rng and clock default to the settings-driven production values;
    tests inject their own.
    """
    app = FastAPI(
        title="Receipt Rewards",
        description="Wallet, spin wheel, streak and tier engine for receipt scanning",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )

    engine = RewardEngine(
        config=config or load_reward_config(settings),
        rng=rng or Random(settings.rng_seed),
        clock=clock,
    )
    engine.subscribe(observe_engine_event)
    app.state.engine = engine
    app.state.accounts = AccountRepository(engine.open_account)

    # Add middleware (order matters: last added = first executed)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # Health check endpoint
    @app.get("/health")
    def health_check():
        return {"status": "ok", "service": settings.service_name}

    # Prometheus metrics endpoint
    @app.get("/metrics")
    def metrics():
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # Register API routers
    app.include_router(rewards.router, prefix="/v1", tags=["rewards"])
    app.include_router(spins.router, prefix="/v1", tags=["spins"])
    app.include_router(coupons.router, prefix="/v1", tags=["coupons"])

    return app


app = create_app()
