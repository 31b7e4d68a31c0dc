from __future__ import annotations

import logging
from collections.abc import Iterable

import redis

from flavor_quest.catalog.registry import load_default_catalog
from flavor_quest.config import EngineConfig
from flavor_quest.core.events import Listener
from flavor_quest.countdown import Scheduler
from flavor_quest.engine import GameEngine
from flavor_quest.infra.redis_client import create_redis
from flavor_quest.store import RedisProgressStore

logger = logging.getLogger(__name__)


def create_store(config: EngineConfig, *, r: redis.Redis | None = None) -> RedisProgressStore:
    return RedisProgressStore(
        r=r if r is not None else create_redis(),
        player_id=config.player_id,
        key_prefix=config.key_prefix,
        leaderboard_size=config.leaderboard_size,
    )


def load_default_engine(
    *,
    r: redis.Redis | None = None,
    scheduler: Scheduler | None = None,
    listeners: Iterable[Listener] = (),
) -> GameEngine:
    """Engine wired from the environment: REDIS_URL, FLAVOR_QUEST_* settings and the assets root."""

    config = EngineConfig.from_env()
    catalog = load_default_catalog()
    engine = GameEngine(
        catalog=catalog,
        store=create_store(config, r=r),
        scheduler=scheduler,
        config=config,
        listeners=listeners,
    )
    logger.info("Engine ready for %s (%s ingredients)", config.player_id, len(catalog.ingredients))
    return engine
