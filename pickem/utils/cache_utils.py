"""
Cache utilities for League Pick'em application
Provides caching decorators and standings cache helpers
"""

import functools

from flask import current_app, request
from sqlalchemy import event

from pickem import cache, db
from pickem.models.game import MAX_WEEK

STANDINGS_STALE_FLAG = "standings_stale"


def make_cache_key(*args, **kwargs):
    """Generate a cache key from request path, query string and arguments"""
    path = request.path
    query = request.query_string.decode("utf-8")
    args_str = "_".join(str(arg) for arg in args)
    kwargs_str = "_".join(f"{k}_{v}" for k, v in sorted(kwargs.items()))
    return f"{path}_{query}_{args_str}_{kwargs_str}".replace("/", "_")


def cached_route(timeout=300, key_prefix="view"):
    """
    Decorator for caching route responses

    Args:
        timeout: Cache timeout in seconds (default 5 minutes)
        key_prefix: Prefix for cache key
    """

    def decorator(f):
        @functools.wraps(f)
        def wrapped(*args, **kwargs):
            cache_key = f"{key_prefix}_{make_cache_key(*args, **kwargs)}"

            result = cache.get(cache_key)
            if result is not None:
                current_app.logger.debug(f"Cache hit for key: {cache_key}")
                return result

            result = f(*args, **kwargs)
            cache.set(cache_key, result, timeout=timeout)
            current_app.logger.debug(f"Cache set for key: {cache_key}")

            return result

        return wrapped

    return decorator


def standings_cache_key(league_id, week=None):
    return f"standings_{league_id}_{week if week is not None else 'season'}"


def get_cached_standings(league, week, compute):
    """
    Return standings for a league from cache, computing them on a miss

    Args:
        league: League instance
        week: optional week filter
        compute: callable(league, week) producing the payload
    """
    cache_key = standings_cache_key(league.id, week)
    payload = cache.get(cache_key)
    if payload is not None:
        current_app.logger.debug(f"Standings cache hit: {cache_key}")
        return payload

    payload = compute(league, week)
    cache.set(
        cache_key,
        payload,
        timeout=current_app.config.get("STANDINGS_CACHE_TIMEOUT", 120),
    )
    return payload


def invalidate_league_standings(league_id):
    """Drop the season and every weekly standings entry for one league"""
    keys = [standings_cache_key(league_id)] + [
        standings_cache_key(league_id, week) for week in range(1, MAX_WEEK + 1)
    ]
    cache.delete_many(*keys)
    current_app.logger.debug(f"Standings cache cleared for league {league_id}")


def invalidate_all_standings():
    """
    Clear cached standings for every league after a game result changes.

    A result can touch any league, and cached game listings embed scores,
    so the whole cache namespace is cleared.
    """
    cache.clear()
    current_app.logger.info("Cache cleared after game result update")


def mark_standings_stale():
    """Clear every cached standings entry once the current transaction commits"""
    db.session.info[STANDINGS_STALE_FLAG] = True


@event.listens_for(db.session, "after_commit")
def clear_stale_standings(session):
    if session.info.pop(STANDINGS_STALE_FLAG, False):
        invalidate_all_standings()


@event.listens_for(db.session, "after_rollback")
def discard_stale_flag(session):
    session.info.pop(STANDINGS_STALE_FLAG, None)
