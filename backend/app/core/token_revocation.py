"""
Token Revocation System using Redis.

Blacklists JWT tokens on logout and flags every token of a deactivated user.
"""

import logging
import redis.asyncio as redis
from backend.app.core import redis_client as redis_client_module
from backend.app.core.config import settings

logger = logging.getLogger("estate.auth")

# Redis key prefix for blacklisted tokens
TOKEN_BLACKLIST_PREFIX = "blacklist:token:"
USER_TOKENS_PREFIX = "user:tokens:"


def _ttl_seconds() -> int:
    # Tokens expire on their own after this window
    return settings.access_token_expire_minutes * 60


async def revoke_token(token: str, user_id: int) -> bool:
    """
    Revoke a specific JWT token by adding it to the blacklist.

    Args:
        token: The JWT token string to revoke
        user_id: User ID who owns the token

    Returns:
        True if successfully revoked, False otherwise
    """
    client = await redis_client_module.get_redis()
    try:
        await client.setex(f"{TOKEN_BLACKLIST_PREFIX}{token}", _ttl_seconds(), str(user_id))
        return True
    except redis.RedisError as e:
        logger.warning("Error revoking token for user %s: %s", user_id, e)
        return False


async def is_token_revoked(token: str) -> bool:
    """Check if a token has been revoked."""
    client = await redis_client_module.get_redis()
    try:
        exists = await client.exists(f"{TOKEN_BLACKLIST_PREFIX}{token}")
        return exists > 0
    except redis.RedisError as e:
        # Fail open: Redis outage must not lock every user out of the ledger
        logger.warning("Error checking token revocation: %s", e)
        return False


async def revoke_all_user_tokens(user_id: int) -> bool:
    """
    Revoke all active tokens for a specific user.

    Called when a user is deactivated to immediately terminate all sessions.
    """
    client = await redis_client_module.get_redis()
    try:
        await client.setex(f"{USER_TOKENS_PREFIX}{user_id}:revoked", _ttl_seconds(), "1")
        return True
    except redis.RedisError as e:
        logger.warning("Error revoking all tokens for user %s: %s", user_id, e)
        return False


async def are_user_tokens_revoked(user_id: int) -> bool:
    """Check if all tokens for a user have been revoked."""
    client = await redis_client_module.get_redis()
    try:
        exists = await client.exists(f"{USER_TOKENS_PREFIX}{user_id}:revoked")
        return exists > 0
    except redis.RedisError as e:
        logger.warning("Error checking user token revocation: %s", e)
        return False
