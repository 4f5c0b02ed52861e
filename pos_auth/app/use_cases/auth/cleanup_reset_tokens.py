import logging
from datetime import timedelta

from pos_auth.app.services.clock import Clock, utcnow
from pos_auth.app.services.unit_of_work import UnitOfWork

logger = logging.getLogger(__name__)

USED_TOKEN_RETENTION = timedelta(hours=24)


async def cleanup_expired_tokens(uow: UnitOfWork, clock: Clock = utcnow) -> int:
    """Delete expired tokens and tokens used more than a day ago. Returns count."""
    now = clock()
    async with uow:
        removed = await uow.password_reset_tokens.delete_expired(
            now, now - USED_TOKEN_RETENTION
        )
        await uow.commit()

    if removed:
        logger.info(f"Removed {removed} stale password reset token(s)")
    return removed
