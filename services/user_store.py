import logging
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class UserStore(ABC):
    """Where reachable LINE user ids live between requests.

    Deployments that want to push messages later plug in their own
    implementation (database table, key-value store, ...). ``put`` is called
    on follow and ``delete`` on unfollow; both may be called repeatedly for
    the same id and should treat that as a no-op.
    """

    @abstractmethod
    async def put(self, user_id: str) -> None:
        pass

    @abstractmethod
    async def delete(self, user_id: str) -> None:
        pass


class NullUserStore(UserStore):

    async def put(self, user_id: str) -> None:
        logger.info("No user store configured, follower not persisted", extra={"line_user_id": user_id})

    async def delete(self, user_id: str) -> None:
        logger.info("No user store configured, unfollow not persisted", extra={"line_user_id": user_id})
