from loguru import logger

from studymatch.models.events import GroupCreated, GroupDeleted, MemberJoined, MemberLeft, ProfileUpdated
from studymatch.services.events.dispatcher import EventDispatcher
from studymatch.services.matching.aggregator import GroupProfileAggregator


class GroupProfileEventListener:
    """
    Keeps group aggregates in step with membership and profile changes.

    Every handler swallows its own failures: the action that raised the
    event has already succeeded, and the next event repairs the aggregate.
    """

    def __init__(self, aggregator: GroupProfileAggregator):
        self.aggregator = aggregator

    def register(self, dispatcher: EventDispatcher) -> None:
        dispatcher.subscribe(GroupCreated, self.on_group_created)
        dispatcher.subscribe(MemberJoined, self.on_member_joined)
        dispatcher.subscribe(MemberLeft, self.on_member_left)
        dispatcher.subscribe(ProfileUpdated, self.on_profile_updated)
        dispatcher.subscribe(GroupDeleted, self.on_group_deleted)

    async def on_group_created(self, event: GroupCreated) -> None:
        try:
            logger.info(f"Handling group created: group {event.group_id} by user {event.creator_id}")
            await self.aggregator.create_initial_profile(event.group_id, event.creator_id)
        except Exception as e:
            logger.exception(f"Failed to create initial profile for group {event.group_id}: {e}")

    async def on_member_joined(self, event: MemberJoined) -> None:
        try:
            logger.info(f"Handling member joined: user {event.user_id} joined group {event.group_id}")
            await self.aggregator.recalculate(event.group_id)
        except Exception as e:
            logger.exception(f"Failed to recalculate profile for group {event.group_id} after member joined: {e}")

    async def on_member_left(self, event: MemberLeft) -> None:
        try:
            logger.info(f"Handling member left: user {event.user_id} left group {event.group_id}")
            await self.aggregator.recalculate(event.group_id)
        except Exception as e:
            logger.exception(f"Failed to recalculate profile for group {event.group_id} after member left: {e}")

    async def on_profile_updated(self, event: ProfileUpdated) -> None:
        try:
            logger.info(f"Handling profile updated for user {event.user_id}")
            await self.aggregator.recalculate_all_groups_of(event.user_id)
        except Exception as e:
            logger.exception(f"Failed to recalculate group profiles for user {event.user_id}: {e}")

    async def on_group_deleted(self, event: GroupDeleted) -> None:
        try:
            logger.info(f"Handling group deleted: group {event.group_id}")
            await self.aggregator.delete_profile(event.group_id)
        except Exception as e:
            logger.exception(f"Failed to delete profile for group {event.group_id}: {e}")
