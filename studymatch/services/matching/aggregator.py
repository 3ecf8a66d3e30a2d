import asyncio
from collections.abc import Callable
from datetime import datetime

from loguru import logger

from studymatch.models.profile import GroupCharacteristicProfile, utcnow
from studymatch.models.roles import RoleVector
from studymatch.services.directory.base import MembershipDirectory
from studymatch.services.matching.similarity import average_vector, balance_variance
from studymatch.services.stores.base import GroupProfileStore, ProfileStore


class GroupProfileAggregator:
    """
    Maintains the per-group aggregate of member role vectors.

    Design principles:
    - Every update is a full recomputation from the current member set
    - The stored record is replaced wholesale, never patched
    - Members without a characteristic profile are left out of the average
    """

    def __init__(
        self,
        group_store: GroupProfileStore,
        profile_store: ProfileStore,
        membership: MembershipDirectory,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.group_store = group_store
        self.profile_store = profile_store
        self.membership = membership
        self.clock = clock

    async def get_profile(self, group_id: int) -> GroupCharacteristicProfile | None:
        return await self.group_store.get(group_id)

    async def create_initial_profile(self, group_id: int, creator_id: int) -> GroupCharacteristicProfile | None:
        """
        Seed the aggregate of a new group from its creator.

        Returns None (and leaves the stored record alone) when a profile
        already exists, so duplicate deliveries are harmless.
        """
        if await self.group_store.get(group_id) is not None:
            logger.warning(f"Profile already exists for group {group_id}, skipping creation")
            return None

        creator_profile = await self.profile_store.get_profile(creator_id)
        group_profile = GroupCharacteristicProfile(
            group_id=group_id,
            average_role_vector=creator_profile.role_vector if creator_profile else RoleVector.zeros(),
            current_variance=0.0,
            member_count=1 if creator_profile else 0,
            last_updated_at=self.clock(),
        )
        await self.group_store.save(group_profile)
        logger.info(f"Created initial profile for group {group_id} with {group_profile.member_count} members")
        return group_profile

    async def recalculate(self, group_id: int) -> GroupCharacteristicProfile | None:
        """
        Recompute and store the aggregate for one group.

        An empty group (or one whose members have no profiles) yields a
        zeroed aggregate with member_count 0. A group unknown to the
        membership directory is skipped.
        """
        group = await self.membership.get_group(group_id)
        if group is None:
            logger.warning(f"Group {group_id} not found, cannot recalculate profile")
            return None

        member_ids = sorted(group.member_ids)
        profiles = await asyncio.gather(*(self.profile_store.get_profile(uid) for uid in member_ids))
        vectors = [p.role_vector for p in profiles if p is not None]

        if not vectors:
            logger.info(f"Group {group_id} has no members with profiles, storing empty profile")

        average = average_vector(vectors)
        group_profile = GroupCharacteristicProfile(
            group_id=group_id,
            average_role_vector=average,
            current_variance=balance_variance(vectors, average),
            member_count=len(vectors),
            last_updated_at=self.clock(),
        )
        await self.group_store.save(group_profile)
        logger.info(
            f"Recalculated profile for group {group_id} with {group_profile.member_count} members, "
            f"variance: {group_profile.current_variance:.4f}"
        )
        return group_profile

    async def recalculate_all_groups_of(self, user_id: int) -> int:
        """Recalculate every group the user belongs to. Returns how many succeeded."""
        groups = await self.membership.groups_of(user_id)
        logger.info(f"Recalculating profiles for {len(groups)} groups of user {user_id}")

        updated = 0
        for group in groups:
            try:
                if await self.recalculate(group.id) is not None:
                    updated += 1
            except Exception as e:
                # One broken group must not block the others
                logger.exception(f"Failed to recalculate profile for group {group.id}: {e}")
        return updated

    async def delete_profile(self, group_id: int) -> bool:
        deleted = await self.group_store.delete(group_id)
        if deleted:
            logger.info(f"Deleted profile for group {group_id}")
        return deleted
