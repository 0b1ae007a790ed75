import logging
from typing import List, Optional, Tuple

from motor.motor_asyncio import AsyncIOMotorDatabase

from app.core.errors import NotFoundError
from app.db.session import start_transaction
from app.models.group import Group, Participant
from app.repositories.group_repo import GroupRepository
from app.schemas.group import GroupCreate
from app.utils.ids import require_object_id
from app.utils.participant_validation import clean_participant_names

logger = logging.getLogger(__name__)


class GroupService:
    def __init__(self, db: AsyncIOMotorDatabase, group_repo: Optional[GroupRepository] = None):
        self.db = db
        self.group_repo = group_repo or GroupRepository(db)

    async def create_group(self, group_in: GroupCreate) -> Tuple[Group, List[Participant]]:
        """Create a group with its initial participants. A new group has no debts."""
        names = clean_participant_names(group_in.participant_names)

        group = Group(name=group_in.name, currency=group_in.currency.upper())
        participants = [Participant(name=name, group_id=group.id) for name in names]

        async with start_transaction(self.db) as session:
            await self.group_repo.create_group(group, participants, session=session)

        logger.info("Group %s created with %d participants", group.id, len(participants))
        return group, participants

    async def get_group(self, group_id: str) -> Tuple[Group, List[Participant]]:
        oid = require_object_id(group_id, "Group")
        group = await self.group_repo.get_group(oid)
        if group is None:
            raise NotFoundError(f"Group {group_id} not found")
        return group, await self.group_repo.list_participants(oid)
