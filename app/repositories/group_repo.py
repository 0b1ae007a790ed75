from typing import List, Optional
from datetime import datetime, timezone
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorDatabase
from bson import ObjectId

from app.models.group import Group, Participant


class GroupRepository:
    """Group and participant database operations."""

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.groups = db["groups"]
        self.participants = db["participants"]

    async def create_group(
        self,
        group: Group,
        participants: List[Participant],
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Group:
        """Insert a group together with its initial participants."""
        await self.groups.insert_one(group.to_document(), session=session)
        if participants:
            await self.participants.insert_many(
                [participant.to_document() for participant in participants],
                session=session
            )
        return group

    async def get_group(
        self, group_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Group]:
        doc = await self.groups.find_one({"_id": group_id}, session=session)
        if doc:
            return Group(**doc)
        return None

    async def list_participants(
        self, group_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> List[Participant]:
        docs = await self.participants.find({"group_id": group_id}, session=session).sort("_id", 1).to_list(None)
        return [Participant(**doc) for doc in docs]

    async def add_participant(
        self, participant: Participant, session: Optional[AsyncIOMotorClientSession] = None
    ) -> Participant:
        await self.participants.insert_one(participant.to_document(), session=session)
        return participant

    async def rename_participant(
        self,
        participant_id: ObjectId,
        name: str,
        session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Participant]:
        """Set the name of a participant. Returns the updated participant or None."""
        result = await self.participants.find_one_and_update(
            {"_id": participant_id},
            {"$set": {"name": name, "updated_at": datetime.now(timezone.utc)}},
            return_document=True,
            session=session
        )
        if result:
            return Participant(**result)
        return None

    async def get_participant(
        self, participant_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> Optional[Participant]:
        doc = await self.participants.find_one({"_id": participant_id}, session=session)
        if doc:
            return Participant(**doc)
        return None

    async def delete_participant(
        self, participant_id: ObjectId, session: Optional[AsyncIOMotorClientSession] = None
    ) -> bool:
        result = await self.participants.delete_one({"_id": participant_id}, session=session)
        return result.deleted_count > 0
