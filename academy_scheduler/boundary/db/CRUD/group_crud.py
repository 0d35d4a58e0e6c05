"""
Group reference CRUD operations.

Read access to the collaborator-owned groups table. Creation is only used
by seeding scripts and tests; group administration owns real writes.

Dependencies: sqlalchemy, academy_scheduler.boundary.db.models
System role: Group lookups for the scheduler
"""

from academy_scheduler.boundary.db.CRUD.base_crud import BaseCRUD
from academy_scheduler.boundary.db.models.group_model import GroupModel


class GroupCRUD(BaseCRUD[GroupModel]):
    """CRUD operations for GroupModel."""

    def __init__(self) -> None:
        """Initialize GroupCRUD with GroupModel."""
        super().__init__(GroupModel)


group_crud = GroupCRUD()
