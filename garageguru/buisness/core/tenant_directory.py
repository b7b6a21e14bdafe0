"""
Tenant Directory
Garage records and the guards that keep every garage's data isolated.

The guards are evaluated on every request against the freshly loaded user;
nothing about an identity's access is cached.
"""

from typing import Iterable
from garageguru import db
from garageguru.data.core.garage import Garage
from garageguru.data.core.user import Role
from garageguru.data.transaction import unit_of_work
from garageguru.exceptions import AccessDenied, GarageNotFound, InsufficientPermissions
from garageguru.logger import get_logger

logger = get_logger("garageguru.buisness.core.tenant_directory")


class TenantDirectory:

    @staticmethod
    def authorize_garage_access(user, garage_id) -> None:
        """super_admin passes everywhere; everyone else only in their own garage"""
        if user.is_super_admin:
            return
        if user.garage_id is None or user.garage_id != garage_id:
            logger.warning(f"User {user.id} denied access to garage {garage_id}")
            raise AccessDenied(garage_id)

    @staticmethod
    def authorize_role(user, allowed_roles: Iterable[Role]) -> None:
        allowed = tuple(allowed_roles)
        if user.role not in allowed:
            logger.warning(f"User {user.id} with role {user.role.value} lacks permission")
            raise InsufficientPermissions(user.role.value, [r.value for r in allowed])

    @staticmethod
    def get_garage(garage_id) -> Garage:
        garage = db.session.get(Garage, garage_id)
        if garage is None:
            raise GarageNotFound(garage_id)
        return garage

    @staticmethod
    def update_garage_profile(garage_id, patch) -> Garage:
        """
        Partial update of the garage profile.

        Args:
            garage_id: Garage to edit
            patch: dict of profile fields; absent keys are left unchanged

        Returns:
            The updated Garage
        """
        garage = TenantDirectory.get_garage(garage_id)
        with unit_of_work("update_garage_profile"):
            changed = garage.apply_patch(patch, Garage.PROFILE_FIELDS)
        logger.info(f"Updated garage {garage_id} fields: {changed}")
        return garage
