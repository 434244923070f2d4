"""
Accounts: users, their roles and their profiles.

A user created with a role also receives every role below it, so an admin is
also a lecturer and a student. Updates store roles exactly as given.
"""
import logging
from typing import Iterable, List, Optional

from django.contrib.auth.models import User
from django.db import transaction

from examinations.models import Role, UserProfile
from .keys import is_valid_id, is_valid_username

logger = logging.getLogger(__name__)


def _role_name(role) -> str:
    if isinstance(role, Role):
        role = role.name
    return Role.Name(role)


def expand_roles(roles: Optional[Iterable]) -> List[str]:
    """
    Role names implied by `roles`, highest first.

    No roles gives student only. Unknown names raise ValueError.
    """
    names = {_role_name(role) for role in roles or []}
    if not names:
        return [Role.Name.STUDENT]
    top = min(Role.HIERARCHY.index(name) for name in names)
    return list(Role.HIERARCHY[top:])


class RoleService:

    @classmethod
    def find_by_name(cls, name) -> Optional[Role]:
        if not name:
            return None
        return Role.objects.filter(name=name).first()

    @classmethod
    def get_or_create(cls, name) -> Role:
        role, _ = Role.objects.get_or_create(name=_role_name(name))
        return role

    @classmethod
    def find_all(cls) -> List[Role]:
        return list(Role.objects.all())


class ProfileService:

    @classmethod
    def create_profile(cls, profile: UserProfile) -> UserProfile:
        """Save a profile. A user that already has one gets it overwritten."""
        if profile.pk is None and profile.user_id:
            existing = UserProfile.objects.filter(user_id=profile.user_id).first()
            if existing is not None:
                profile.pk = existing.pk
                profile.created_at = existing.created_at
                profile._state.adding = False
        profile.save()
        return profile

    @classmethod
    def get_all_profiles(cls) -> List[UserProfile]:
        return list(UserProfile.objects.select_related('user', 'intake').prefetch_related('roles'))


class UserService:

    @classmethod
    def exists_by_username(cls, username) -> bool:
        return is_valid_username(username) and User.objects.filter(username=username).exists()

    @classmethod
    def exists_by_email(cls, email) -> bool:
        return bool(email) and User.objects.filter(email__iexact=email).exists()

    @classmethod
    def get_user_by_username(cls, username) -> Optional[User]:
        if not is_valid_username(username):
            return None
        return User.objects.select_related('profile').filter(username=username).first()

    @classmethod
    def find_user_by_id(cls, user_id) -> Optional[User]:
        if not is_valid_id(user_id):
            return None
        return User.objects.select_related('profile').filter(pk=user_id).first()

    @classmethod
    def create_user(
        cls,
        username: str,
        email: str = '',
        password: Optional[str] = None,
        roles: Optional[Iterable] = None,
        intake=None,
        first_name: str = '',
        last_name: str = '',
        image: str = '',
        **extra_fields
    ) -> User:
        """
        Create an account with its profile and expanded roles.
        The password defaults to the username and is always stored hashed.
        """
        with transaction.atomic():
            user = User.objects.create_user(
                username,
                email=email,
                password=password or username,
                first_name=first_name or '',
                last_name=last_name or '',
                **extra_fields
            )
            profile = user.profile
            profile.intake = intake
            profile.image = image or ''
            profile.save()
            role_names = expand_roles(roles)
            profile.roles.set([RoleService.get_or_create(name) for name in role_names])

        logger.info(f"Created user {username} with roles {', '.join(role_names)}")
        return user

    @classmethod
    def update_user(cls, user: Optional[User], roles: Optional[Iterable] = None) -> Optional[User]:
        """Persist user and profile changes. Roles, when given, replace the stored set."""
        if user is None or not is_valid_id(user.pk):
            logger.warning("User update skipped: missing id")
            return None
        if not User.objects.filter(pk=user.pk).exists():
            logger.warning(f"User update skipped: {user.pk} does not exist")
            return None

        with transaction.atomic():
            user.save()
            if roles is not None:
                user.profile.roles.set([RoleService.get_or_create(role) for role in roles])
        return user
