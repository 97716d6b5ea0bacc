"""Builders for annotation permission descriptors."""

from typing import Literal

from marginalia.models import Permissions

PrivacyLevel = Literal["private", "shared"]


def private_permissions(user_id: str) -> Permissions:
    """Permissions for an annotation only `user_id` can see and change."""
    return Permissions(read=[user_id], update=[user_id], delete=[user_id])


def shared_permissions(user_id: str, group_id: str) -> Permissions:
    """Permissions for an annotation readable by every member of `group_id`."""
    return Permissions(read=[f"group:{group_id}"], update=[user_id], delete=[user_id])


def default_permissions(
    user_id: str, group_id: str, saved_level: PrivacyLevel | str | None
) -> Permissions:
    """Permissions for a new annotation given the user's saved privacy default."""
    if saved_level == "private" and user_id:
        return private_permissions(user_id)
    return shared_permissions(user_id, group_id)
