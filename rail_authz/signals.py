"""
Change notifications used for cache invalidation.

Providers send these signals after a successful write; the permission
coordinator listens and clears the derived results the write made stale.
Model signal hooks translate ORM saves/deletes into the same notifications.
"""

import logging

from django.db.models.signals import post_delete, post_save
from django.dispatch import Signal

logger = logging.getLogger(__name__)

# kwargs: role_id
role_hierarchy_changed = Signal()
# kwargs: role_id
role_permissions_changed = Signal()
# kwargs: resource_type, resource_id
resource_relationship_changed = Signal()

_signals_connected = False


def connect_model_signals() -> None:
    global _signals_connected
    if _signals_connected:
        return

    from .models import Role, ResourceRelationship

    post_save.connect(_role_saved, sender=Role, dispatch_uid="rail_authz.role_saved")
    post_delete.connect(_role_deleted, sender=Role, dispatch_uid="rail_authz.role_deleted")
    post_save.connect(
        _relationship_changed,
        sender=ResourceRelationship,
        dispatch_uid="rail_authz.relationship_saved",
    )
    post_delete.connect(
        _relationship_changed,
        sender=ResourceRelationship,
        dispatch_uid="rail_authz.relationship_deleted",
    )
    _signals_connected = True
    logger.debug("Authorization model signals connected")


def _role_saved(sender, instance, **kwargs) -> None:
    role_permissions_changed.send(sender=sender, role_id=instance.role_id)
    role_hierarchy_changed.send(sender=sender, role_id=instance.role_id)


def _role_deleted(sender, instance, **kwargs) -> None:
    role_hierarchy_changed.send(sender=sender, role_id=instance.role_id)


def _relationship_changed(sender, instance, **kwargs) -> None:
    resource_relationship_changed.send(
        sender=sender,
        resource_type=instance.child_type,
        resource_id=instance.child_id,
    )
