"""
Audit and repair of the Post/Group pairing.

Writes made through ``services.posts`` keep a post and its group in step, but
rows written before that (or edited by hand) can drift. The post is treated
as the source of truth: its creator and member list win.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from sqlmodel import Session, select

from ..core.database import write_transaction
from ..models.base import utc_now
from ..models.group import Group
from ..models.membership import GroupMember, PostMember
from ..models.post import Post
from .posts import group_member_ids, group_name_for, post_member_ids

logger = logging.getLogger(__name__)


@dataclass
class Drift:
    """Everything wrong with one post's pairing."""

    post_id: UUID
    title: str
    problems: List[str] = field(default_factory=list)


def _find_group(db: Session, post: Post) -> Optional[Group]:
    """
    The group paired with ``post``.

    The group's back-link wins over ``post.group_id``: a forward reference to
    a group that belongs to another post is not followed.
    """
    group = db.exec(select(Group).where(Group.post_id == post.id)).first()
    if group or post.group_id is None:
        return group

    group = db.exec(select(Group).where(Group.id == post.group_id)).first()
    if group is None:
        return None

    owner = db.exec(select(Post).where(Post.id == group.post_id)).first()
    if owner is not None and owner.id != post.id:
        logger.warning(f"Post {post.id} references group {group.id} of post {owner.id}")
        return None
    return group


def check_post(db: Session, post: Post) -> Drift:
    drift = Drift(post_id=post.id, title=post.title)
    members = post_member_ids(db, post.id)

    if post.created_by not in members:
        drift.problems.append("creator is not a member")

    group = _find_group(db, post)
    if group is None:
        drift.problems.append("missing group")
        return drift

    if post.group_id != group.id:
        drift.problems.append("post does not reference its group")
    if group.post_id != post.id:
        drift.problems.append("group does not reference its post")
    if group.admin_id != post.created_by:
        drift.problems.append("group admin differs from post creator")
    if set(group_member_ids(db, group.id)) != set(members):
        drift.problems.append("member lists differ")

    return drift


def find_drift(db: Session) -> List[Drift]:
    """Every post whose pairing with its group is broken."""
    drifts = []
    for post in db.exec(select(Post)).all():
        drift = check_post(db, post)
        if drift.problems:
            drifts.append(drift)
    return drifts


def repair_post(db: Session, post: Post) -> Group:
    """Bring a post's group back in line with the post."""
    post_id = post.id
    group = _find_group(db, post)

    with write_transaction(db, "repair post"):
        members = post_member_ids(db, post.id)
        if post.created_by not in members:
            db.add(PostMember(post_id=post.id, user_id=post.created_by))
            members.append(post.created_by)

        if group is None:
            group = Group(post_id=post.id, group_name=group_name_for(post.title), admin_id=post.created_by)
            db.add(group)
            db.flush()
            logger.info(f"Created missing group {group.id} for post {post.id}")
        else:
            group.post_id = post.id
            group.admin_id = post.created_by
            group.group_name = group_name_for(post.title)
            group.updated_at = utc_now()
            db.add(group)

        post.group_id = group.id
        db.add(post)

        current = group_member_ids(db, group.id)
        for row in db.exec(select(GroupMember).where(GroupMember.group_id == group.id)).all():
            if row.user_id not in members:
                db.delete(row)
        for user_id in members:
            if user_id not in current:
                db.add(GroupMember(group_id=group.id, user_id=user_id))

    db.refresh(group)
    logger.info(f"Repaired post {post_id}")
    return group


def repair_all(db: Session, dry_run: bool = False) -> List[Drift]:
    """Audit every post and repair the broken ones unless ``dry_run``."""
    drifts = find_drift(db)
    if dry_run:
        return drifts

    for drift in drifts:
        post = db.exec(select(Post).where(Post.id == drift.post_id)).first()
        repair_post(db, post)
    return drifts
