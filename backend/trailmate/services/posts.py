"""
Post/Group lifecycle operations.

Every Post is paired with exactly one Group. The two records share their
membership set and the Post's creator is the Group's admin. All writes that
touch both records happen inside one transaction, so a failure leaves
neither half behind.

Each operation receives the caller's user id explicitly; nothing here reads
request or session state.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlmodel import Session, select

from ..core.config import settings
from ..core.database import write_transaction
from ..core.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..models.base import utc_now
from ..models.group import Group
from ..models.membership import GroupMember, PostMember
from ..models.post import Post
from ..models.user import User

logger = logging.getLogger(__name__)

REQUIRED_POST_FIELDS = ("title", "description", "location")
EDITABLE_POST_FIELDS = REQUIRED_POST_FIELDS + ("image",)

ALREADY_MEMBER = "You are already in this group"


class LeaveOutcome(str, Enum):
    """What happened when a member left a post."""

    LEFT = "left"
    DELETED = "deleted"


@dataclass
class GroupView:
    group: Group
    members: List[UUID] = field(default_factory=list)


@dataclass
class PostView:
    post: Post
    members: List[UUID] = field(default_factory=list)


@dataclass
class PostListing(PostView):
    creator: Optional[User] = None
    group: Optional[GroupView] = None


def group_name_for(title: str) -> str:
    return f"{title}{settings.GROUP_NAME_SUFFIX}"


def post_member_ids(db: Session, post_id: UUID) -> List[UUID]:
    """Members of a post in join order."""
    rows = db.exec(
        select(PostMember).where(PostMember.post_id == post_id).order_by(PostMember.id)
    ).all()
    return [row.user_id for row in rows]


def group_member_ids(db: Session, group_id: UUID) -> List[UUID]:
    """Members of a group in join order."""
    rows = db.exec(
        select(GroupMember).where(GroupMember.group_id == group_id).order_by(GroupMember.id)
    ).all()
    return [row.user_id for row in rows]


def get_post(db: Session, post_id: UUID) -> Post:
    post = db.exec(select(Post).where(Post.id == post_id)).first()
    if not post:
        raise NotFoundError("Post not found")
    return post


def find_paired_group(db: Session, post: Post) -> Optional[Group]:
    if post.group_id is None:
        return None
    return db.exec(select(Group).where(Group.id == post.group_id)).first()


def create_post(
    db: Session,
    user_id: UUID,
    title: Optional[str] = None,
    description: Optional[str] = None,
    location: Optional[str] = None,
    image: Optional[str] = None,
) -> Tuple[PostView, GroupView]:
    """
    Create a post owned by ``user_id`` together with its group.

    The creator becomes the sole member of both records and the group's admin.
    """
    values = {
        "title": (title or "").strip(),
        "description": (description or "").strip(),
        "location": (location or "").strip(),
    }
    if not all(values.values()):
        raise ValidationError("All fields are required")

    image = (image or "").strip() or settings.DEFAULT_POST_IMAGE

    with write_transaction(db, "create post"):
        post = Post(**values, image=image, created_by=user_id)
        group = Group(
            post_id=post.id,
            group_name=group_name_for(values["title"]),
            admin_id=user_id,
        )
        post.group_id = group.id

        # group.post_id references post, so the post row goes in first
        db.add(post)
        db.flush()
        db.add(group)
        db.flush()

        db.add(PostMember(post_id=post.id, user_id=user_id))
        db.add(GroupMember(group_id=group.id, user_id=user_id))

    db.refresh(post)
    db.refresh(group)
    logger.info(f"User {user_id} created post {post.id} with group {group.id}")

    return PostView(post, [user_id]), GroupView(group, [user_id])


def join_post(db: Session, user_id: UUID, post_id: UUID) -> Optional[UUID]:
    """
    Add ``user_id`` to a post and its group.

    Joining twice is an error, not a no-op. Returns the group id, or None when
    the post has lost its group (the post is still joined in that case).
    """
    post = get_post(db, post_id)

    if user_id in post_member_ids(db, post.id):
        raise ConflictError(ALREADY_MEMBER)

    group = find_paired_group(db, post)
    group_id = group.id if group else None

    with write_transaction(db, "join post", conflict_message=ALREADY_MEMBER):
        db.add(PostMember(post_id=post.id, user_id=user_id))

        if group is None:
            logger.warning(f"Post {post.id} has no group; user {user_id} joined the post only")
        elif user_id not in group_member_ids(db, group.id):
            db.add(GroupMember(group_id=group.id, user_id=user_id))

        post.updated_at = utc_now()
        db.add(post)

    logger.info(f"User {user_id} joined post {post_id}")
    return group_id


def remove_member(db: Session, post: Post, group: Group, user_id: UUID) -> None:
    """Remove a member from a post and its group without touching other members."""
    post_id = post.id

    with write_transaction(db, "leave post"):
        for row in db.exec(
            select(PostMember).where(PostMember.post_id == post.id, PostMember.user_id == user_id)
        ).all():
            db.delete(row)

        for row in db.exec(
            select(GroupMember).where(GroupMember.group_id == group.id, GroupMember.user_id == user_id)
        ).all():
            db.delete(row)

        post.updated_at = utc_now()
        db.add(post)

    logger.info(f"User {user_id} left post {post_id}")


def leave_post(db: Session, user_id: UUID, post_id: UUID) -> LeaveOutcome:
    """
    Leave a post and its group.

    The creator cannot leave their own post; for them leaving deletes the post
    and its group.
    """
    post = get_post(db, post_id)

    group = find_paired_group(db, post)
    if not group:
        raise NotFoundError("Associated group not found")

    if user_id not in post_member_ids(db, post.id):
        raise ValidationError("You are not a member of this post")

    if post.created_by == user_id:
        delete_post(db, user_id, post.id)
        return LeaveOutcome.DELETED

    remove_member(db, post, group, user_id)
    return LeaveOutcome.LEFT


def _delete_rows(db: Session, rows: Iterable) -> None:
    for row in rows:
        db.delete(row)
    db.flush()


def delete_post(db: Session, user_id: UUID, post_id: UUID) -> None:
    """Delete a post and its group. Only the creator may do this."""
    post = get_post(db, post_id)

    if post.created_by != user_id:
        raise AuthorizationError("Unauthorized: Only the post creator can delete this post")

    groups = db.exec(
        select(Group).where(or_(Group.id == post.group_id, Group.post_id == post.id))
    ).all()
    if not groups:
        logger.warning(f"Post {post_id} has no group to delete")

    with write_transaction(db, "delete post"):
        for group in groups:
            _delete_rows(db, db.exec(select(GroupMember).where(GroupMember.group_id == group.id)).all())
        _delete_rows(db, groups)
        _delete_rows(db, db.exec(select(PostMember).where(PostMember.post_id == post.id)).all())
        _delete_rows(db, [post])

    logger.info(f"User {user_id} deleted post {post_id} and its group")


def update_post(db: Session, user_id: UUID, post_id: UUID, **changes) -> Tuple[PostView, Optional[GroupView]]:
    """
    Update a post's details. Only the creator may do this.

    A new title renames the group as well.
    """
    post = get_post(db, post_id)

    if post.created_by != user_id:
        raise AuthorizationError("Unauthorized: Only the post creator can update this post")

    updates = {}
    for name in EDITABLE_POST_FIELDS:
        value = changes.get(name)
        if value is None:
            continue
        value = value.strip()
        if name == "image":
            value = value or settings.DEFAULT_POST_IMAGE
        elif not value:
            raise ValidationError(f"{name.capitalize()} cannot be empty")
        updates[name] = value

    if not updates:
        raise ValidationError("No fields to update")

    group = find_paired_group(db, post)

    with write_transaction(db, "update post"):
        for name, value in updates.items():
            setattr(post, name, value)
        post.updated_at = utc_now()
        db.add(post)

        if group is not None and "title" in updates:
            group.group_name = group_name_for(updates["title"])
            group.updated_at = utc_now()
            db.add(group)

    db.refresh(post)
    logger.info(f"User {user_id} updated post {post_id}: {', '.join(updates)}")

    group_view = None
    if group is not None:
        db.refresh(group)
        group_view = GroupView(group, group_member_ids(db, group.id))

    return PostView(post, post_member_ids(db, post.id)), group_view


def _member_map(rows, key: str) -> Dict[UUID, List[UUID]]:
    members: Dict[UUID, List[UUID]] = {}
    for row in rows:
        members.setdefault(getattr(row, key), []).append(row.user_id)
    return members


def list_groups(db: Session) -> List[GroupView]:
    """All groups in storage order."""
    groups = db.exec(select(Group)).all()
    members = _member_map(db.exec(select(GroupMember).order_by(GroupMember.id)).all(), "group_id")
    return [GroupView(group, members.get(group.id, [])) for group in groups]


def get_group(db: Session, group_id: UUID) -> GroupView:
    group = db.exec(select(Group).where(Group.id == group_id)).first()
    if not group:
        raise NotFoundError("Group not found")
    return GroupView(group, group_member_ids(db, group.id))


def list_posts(db: Session) -> List[PostListing]:
    """All posts in storage order, with creator and group resolved."""
    posts = db.exec(select(Post)).all()
    if not posts:
        return []

    members = _member_map(db.exec(select(PostMember).order_by(PostMember.id)).all(), "post_id")
    creator_ids = list({post.created_by for post in posts})
    creators = {
        user.id: user
        for user in db.exec(select(User).where(User.id.in_(creator_ids))).all()
    }
    groups = {view.group.id: view for view in list_groups(db)}

    return [
        PostListing(
            post=post,
            members=members.get(post.id, []),
            creator=creators.get(post.created_by),
            group=groups.get(post.group_id),
        )
        for post in posts
    ]
