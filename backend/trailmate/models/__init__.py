"""
SQLModel models for the TrailMate application.

This module exports all database models so they are registered with
SQLModel metadata before tables are created.
"""

from .user import User, AuthSession
from .post import Post
from .group import Group
from .membership import PostMember, GroupMember

__all__ = [
    "User",
    "AuthSession",
    "Post",
    "Group",
    "PostMember",
    "GroupMember",
]
