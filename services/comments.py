"""Threaded comments.

A comment's thread is kept consistent in both directions: the post lists its
comment ids and each reply is listed in its parent's ``children``. Every
mutation writes both sides in a single unit of work.
"""

import logging
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

from errors import Forbidden, NotFound, ValidationFailed
from services.common import populate, utcnow
from services.notifications import new_notification
from store import BLOGS, COMMENTS, DESC, NOTIFICATIONS, Store

logger = logging.getLogger(__name__)

COMMENTS_PAGE_SIZE = 5
# Firestore "in" filters accept at most 30 values.
IN_FILTER_LIMIT = 30


def chunked(items: List[str], size: int):
    for start in range(0, len(items), size):
        yield items[start:start + size]


class CommentService:
    def __init__(self, store: Store):
        self.store = store

    def add(self, user_id: str, blog_id: str, text: str, replying_to: Optional[str] = None,
            notification_id: Optional[str] = None) -> Dict[str, Any]:
        if not text or not text.strip():
            raise ValidationFailed("Write something to leave a comment")

        blog = self.store.get(BLOGS, blog_id)
        if blog is None:
            raise NotFound("Blog not found")

        parent = None
        if replying_to:
            parent = self.store.get(COMMENTS, replying_to)
            if parent is None:
                raise NotFound("The comment you are replying to no longer exists")
            if parent["blog_id"] != blog_id:
                raise ValidationFailed("The comment you are replying to belongs to another blog")

        linked = None
        if notification_id:
            linked = self.store.get(NOTIFICATIONS, notification_id)
            if linked is None or linked.get("notification_for") != user_id:
                logger.warning("Skipping reply link on notification %s for user %s", notification_id, user_id)
                linked = None

        comment_id = self.store.new_id(COMMENTS)
        comment = {
            "blog_id": blog_id,
            "blog_author": blog["author"],
            "comment": text,
            "commented_by": user_id,
            "parent": replying_to if parent else None,
            "children": [],
            "isReply": parent is not None,
            "commentedAt": utcnow(),
        }
        notification = new_notification(
            "reply" if parent else "comment",
            blog_id,
            parent["commented_by"] if parent else blog["author"],
            user_id,
            comment=comment_id,
            replied_on_comment=replying_to if parent else None,
        )

        with self.store.unit_of_work() as uow:
            uow.set(COMMENTS, comment_id, comment)
            uow.update(BLOGS, blog_id, {
                "comments": firestore.ArrayUnion([comment_id]),
                "activity.total_comments": firestore.Increment(1),
                "activity.total_parent_comments": firestore.Increment(0 if parent else 1),
            })
            if parent:
                uow.update(COMMENTS, parent["_id"], {"children": firestore.ArrayUnion([comment_id])})
            uow.set(NOTIFICATIONS, self.store.new_id(NOTIFICATIONS), notification)
            if linked:
                uow.update(NOTIFICATIONS, linked["_id"], {"reply": comment_id})

        return {
            "_id": comment_id,
            "comment": text,
            "commentedAt": comment["commentedAt"],
            "user_id": user_id,
            "children": [],
        }

    def for_blog(self, blog_id: str, skip: int = 0) -> List[Dict[str, Any]]:
        comments = self.store.find(
            COMMENTS,
            [("blog_id", "==", blog_id), ("isReply", "==", False)],
            order_by=[("commentedAt", DESC)],
            offset=skip,
            limit=COMMENTS_PAGE_SIZE,
        )
        return populate(self.store, comments, "commented_by", include_id=True)

    def replies(self, comment_id: str, skip: int = 0) -> List[Dict[str, Any]]:
        comment = self.store.get(COMMENTS, comment_id)
        if comment is None:
            raise NotFound("Comment not found")

        children = list(self.store.get_many(COMMENTS, comment.get("children", [])).values())
        children.sort(key=lambda c: c["commentedAt"], reverse=True)
        page = children[skip:skip + COMMENTS_PAGE_SIZE]
        for child in page:
            child.pop("blog_id", None)
        return populate(self.store, page, "commented_by", include_id=True)

    def delete_thread(self, requester_id: str, comment_id: str) -> int:
        """Delete a comment with every reply below it; returns how many comments went."""
        root = self.store.get(COMMENTS, comment_id)
        if root is None:
            raise NotFound("Comment not found")
        if requester_id not in (root["commented_by"], root["blog_author"]):
            raise Forbidden("You can not delete this comment")

        removed: Dict[str, Dict[str, Any]] = {}
        stack = [root]
        while stack:
            comment = stack.pop()
            if comment["_id"] in removed:
                continue
            removed[comment["_id"]] = comment
            pending = [c for c in comment.get("children", []) if c not in removed]
            if pending:
                stack.extend(self.store.get_many(COMMENTS, pending).values())

        removed_ids = list(removed)
        doomed = {}
        unlinked = {}
        for ids in chunked(removed_ids, IN_FILTER_LIMIT):
            for n in self.store.find(NOTIFICATIONS, [("comment", "in", ids)]):
                doomed[n["_id"]] = n
            for n in self.store.find(NOTIFICATIONS, [("reply", "in", ids)]):
                unlinked[n["_id"]] = n

        by_blog: Dict[str, List[Dict[str, Any]]] = {}
        for comment in removed.values():
            by_blog.setdefault(comment["blog_id"], []).append(comment)

        parent_id = root.get("parent")
        parent = None
        if parent_id and parent_id not in removed:
            parent = self.store.get(COMMENTS, parent_id)

        with self.store.unit_of_work() as uow:
            for removed_id in removed_ids:
                uow.delete(COMMENTS, removed_id)
            if parent is not None:
                uow.update(COMMENTS, parent_id, {"children": firestore.ArrayRemove([comment_id])})
            for notification_id in doomed:
                uow.delete(NOTIFICATIONS, notification_id)
            for notification_id in unlinked:
                if notification_id not in doomed:
                    uow.update(NOTIFICATIONS, notification_id, {"reply": firestore.DELETE_FIELD})
            for blog_id, comments in by_blog.items():
                if self.store.get(BLOGS, blog_id) is None:
                    continue
                top_level = sum(1 for c in comments if not c.get("parent"))
                uow.update(BLOGS, blog_id, {
                    "comments": firestore.ArrayRemove([c["_id"] for c in comments]),
                    "activity.total_comments": firestore.Increment(-len(comments)),
                    "activity.total_parent_comments": firestore.Increment(-top_level),
                })

        logger.info(
            "Deleted comment %s with %d replies and %d notifications",
            comment_id, len(removed_ids) - 1, len(doomed),
        )
        return len(removed_ids)
