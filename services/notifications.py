from typing import Any, Dict, Optional

from services.common import page_offset, pick, populate, utcnow
from store import BLOGS, COMMENTS, NOTIFICATIONS, DESC, Store

NOTIFICATIONS_PAGE_SIZE = 10


def like_notification_id(user_id: str, blog_id: str) -> str:
    return f"like_{user_id}_{blog_id}"


def new_notification(kind: str, blog_id: str, notification_for: str, user_id: str, **refs) -> Dict[str, Any]:
    notification = {
        "type": kind,
        "blog": blog_id,
        "notification_for": notification_for,
        "user": user_id,
        "seen": False,
        "own_activity": notification_for == user_id,
        "createdAt": utcnow(),
    }
    notification.update({key: value for key, value in refs.items() if value is not None})
    return notification


class NotificationService:
    def __init__(self, store: Store):
        self.store = store

    def _filters(self, user_id: str, kind: Optional[str] = "all"):
        filters = [("notification_for", "==", user_id), ("own_activity", "==", False)]
        if kind and kind != "all":
            filters.append(("type", "==", kind))
        return filters

    def has_new(self, user_id: str) -> bool:
        return self.store.exists(NOTIFICATIONS, self._filters(user_id) + [("seen", "==", False)])

    def count(self, user_id: str, kind: str = "all") -> int:
        return self.store.count(NOTIFICATIONS, self._filters(user_id, kind))

    def feed(self, user_id: str, page: int, kind: str = "all", deleted_doc_count: int = 0):
        """Return a page of notifications and mark the returned ones as seen."""
        notifications = self.store.find(
            NOTIFICATIONS,
            self._filters(user_id, kind),
            order_by=[("createdAt", DESC)],
            offset=page_offset(page, NOTIFICATIONS_PAGE_SIZE, deleted_doc_count),
            limit=NOTIFICATIONS_PAGE_SIZE,
        )

        blogs = self.store.get_many(BLOGS, [n.get("blog") for n in notifications])
        comment_ids = [
            n.get(field)
            for n in notifications
            for field in ("comment", "replied_on_comment", "reply")
        ]
        comments = self.store.get_many(COMMENTS, comment_ids)
        populate(self.store, notifications, "user", include_id=True)

        results = []
        for n in notifications:
            blog = blogs.get(n.get("blog"))
            item = {
                "_id": n["_id"],
                "type": n["type"],
                "seen": n.get("seen", False),
                "createdAt": n.get("createdAt"),
                "user": n.get("user"),
                "blog": dict(pick(blog, ("title", "blog_id")), _id=blog["_id"]) if blog else None,
            }
            for field in ("comment", "replied_on_comment", "reply"):
                comment = comments.get(n.get(field))
                if comment is not None:
                    item[field] = {"_id": comment["_id"], "comment": comment.get("comment")}
            results.append(item)

        unseen = [n["_id"] for n in notifications if not n.get("seen")]
        if unseen:
            with self.store.unit_of_work() as uow:
                for notification_id in unseen:
                    uow.update(NOTIFICATIONS, notification_id, {"seen": True})
        return results
