import logging
import re
import secrets
from typing import Any, Dict, List, Optional

from firebase_admin import firestore

from errors import Forbidden, NotFound, ValidationFailed
from models import CreateBlogRequest
from services.common import page_offset, pick, populate, title_keywords, utcnow
from services.notifications import like_notification_id, new_notification
from store import BLOGS, COMMENTS, DESC, NOTIFICATIONS, USERS, Store

logger = logging.getLogger(__name__)

POSTS_PAGE_SIZE = 5
TRENDING_LIMIT = 5
SEARCH_DEFAULT_LIMIT = 2
DESCRIPTION_LIMIT = 200
MAX_TAGS = 5
# array-contains-any takes at most 10 values on older Firestore backends.
MAX_QUERY_WORDS = 10

CARD_FIELDS = ("blog_id", "title", "des", "banner", "activity", "tags", "publishedAt")
TRENDING_FIELDS = ("blog_id", "title", "publishedAt")
DASHBOARD_FIELDS = ("blog_id", "title", "banner", "publishedAt", "activity", "des", "draft")
DETAIL_FIELDS = ("blog_id", "title", "des", "content", "banner", "activity", "publishedAt", "tags", "draft")

PUBLISHED = ("draft", "==", False)


def make_blog_id(title: str) -> str:
    slug = re.sub(r"\s+", "-", re.sub(r"[^a-zA-Z0-9]", " ", title).strip())
    return slug + secrets.token_urlsafe(15).replace("_", "").replace("-", "")[:20]


def card(blog: Dict[str, Any], fields=CARD_FIELDS) -> Dict[str, Any]:
    result = pick(blog, fields)
    if "author" in blog:
        result["author"] = blog["author"]
    return result


class BlogService:
    def __init__(self, store: Store):
        self.store = store

    def _cards(self, blogs: List[Dict[str, Any]], fields=CARD_FIELDS) -> List[Dict[str, Any]]:
        populate(self.store, blogs, "author")
        return [card(blog, fields) for blog in blogs]

    # --- authoring ------------------------------------------------------

    def create(self, author_id: str, is_admin: bool, data: CreateBlogRequest) -> str:
        if not is_admin:
            raise Forbidden("You are not authorized to create blog")

        title = data.title.strip()
        if not title:
            raise ValidationFailed("Please provide a title")

        if not data.draft:
            if not data.des or len(data.des) > DESCRIPTION_LIMIT:
                raise ValidationFailed(f"Please provide a blog description under {DESCRIPTION_LIMIT} characters")
            if not data.banner:
                raise ValidationFailed("Please provide a blog banner image")
            if not data.content.blocks:
                raise ValidationFailed("Please provide some blog content")
            if not data.tags or len(data.tags) > MAX_TAGS:
                raise ValidationFailed(f"Please provide some tags, maximum {MAX_TAGS}")

        fields = {
            "title": title,
            "title_keywords": title_keywords(title),
            "des": data.des,
            "banner": data.banner,
            "content": data.content.model_dump(),
            "tags": [tag.lower() for tag in data.tags],
            "draft": bool(data.draft),
        }

        if data.id:
            return self._edit(author_id, data.id, fields)

        blog_id = make_blog_id(title)
        blog = dict(
            fields,
            blog_id=blog_id,
            author=author_id,
            activity={"total_likes": 0, "total_comments": 0, "total_reads": 0, "total_parent_comments": 0},
            comments=[],
            publishedAt=utcnow(),
        )
        with self.store.unit_of_work() as uow:
            uow.set(BLOGS, blog_id, blog)
            uow.update(USERS, author_id, {
                "account_info.total_posts": firestore.Increment(0 if data.draft else 1),
                "blogs": firestore.ArrayUnion([blog_id]),
            })
        logger.info("Blog %s created by %s (draft=%s)", blog_id, author_id, data.draft)
        return blog_id

    def _edit(self, author_id: str, blog_id: str, fields: Dict[str, Any]) -> str:
        existing = self.store.get(BLOGS, blog_id)
        if existing is None:
            raise NotFound("Blog not found")
        if existing["author"] != author_id:
            raise Forbidden("You can not edit this blog")

        publishing = existing.get("draft") and not fields["draft"]
        with self.store.unit_of_work() as uow:
            if publishing:
                fields["publishedAt"] = utcnow()
                uow.update(USERS, author_id, {"account_info.total_posts": firestore.Increment(1)})
            uow.update(BLOGS, blog_id, fields)
        return blog_id

    def delete(self, is_admin: bool, blog_id: str) -> None:
        if not is_admin:
            raise Forbidden("You are not authorized to delete this blog")

        blog = self.store.get(BLOGS, blog_id)
        if blog is None:
            raise NotFound("Blog not found")

        comments = self.store.find(COMMENTS, [("blog_id", "==", blog_id)])
        notifications = self.store.find(NOTIFICATIONS, [("blog", "==", blog_id)])

        with self.store.unit_of_work() as uow:
            uow.delete(BLOGS, blog_id)
            for comment in comments:
                uow.delete(COMMENTS, comment["_id"])
            for notification in notifications:
                uow.delete(NOTIFICATIONS, notification["_id"])
            if self.store.get(USERS, blog["author"]) is not None:
                uow.update(USERS, blog["author"], {
                    "blogs": firestore.ArrayRemove([blog_id]),
                    "account_info.total_posts": firestore.Increment(0 if blog.get("draft") else -1),
                })
        logger.info(
            "Blog %s deleted with %d comments and %d notifications",
            blog_id, len(comments), len(notifications),
        )

    # --- reading --------------------------------------------------------

    def get(self, blog_id: str, draft: bool = False, mode: Optional[str] = None) -> Dict[str, Any]:
        blog = self.store.get(BLOGS, blog_id)
        if blog is None:
            raise NotFound("Blog not found")
        if blog.get("draft") and not draft:
            raise Forbidden("You can not access draft blogs")

        author = self.store.get(USERS, blog["author"])
        if mode != "edit":
            with self.store.unit_of_work() as uow:
                uow.update(BLOGS, blog_id, {"activity.total_reads": firestore.Increment(1)})
                if author is not None:
                    uow.update(USERS, author["_id"], {"account_info.total_reads": firestore.Increment(1)})
            blog["activity"]["total_reads"] = blog["activity"].get("total_reads", 0) + 1

        result = dict(pick(blog, DETAIL_FIELDS), _id=blog["_id"])
        result["author"] = None
        if author is not None:
            info = author["personal_info"]
            result["author"] = {
                "_id": author["_id"],
                "personal_info": pick(info, ("fullname", "username", "profile_img")),
            }
        return result

    def latest(self, page: int) -> List[Dict[str, Any]]:
        blogs = self.store.find(
            BLOGS, [PUBLISHED],
            order_by=[("publishedAt", DESC)],
            offset=page_offset(page, POSTS_PAGE_SIZE),
            limit=POSTS_PAGE_SIZE,
        )
        return self._cards(blogs)

    def latest_count(self) -> int:
        return self.store.count(BLOGS, [PUBLISHED])

    def trending(self) -> List[Dict[str, Any]]:
        blogs = self.store.find(
            BLOGS, [PUBLISHED],
            order_by=[("activity.total_reads", DESC), ("activity.total_likes", DESC), ("publishedAt", DESC)],
            limit=TRENDING_LIMIT,
        )
        return self._cards(blogs, TRENDING_FIELDS)

    def _search_filters(self, tag=None, query=None, author=None):
        if tag:
            return [("tags", "array_contains", tag.lower()), PUBLISHED]
        if query:
            words = title_keywords(query)[:MAX_QUERY_WORDS]
            if not words:
                return None
            return [("title_keywords", "array_contains_any", words), PUBLISHED]
        if author:
            return [("author", "==", author), PUBLISHED]
        return [PUBLISHED]

    def search(self, tag=None, query=None, author=None, page: int = 1,
               limit: Optional[int] = None, eliminate_blog: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = self._search_filters(tag, query, author)
        if filters is None:
            return []
        limit = limit or SEARCH_DEFAULT_LIMIT
        offset = page_offset(page, limit)
        exclude = eliminate_blog if tag else None
        if not exclude:
            blogs = self.store.find(
                BLOGS, filters, order_by=[("publishedAt", DESC)], offset=offset, limit=limit,
            )
            return self._cards(blogs)

        # The eliminated post may sit on an earlier page, so skip after dropping it.
        blogs = self.store.find(
            BLOGS, filters, order_by=[("publishedAt", DESC)], limit=offset + limit + 1,
        )
        blogs = [blog for blog in blogs if blog["_id"] != exclude]
        return self._cards(blogs[offset:offset + limit])

    def search_count(self, tag=None, query=None, author=None) -> int:
        filters = self._search_filters(tag, query, author)
        if filters is None:
            return 0
        return self.store.count(BLOGS, filters)

    def _author_filters(self, author_id: str, draft: bool, query: str):
        filters = [("author", "==", author_id), ("draft", "==", bool(draft))]
        words = title_keywords(query)[:MAX_QUERY_WORDS]
        if words:
            filters.append(("title_keywords", "array_contains_any", words))
        return filters

    def written_by(self, author_id: str, page: int, draft: bool = False, query: str = "",
                   deleted_doc_count: int = 0) -> List[Dict[str, Any]]:
        blogs = self.store.find(
            BLOGS, self._author_filters(author_id, draft, query),
            order_by=[("publishedAt", DESC)],
            offset=page_offset(page, POSTS_PAGE_SIZE, deleted_doc_count),
            limit=POSTS_PAGE_SIZE,
        )
        return [pick(blog, DASHBOARD_FIELDS) for blog in blogs]

    def written_by_count(self, author_id: str, draft: bool = False, query: str = "") -> int:
        return self.store.count(BLOGS, self._author_filters(author_id, draft, query))

    # --- likes ----------------------------------------------------------

    def toggle_like(self, user_id: str, blog_id: str, is_liked_by_user: bool) -> bool:
        """Like or unlike; returns whether the post is liked afterwards.

        The like notification has a deterministic id, so repeating a like (or
        an unlike) is a no-op instead of a second notification.
        """
        blog = self.store.get(BLOGS, blog_id)
        if blog is None:
            raise NotFound("Blog not found")

        like_id = like_notification_id(user_id, blog_id)
        already_liked = self.store.get(NOTIFICATIONS, like_id) is not None

        if not is_liked_by_user:
            if already_liked:
                return True
            with self.store.unit_of_work() as uow:
                uow.update(BLOGS, blog_id, {"activity.total_likes": firestore.Increment(1)})
                uow.set(NOTIFICATIONS, like_id, new_notification("like", blog_id, blog["author"], user_id))
            return True

        if not already_liked:
            return False
        with self.store.unit_of_work() as uow:
            uow.update(BLOGS, blog_id, {"activity.total_likes": firestore.Increment(-1)})
            uow.delete(NOTIFICATIONS, like_id)
        return False

    def is_liked(self, user_id: str, blog_id: str) -> bool:
        return self.store.get(NOTIFICATIONS, like_notification_id(user_id, blog_id)) is not None
