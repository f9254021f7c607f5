import re
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from store import USERS, Store

AUTHOR_FIELDS = ("profile_img", "username", "fullname")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def page_offset(page: int, limit: int, deleted_doc_count: int = 0) -> int:
    """Offset for ``page`` (1-based), pulled back by documents the client deleted meanwhile."""
    return max((page - 1) * limit - (deleted_doc_count or 0), 0)


def title_keywords(title: str) -> List[str]:
    words = re.findall(r"\w+", (title or "").lower())
    return sorted(set(words))


def pick(doc: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    return {field: doc.get(field) for field in fields}


def public_author(account: Optional[Dict[str, Any]], include_id: bool = False) -> Optional[Dict[str, Any]]:
    if account is None:
        return None
    info = account.get("personal_info", {})
    author = {"personal_info": pick(info, AUTHOR_FIELDS)}
    if include_id:
        author["_id"] = account["_id"]
    return author


def populate(
    store: Store,
    docs: List[Dict[str, Any]],
    field: str,
    include_id: bool = False,
) -> List[Dict[str, Any]]:
    """Replace the account id stored in ``field`` of each doc with the account's public info."""
    accounts = store.get_many(USERS, [doc.get(field) for doc in docs])
    for doc in docs:
        doc[field] = public_author(accounts.get(doc.get(field)), include_id=include_id)
    return docs
