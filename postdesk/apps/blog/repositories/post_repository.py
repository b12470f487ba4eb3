"""Post repository."""

from typing import Any, Dict, List, Optional
from uuid import UUID

from postdesk.core.bases.base_repository import BaseRepository
from postdesk.core.result import InvalidInput, Result
from postdesk.apps.blog.models.post import Post
from postdesk.apps.blog.schemas.post import PostRead

# Number of posts shown on the home page
HOMEPAGE_LIMIT = 20


def _blank_fields(data: Dict[str, Any], names) -> List[str]:
    return [
        name
        for name in names
        if not isinstance(data.get(name), str) or not data[name].strip()
    ]


class PostRepository(BaseRepository[Post, PostRead]):
    """Post repository class."""

    model = Post
    read_schema = PostRead
    updatable_fields = ("title", "content")

    def _validate_create(self, create_data: Dict[str, Any]) -> Optional[InvalidInput]:
        blank = _blank_fields(create_data, ("title", "content"))
        if blank:
            return InvalidInput(
                message=f"Required fields missing or empty: {', '.join(blank)}",
                fields=blank,
            )
        return None

    def _validate_update(self, update_data: Dict[str, Any]) -> Optional[InvalidInput]:
        supplied = {k: v for k, v in update_data.items() if v is not None}
        blank = _blank_fields(supplied, supplied.keys())
        if blank:
            return InvalidInput(
                message=f"Fields must not be empty: {', '.join(blank)}",
                fields=blank,
            )
        return None

    async def create_post(self, title: str, content: str) -> Result[UUID]:
        return await self.create({"title": title, "content": content})

    async def get_by_id(self, post_id: Any) -> Result[PostRead]:
        return await self.get(post_id)

    async def list_recent(self, limit: Optional[int] = None) -> Result[List[PostRead]]:
        """Posts newest first; all of them unless `limit` is given."""
        return await self.list(limit=limit)

    async def update_post(
        self,
        post_id: Any,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Result[UUID]:
        return await self.update(post_id, {"title": title, "content": content})
