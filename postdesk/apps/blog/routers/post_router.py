"""Post router."""

from postdesk.core.bases.base_router import BaseRouter
from postdesk.apps.blog.repositories.post_repository import PostRepository
from postdesk.apps.blog.schemas.post import PostCreate, PostUpdate


class PostRouter(BaseRouter):
    """Post router class."""

    def __init__(self):
        super().__init__(
            repository_class=PostRepository,
            create_schema=PostCreate,
            update_schema=PostUpdate,
            prefix="/posts",
            tags=["Posts"]
        )


# Router instance
router = PostRouter().get_router()
