# Import all models once to ensure SQLAlchemy mapper registry is fully populated.
# This prevents late-binding issues for relationship("ClassName").

from .users.models import User  # noqa: F401
from .categories.models import Category  # noqa: F401
from .posts.models import Post  # noqa: F401
