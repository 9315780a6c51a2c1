from app.models.blog_post import BlogPost
from app.models.learning_resource import LearningResource

__all__ = [
    "BlogPost",
    "LearningResource",
]
