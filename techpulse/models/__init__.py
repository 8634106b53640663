from .base import BaseModel
from .auth import User
from .content import (
    Article, Category, MediaAsset,
    STATUS_DRAFT, STATUS_PUBLISHED, STATUS_SCHEDULED, ARTICLE_STATUSES,
)
