from techpulse.extensions import db
from .base import BaseModel

STATUS_DRAFT = 'draft'
STATUS_PUBLISHED = 'published'
STATUS_SCHEDULED = 'scheduled'
ARTICLE_STATUSES = (STATUS_DRAFT, STATUS_PUBLISHED, STATUS_SCHEDULED)


class Article(BaseModel):
    """博客文章"""
    __tablename__ = 'cms_articles'

    title = db.Column(db.String(256), nullable=False)
    slug = db.Column(db.String(200), nullable=False, index=True)
    category = db.Column(db.String(64), nullable=False, index=True)
    status = db.Column(db.String(20), default=STATUS_DRAFT, nullable=False, index=True)

    excerpt = db.Column(db.Text, default='')
    content = db.Column(db.Text, default='')  # 富文本 HTML (已清洗)
    featured_image = db.Column(db.String(512))  # 封面图公开 URL

    # 作者快照：账号被删除后仍能展示署名
    author_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'))
    author_name = db.Column(db.String(64))
    updated_by_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'))
    updated_by_name = db.Column(db.String(64))


    @property
    def is_published(self):
        return self.status == STATUS_PUBLISHED

    def to_card(self):
        """列表卡片所需字段 (Load More 接口返回)"""
        return {
            'id': self.id,
            'title': self.title,
            'slug': self.slug,
            'category': self.category,
            'excerpt': self.excerpt or '',
            'featured_image': self.featured_image,
            'author': self.author_name or 'Admin',
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Article {self.slug} [{self.status}]>'


class Category(BaseModel):
    """文章分类"""
    __tablename__ = 'cms_categories'

    name = db.Column(db.String(64), nullable=False)
    slug = db.Column(db.String(64), unique=True, nullable=False, index=True)
    description = db.Column(db.Text)

    def __repr__(self):
        return f'<Category {self.slug}>'


class MediaAsset(BaseModel):
    """媒体文件元数据 (真实文件在对象存储中)"""
    __tablename__ = 'cms_media'

    filename = db.Column(db.String(256))
    mimetype = db.Column(db.String(64))
    size = db.Column(db.Integer)  # 字节数
    storage_path = db.Column(db.String(512), nullable=False)  # 存储路径 / Cloudinary public_id
    storage_backend = db.Column(db.String(16), default='local')  # local, cloudinary
    url = db.Column(db.String(512))  # 公开访问 URL

    uploader_id = db.Column(db.Integer, db.ForeignKey('auth_users.id'))

    def __repr__(self):
        return f'<MediaAsset {self.storage_path}>'
