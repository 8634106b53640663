from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from techpulse.exceptions import BackendError, ValidationError
from techpulse.extensions import db, cache
from techpulse.models import (
    Article, Category, MediaAsset, User,
    ARTICLE_STATUSES, STATUS_DRAFT, STATUS_PUBLISHED,
)
from techpulse.utils.cloud_storage import upload_file, delete_file
from techpulse.utils.file_helper import is_image_file
from techpulse.utils.sanitize import sanitize_html, plain_text
from techpulse.utils.validators import slugify, is_valid_slug

EXCERPT_LENGTH = 160
POST_IMAGE_FOLDER = 'images/posts'
MEDIA_FOLDER = 'media'


def _commit(action):
    """提交事务，存储异常统一转为 BackendError"""
    try:
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'❌ {action} 失败: {e}')
        raise BackendError() from e
    # 公开页面缓存随内容变更失效
    cache.clear()


class ArticleService:
    @staticmethod
    def slug_taken(slug, exclude_id=None):
        """是否已有其他已发布文章占用该 slug"""
        query = Article.query.filter_by(slug=slug, status=STATUS_PUBLISHED)
        if exclude_id is not None:
            query = query.filter(Article.id != exclude_id)
        return db.session.query(query.exists()).scalar()

    @staticmethod
    def _apply(article, data, image_file=None):
        """
        将表单数据写入文章对象
        :param data: {'title', 'slug', 'category', 'status', 'excerpt', 'content', 'featured_image'}
        """
        title = (data.get('title') or '').strip()
        if not title:
            raise ValidationError('Title is required')

        slug = slugify(data.get('slug') or title)
        if not is_valid_slug(slug):
            raise ValidationError('Could not derive a valid slug from the title')

        status = data.get('status') or STATUS_DRAFT
        if status not in ARTICLE_STATUSES:
            raise ValidationError(f'Unknown status: {status}')

        category = data.get('category')
        if not category:
            raise ValidationError('Category is required')

        # 同一时刻一个 slug 最多对应一篇已发布文章
        if status == STATUS_PUBLISHED and ArticleService.slug_taken(slug, exclude_id=article.id):
            raise ValidationError(f'Another published post already uses the slug "{slug}"',
                                  payload={'field': 'slug'})

        content = sanitize_html(data.get('content'))
        excerpt = (data.get('excerpt') or '').strip() or plain_text(content, EXCERPT_LENGTH)

        featured_image = data.get('featured_image', article.featured_image)
        if image_file is not None and image_file.filename:
            if not is_image_file(image_file.filename):
                raise ValidationError('Featured image must be an image file')
            featured_image = upload_file(image_file, folder=POST_IMAGE_FOLDER)['url']

        article.title = title
        article.slug = slug
        article.category = category
        article.status = status
        article.excerpt = excerpt
        article.content = content
        article.featured_image = featured_image or None
        return article

    @staticmethod
    def create_article(data, editor: User, image_file=None) -> Article:
        """新建文章，作者取自当前会话的编辑"""
        article = Article(author_id=editor.id, author_name=editor.name)
        ArticleService._apply(article, data, image_file)
        db.session.add(article)
        _commit('创建文章')
        current_app.logger.info(f'📝 文章已创建: {article.slug} [{article.status}] by {editor.email}')
        return article

    @staticmethod
    def update_article(article: Article, data, editor: User, image_file=None) -> Article:
        ArticleService._apply(article, data, image_file)
        article.updated_by_id = editor.id
        article.updated_by_name = editor.name
        _commit('更新文章')
        current_app.logger.info(f'📝 文章已更新: {article.slug} [{article.status}] by {editor.email}')
        return article

    @staticmethod
    def delete_article(article: Article):
        slug = article.slug
        db.session.delete(article)
        _commit('删除文章')
        current_app.logger.info(f'🗑️ 文章已删除: {slug}')

    @staticmethod
    def list_articles():
        """后台文章列表 (所有状态)"""
        return Article.query.order_by(Article.created_at.desc()).all()


class CategoryService:
    @staticmethod
    def create_category(name, slug=None, description=None) -> Category:
        name = (name or '').strip()
        if not name:
            raise ValidationError('Category name is required')

        slug = slugify(slug or name)
        if not is_valid_slug(slug):
            raise ValidationError('Could not derive a valid slug from the name')
        if Category.query.filter_by(slug=slug).first():
            raise ValidationError(f'Category slug "{slug}" already exists',
                                  payload={'field': 'slug'})

        category = Category(name=name, slug=slug, description=(description or '').strip() or None)
        db.session.add(category)
        _commit('创建分类')
        current_app.logger.info(f'🏷️ 分类已创建: {slug}')
        return category

    @staticmethod
    def delete_category(category: Category):
        slug = category.slug
        db.session.delete(category)
        _commit('删除分类')
        current_app.logger.info(f'🗑️ 分类已删除: {slug}')

    @staticmethod
    def list_categories():
        return Category.query.order_by(Category.name).all()


class MediaService:
    @staticmethod
    def upload_media(file, uploader: User = None) -> MediaAsset:
        """
        上传媒体文件：先写对象存储，再写元数据
        两步不是原子的，第二步失败会留下孤立文件
        """
        if file is None or not file.filename or not file.filename.strip():
            raise ValidationError('Please choose a file to upload')
        if not is_image_file(file.filename):
            raise ValidationError('Only image files (jpg, jpeg, png, gif, webp) are allowed')

        stored = upload_file(file, folder=MEDIA_FOLDER)

        asset = MediaAsset(
            filename=file.filename,
            mimetype=file.mimetype or 'application/octet-stream',
            size=stored['size'],
            storage_path=stored['path'],
            storage_backend=stored['backend'],
            url=stored['url'],
            uploader_id=uploader.id if uploader else None,
        )
        db.session.add(asset)
        try:
            _commit('保存媒体元数据')
        except BackendError:
            current_app.logger.warning(f'⚠️ 元数据写入失败，存储中遗留文件: {stored["path"]}')
            raise
        current_app.logger.info(f'🖼️ 媒体已上传: {asset.storage_path}')
        return asset

    @staticmethod
    def delete_media(asset: MediaAsset):
        """
        删除媒体：先删存储对象，再删元数据记录
        存储删除失败时保留记录；记录删除失败时记录会指向已删除的文件
        """
        path = asset.storage_path
        delete_file(path, backend=asset.storage_backend)
        db.session.delete(asset)
        try:
            _commit('删除媒体元数据')
        except BackendError:
            current_app.logger.warning(f'⚠️ 文件已删除但元数据记录仍在: {path}')
            raise
        current_app.logger.info(f'🗑️ 媒体已删除: {path}')

    @staticmethod
    def list_media():
        return MediaAsset.query.order_by(MediaAsset.created_at.desc()).all()


def dashboard_stats():
    """后台仪表盘统计"""
    try:
        counts = dict(
            db.session.query(Article.status, db.func.count(Article.id))
            .group_by(Article.status)
            .all()
        )
        return {
            'posts_total': sum(counts.values()),
            'posts_by_status': {status: counts.get(status, 0) for status in ARTICLE_STATUSES},
            'categories': Category.query.count(),
            'media': MediaAsset.query.count(),
            'editors': User.query.count(),
            'recent_posts': Article.query.order_by(Article.created_at.desc()).limit(5).all(),
        }
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'❌ 仪表盘统计失败: {e}')
        raise BackendError() from e
