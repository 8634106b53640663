"""
公开页面的只读查询：游标分页列表、slug 解析、首页信息流

列表按 created_at 倒序，游标记录上一页最后一条的时间戳，
下一页只取严格早于该时间戳的已发布文章。
"""
from datetime import datetime

from flask import current_app
from itsdangerous import BadSignature, URLSafeSerializer
from sqlalchemy.exc import SQLAlchemyError

from techpulse.exceptions import BackendError, ValidationError
from techpulse.extensions import db
from techpulse.models import Article, Category, STATUS_PUBLISHED
from techpulse.utils.validators import is_valid_slug

CURSOR_SALT = 'techpulse.listing-cursor'


class ListingPage:
    """一页列表结果"""

    def __init__(self, items, has_more, cursor=None, total=None):
        self.items = items
        self.has_more = has_more
        self.cursor = cursor  # 已到末尾时为 None
        self.total = total

    @property
    def exhausted(self):
        return not self.has_more

    def __len__(self):
        return len(self.items)

    def __repr__(self):
        return f'<ListingPage items={len(self.items)} has_more={self.has_more}>'


def _serializer():
    return URLSafeSerializer(current_app.config['SECRET_KEY'], salt=CURSOR_SALT)


def encode_cursor(category, last_created_at, served, total):
    """生成不透明游标 (签名，防篡改)"""
    return _serializer().dumps({
        'c': category or '',
        'ts': last_created_at.isoformat(),
        'n': served,
        't': total,
    })


def decode_cursor(token, category):
    """
    解析游标，并确认它属于同一个分类过滤条件
    :raises ValidationError: 游标无效或与过滤条件不匹配
    """
    try:
        state = _serializer().loads(token)
        watermark = datetime.fromisoformat(state['ts'])
        served = int(state['n'])
        total = int(state['t'])
    except (BadSignature, KeyError, TypeError, ValueError):
        raise ValidationError('Invalid pagination cursor')

    if state.get('c', '') != (category or ''):
        raise ValidationError('Pagination cursor does not match this listing')
    return watermark, served, total


def published_query(category=None):
    """已发布文章的基础查询，可选分类过滤"""
    query = Article.query.filter_by(status=STATUS_PUBLISHED)
    if category:
        query = query.filter_by(category=category)
    return query


def fetch_page(category=None, cursor=None, page_size=None):
    """
    取一页已发布文章 (按创建时间倒序)

    首次加载 (无游标) 时额外执行一次计数查询，总数随游标传递；
    返回条数少于 page_size 或已取满总数时视为到达末尾。

    :raises BackendError: 存储查询失败，调用方不得推进游标
    :raises ValidationError: 游标无效
    """
    page_size = page_size or current_app.config['POSTS_PER_PAGE']
    watermark = None
    served, total = 0, None
    if cursor:
        watermark, served, total = decode_cursor(cursor, category)

    try:
        query = published_query(category)
        if watermark is None:
            total = query.count()
        else:
            query = query.filter(Article.created_at < watermark)
        items = query.order_by(Article.created_at.desc()).limit(page_size).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'❌ 文章列表查询失败 (category={category!r}): {e}')
        raise BackendError() from e

    served += len(items)
    has_more = len(items) == page_size and served < total
    next_cursor = None
    if has_more:
        next_cursor = encode_cursor(category, items[-1].created_at, served, total)
    return ListingPage(items, has_more, next_cursor, total)


def resolve_slug(slug):
    """
    slug -> 已发布文章；找不到返回 None
    只取一条，按 id 升序保证同一 slug 多次解析结果一致
    """
    if not is_valid_slug(slug):
        return None
    try:
        return (published_query()
                .filter_by(slug=slug)
                .order_by(Article.id.asc())
                .limit(1)
                .first())
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'❌ slug 解析失败 ({slug!r}): {e}')
        raise BackendError() from e


def related_articles(article, limit=3):
    """同分类的其他已发布文章"""
    try:
        return (published_query(article.category)
                .filter(Article.slug != article.slug)
                .order_by(Article.created_at.desc())
                .limit(limit)
                .all())
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'❌ 相关文章查询失败: {e}')
        raise BackendError() from e


def category_choices():
    """
    可用分类列表 [(slug, name)]：
    固定枚举 BLOG_CATEGORIES 在前，后台新增的分类追加在后
    """
    names = {slug: slug.title() for slug in current_app.config['BLOG_CATEGORIES']}
    for category in Category.query.order_by(Category.name).all():
        names[category.slug] = category.name
    return list(names.items())


def resolve_category(slug):
    """
    分类 slug -> {'slug', 'name', 'description'}；未知分类返回 None
    """
    if not is_valid_slug(slug):
        return None
    try:
        category = Category.query.filter_by(slug=slug).first()
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'❌ 分类查询失败 ({slug!r}): {e}')
        raise BackendError() from e

    if category:
        return {'slug': category.slug, 'name': category.name,
                'description': category.description}
    if slug in current_app.config['BLOG_CATEGORIES']:
        return {'slug': slug, 'name': slug.title(), 'description': None}
    return None


def home_feed(featured=3, per_category=3, recent=5):
    """首页数据：精选、各分类最新、最近更新"""
    try:
        latest = published_query().order_by(Article.created_at.desc())
        featured_posts = latest.limit(featured).all()
        recent_posts = latest.limit(recent).all()

        sections = []
        for slug, name in category_choices():
            posts = (published_query(slug)
                     .order_by(Article.created_at.desc())
                     .limit(per_category)
                     .all())
            if posts:
                sections.append({'slug': slug, 'name': name, 'posts': posts})
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.error(f'❌ 首页数据加载失败: {e}')
        raise BackendError() from e

    return {
        'featured': featured_posts,
        'sections': sections,
        'recent': recent_posts,
    }
