from flask import render_template, request, jsonify, abort, send_from_directory, current_app
from flask_login import current_user

from techpulse.extensions import cache
from techpulse.blueprints.blog import blog_bp
from techpulse.exceptions import TechPulseException, NotFound
from techpulse.services import listing_service


def _skip_cache():
    """编辑登录后看到的始终是最新内容"""
    return current_user.is_authenticated


@blog_bp.route('/')
@cache.cached(unless=_skip_cache)
def index():
    """首页：精选、分类最新、最近更新"""
    feed = listing_service.home_feed()
    return render_template('blog/index.html', **feed)


@blog_bp.route('/category/<slug>')
@cache.cached(query_string=True, unless=_skip_cache)
def category(slug):
    """
    分类列表页
    带 ?cursor= 时渲染游标之后的一页 (无 JS 时的 Load More)
    """
    category = listing_service.resolve_category(slug)
    if category is None:
        abort(404)

    page = listing_service.fetch_page(category=slug, cursor=request.args.get('cursor'))
    return render_template('blog/category.html',
                           category=category,
                           page=page,
                           posts=page.items)


@blog_bp.route('/category/<slug>/more')
def category_more(slug):
    """Load More 接口：返回下一页卡片数据 (JSON)"""
    try:
        if listing_service.resolve_category(slug) is None:
            raise NotFound('Category not found')
        page = listing_service.fetch_page(category=slug, cursor=request.args.get('cursor'))
    except TechPulseException as e:
        # 失败时不返回游标，前端保留原游标
        return jsonify(e.to_dict()), e.code

    return jsonify(
        success=True,
        items=[post.to_card() for post in page.items],
        has_more=page.has_more,
        cursor=page.cursor,
    )


@blog_bp.route('/post/<slug>')
@cache.cached(unless=_skip_cache)
def post_detail(slug):
    """文章详情页 (仅已发布)"""
    post = listing_service.resolve_slug(slug)
    if post is None:
        abort(404)
    related = listing_service.related_articles(post)
    return render_template('blog/post.html', post=post, related_posts=related)


@blog_bp.route('/privacy-policy')
def privacy_policy():
    return render_template('blog/privacy_policy.html')


@blog_bp.route('/uploads/<path:filename>')
def uploaded_file(filename):
    """本地存储后端的公开访问地址"""
    return send_from_directory(current_app.config['UPLOAD_FOLDER'], filename)
