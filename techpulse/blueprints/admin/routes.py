from flask import render_template, request, flash, redirect, url_for, abort
from flask_login import login_required, current_user

from techpulse.extensions import db
from techpulse.blueprints.admin import admin_bp
from techpulse.blueprints.admin.forms import ArticleForm, CategoryForm, UploadForm
from techpulse.exceptions import TechPulseException
from techpulse.models import Article, Category, MediaAsset
from techpulse.services.content_service import (
    ArticleService, CategoryService, MediaService, dashboard_stats,
)
from techpulse.services.listing_service import category_choices
from techpulse.utils.file_helper import format_size


def _get_or_404(model, id):
    obj = db.session.get(model, id)
    if obj is None:
        abort(404)
    return obj


@admin_bp.route('/dashboard')
@login_required
def dashboard():
    """后台仪表盘"""
    try:
        stats = dashboard_stats()
    except TechPulseException as e:
        flash(e.message, 'danger')
        stats = None
    return render_template('admin/dashboard.html', stats=stats)


@admin_bp.route('/posts')
@login_required
def posts():
    """文章列表 (所有状态)"""
    return render_template('admin/posts.html', posts=ArticleService.list_articles())


@admin_bp.route('/posts/create', methods=['GET', 'POST'])
@login_required
def create_post():
    """新建文章"""
    form = ArticleForm()
    form.category.choices = category_choices()
    if form.validate_on_submit():
        try:
            article = ArticleService.create_article(form.to_data(), current_user, form.image.data)
        except TechPulseException as e:
            flash(e.message, 'danger')
            return render_template('admin/post_form.html', form=form, article=None), e.code
        flash(f'Post "{article.title}" saved.', 'success')
        return redirect(url_for('admin.posts'))
    return render_template('admin/post_form.html', form=form, article=None)


@admin_bp.route('/posts/<int:id>', methods=['GET', 'POST'])
@login_required
def edit_post(id):
    """编辑文章"""
    article = _get_or_404(Article, id)
    form = ArticleForm(obj=article)
    form.category.choices = category_choices()
    # 旧文章的分类可能已从列表中移除，保留原值可选
    if article.category not in dict(form.category.choices):
        form.category.choices.append((article.category, article.category.title()))

    if form.validate_on_submit():
        try:
            ArticleService.update_article(article, form.to_data(), current_user, form.image.data)
        except TechPulseException as e:
            db.session.rollback()
            flash(e.message, 'danger')
            return render_template('admin/post_form.html', form=form, article=article), e.code
        flash('Post updated.', 'success')
        return redirect(url_for('admin.posts'))
    return render_template('admin/post_form.html', form=form, article=article)


@admin_bp.route('/posts/<int:id>/delete', methods=['POST'])
@login_required
def delete_post(id):
    article = _get_or_404(Article, id)
    try:
        ArticleService.delete_article(article)
        flash('Post deleted.', 'success')
    except TechPulseException as e:
        flash(e.message, 'danger')
    return redirect(url_for('admin.posts'))


@admin_bp.route('/categories', methods=['GET', 'POST'])
@login_required
def categories():
    """分类管理"""
    form = CategoryForm()
    status = 200
    if form.validate_on_submit():
        try:
            CategoryService.create_category(form.name.data, form.slug.data, form.description.data)
            flash('Category added.', 'success')
            return redirect(url_for('admin.categories'))
        except TechPulseException as e:
            flash(e.message, 'danger')
            status = e.code
    return render_template('admin/categories.html',
                           form=form,
                           categories=CategoryService.list_categories()), status


@admin_bp.route('/categories/<int:id>/delete', methods=['POST'])
@login_required
def delete_category(id):
    category = _get_or_404(Category, id)
    try:
        CategoryService.delete_category(category)
        flash('Category deleted.', 'success')
    except TechPulseException as e:
        flash(e.message, 'danger')
    return redirect(url_for('admin.categories'))


@admin_bp.route('/media', methods=['GET', 'POST'])
@login_required
def media():
    """媒体库"""
    form = UploadForm()
    if request.method == 'POST':
        if form.validate_on_submit():
            # 逐个上传，某个文件失败不影响已保存的文件
            uploaded = 0
            for file in form.files.data:
                try:
                    MediaService.upload_media(file, current_user)
                    uploaded += 1
                except TechPulseException as e:
                    flash(f'{file.filename}: {e.message}', 'danger')
            if uploaded:
                flash(f'{uploaded} file(s) uploaded.', 'success')
        else:
            for errors in form.errors.values():
                for error in errors:
                    flash(error, 'warning')
        return redirect(url_for('admin.media'))

    files = MediaService.list_media()
    total_size = sum(f.size or 0 for f in files)
    return render_template('admin/media.html',
                           form=form,
                           files=files,
                           total_size=format_size(total_size))


@admin_bp.route('/media/<int:id>/delete', methods=['POST'])
@login_required
def delete_media(id):
    asset = _get_or_404(MediaAsset, id)
    try:
        MediaService.delete_media(asset)
        flash('File deleted.', 'success')
    except TechPulseException as e:
        flash(e.message, 'danger')
    return redirect(url_for('admin.media'))
