import io
import os

import pytest
from werkzeug.datastructures import FileStorage

from techpulse.exceptions import BackendError, StorageError, ValidationError
from techpulse.extensions import db
from techpulse.models import Article, Category, MediaAsset, User, STATUS_DRAFT, STATUS_PUBLISHED
from techpulse.services import content_service
from techpulse.services.content_service import ArticleService, CategoryService, MediaService
from techpulse.services import listing_service

PNG_BYTES = b'\x89PNG\r\n\x1a\n' + b'\x00' * 64


def _image(name='photo.png', data=PNG_BYTES, mimetype='image/png'):
    return FileStorage(stream=io.BytesIO(data), filename=name, content_type=mimetype)


@pytest.fixture
def editor(ctx, editor_id):
    return db.session.get(User, editor_id)


def _article_data(**overrides):
    data = {
        'title': 'The Future of 5G Technology',
        'slug': '',
        'category': 'technology',
        'status': STATUS_PUBLISHED,
        'excerpt': '',
        'content': '<p>Faster <strong>networks</strong> are coming.</p>',
        'featured_image': '',
    }
    data.update(overrides)
    return data


def test_create_article_derives_slug_excerpt_and_author(editor):
    article = ArticleService.create_article(_article_data(), editor)

    assert article.slug == 'the-future-of-5g-technology'
    assert article.excerpt == 'Faster networks are coming.'
    assert article.author_id == editor.id
    assert article.author_name == 'Jane Editor'
    assert article.featured_image is None


def test_create_article_sanitizes_body(editor):
    article = ArticleService.create_article(
        _article_data(content='<p onclick="x()">Hi</p><script>alert(1)</script>'), editor)

    assert '<script>' not in article.content
    assert 'onclick' not in article.content
    assert article.content.startswith('<p>Hi</p>')


def test_publishing_duplicate_slug_is_refused(editor):
    ArticleService.create_article(_article_data(slug='same-slug'), editor)

    with pytest.raises(ValidationError):
        ArticleService.create_article(_article_data(slug='same-slug'), editor)

    assert Article.query.filter_by(slug='same-slug').count() == 1


def test_draft_may_share_slug_but_cannot_be_published_over_it(editor):
    ArticleService.create_article(_article_data(slug='same-slug'), editor)
    draft = ArticleService.create_article(_article_data(slug='same-slug', status=STATUS_DRAFT), editor)

    with pytest.raises(ValidationError):
        ArticleService.update_article(draft, _article_data(slug='same-slug'), editor)


def test_draft_is_never_public(editor):
    ArticleService.create_article(_article_data(slug='work-in-progress', status=STATUS_DRAFT), editor)

    assert listing_service.resolve_slug('work-in-progress') is None
    assert listing_service.fetch_page(category='technology').items == []


def test_update_article_stamps_updated_by(editor):
    article = ArticleService.create_article(_article_data(status=STATUS_DRAFT), editor)

    ArticleService.update_article(article, _article_data(title='Renamed', slug='renamed'), editor)

    refreshed = db.session.get(Article, article.id)
    assert refreshed.title == 'Renamed'
    assert refreshed.status == STATUS_PUBLISHED
    assert refreshed.updated_by_id == editor.id
    assert refreshed.updated_by_name == 'Jane Editor'


def test_unknown_status_rejected(editor):
    with pytest.raises(ValidationError):
        ArticleService.create_article(_article_data(status='archived'), editor)


def test_featured_image_upload_stores_public_url(ctx, editor):
    article = ArticleService.create_article(_article_data(), editor, image_file=_image('cover.png'))

    assert article.featured_image.startswith('/uploads/images/posts/')
    stored = article.featured_image[len('/uploads/'):]
    assert os.path.exists(os.path.join(ctx.config['UPLOAD_FOLDER'], stored))


def test_delete_article(editor):
    article = ArticleService.create_article(_article_data(), editor)
    article_id = article.id

    ArticleService.delete_article(article)

    assert db.session.get(Article, article_id) is None


def test_create_category_derives_slug_and_refuses_duplicates(ctx):
    category = CategoryService.create_category('Smart Home', description='  Lights & locks ')

    assert category.slug == 'smart-home'
    assert category.description == 'Lights & locks'
    with pytest.raises(ValidationError):
        CategoryService.create_category('Smart-Home')


def test_delete_category(ctx):
    category = CategoryService.create_category('Drones')

    CategoryService.delete_category(category)

    assert Category.query.filter_by(slug='drones').first() is None


def test_upload_media_writes_object_and_metadata(ctx, editor):
    asset = MediaService.upload_media(_image('screen shot.png'), editor)

    assert asset.id is not None
    assert asset.storage_backend == 'local'
    assert asset.size == len(PNG_BYTES)
    assert asset.mimetype == 'image/png'
    assert asset.url == f'/uploads/{asset.storage_path}'
    assert os.path.exists(os.path.join(ctx.config['UPLOAD_FOLDER'], asset.storage_path))


def test_upload_media_rejects_non_images(ctx, editor):
    with pytest.raises(ValidationError):
        MediaService.upload_media(_image('notes.txt', b'hello', 'text/plain'), editor)

    assert MediaAsset.query.count() == 0


def test_delete_media_removes_record_and_stored_object(ctx, editor):
    asset = MediaService.upload_media(_image(), editor)
    asset_id = asset.id
    path = os.path.join(ctx.config['UPLOAD_FOLDER'], asset.storage_path)

    MediaService.delete_media(asset)

    assert db.session.get(MediaAsset, asset_id) is None
    assert not os.path.exists(path)


def test_delete_media_keeps_record_when_storage_delete_fails(ctx, editor, monkeypatch):
    asset = MediaService.upload_media(_image(), editor)

    def broken_delete(path, backend='local'):
        raise StorageError('storage offline')

    monkeypatch.setattr(content_service, 'delete_file', broken_delete)

    with pytest.raises(StorageError):
        MediaService.delete_media(asset)

    assert db.session.get(MediaAsset, asset.id) is not None


def test_dashboard_stats(editor):
    ArticleService.create_article(_article_data(), editor)
    ArticleService.create_article(_article_data(slug='draft-one', status=STATUS_DRAFT), editor)

    stats = content_service.dashboard_stats()

    assert stats['posts_total'] == 2
    assert stats['posts_by_status'] == {'draft': 1, 'published': 1, 'scheduled': 0}
    assert stats['editors'] == 1
    assert len(stats['recent_posts']) == 2


def test_accented_title_gets_ascii_slug(editor):
    article = ArticleService.create_article(_article_data(title='Pokémon Review'), editor)

    assert article.slug == 'pokmon-review'
    assert listing_service.resolve_slug('pokmon-review').id == article.id


def test_delete_media_logs_record_left_behind(ctx, editor, monkeypatch, caplog):
    asset = MediaService.upload_media(_image(), editor)
    asset_id = asset.id
    storage_path = asset.storage_path
    path = os.path.join(ctx.config['UPLOAD_FOLDER'], asset.storage_path)

    def failing_commit(action):
        db.session.rollback()
        raise BackendError()

    monkeypatch.setattr(content_service, '_commit', failing_commit)

    with pytest.raises(BackendError):
        MediaService.delete_media(asset)

    assert not os.path.exists(path)
    assert db.session.get(MediaAsset, asset_id) is not None
    assert storage_path in caplog.text
