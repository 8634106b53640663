"""
Pytest fixtures for TechPulse tests.
"""

from datetime import datetime, timedelta

import pytest

from techpulse import create_app
from techpulse.extensions import db
from techpulse.models import Article, User, STATUS_PUBLISHED

EDITOR_EMAIL = 'editor@techpulse.dev'
EDITOR_PASSWORD = 'correct-horse'

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture
def app(tmp_path):
    """Application with an in-memory database and a temporary upload folder."""
    app = create_app('testing')
    app.config['UPLOAD_FOLDER'] = str(tmp_path / 'uploads')

    with app.app_context():
        db.create_all()

    yield app

    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def ctx(app):
    """Request context for calling services directly (url_for needs one)."""
    with app.test_request_context():
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def editor_id(app):
    """Create an editor account and return its id."""
    with app.app_context():
        user = User(email=EDITOR_EMAIL, display_name='Jane Editor', password=EDITOR_PASSWORD)
        db.session.add(user)
        db.session.commit()
        return user.id


@pytest.fixture
def auth_client(client, editor_id):
    """Test client signed in as the editor."""
    resp = client.post('/admin', data={'email': EDITOR_EMAIL, 'password': EDITOR_PASSWORD})
    assert resp.status_code == 302
    return client


@pytest.fixture
def article_factory(app):
    """
    Insert articles directly and return their ids.

    created_at defaults to one minute apart going back from BASE_TIME,
    so ordering is deterministic.
    """
    counter = {'n': 0}

    def _make(title=None, category='gaming', status=STATUS_PUBLISHED, slug=None,
              created_at=None, **extra):
        counter['n'] += 1
        n = counter['n']
        title = title or f'Article {n}'
        with app.app_context():
            article = Article(
                title=title,
                slug=slug or f'article-{n}',
                category=category,
                status=status,
                excerpt=f'Excerpt for {title}',
                content=f'<p>Body of {title}</p>',
                author_name='Jane Editor',
                created_at=created_at or BASE_TIME - timedelta(minutes=n),
                **extra,
            )
            db.session.add(article)
            db.session.commit()
            return article.id

    return _make
