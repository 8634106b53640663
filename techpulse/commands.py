import click
import random
from datetime import timedelta
from flask import current_app
from flask.cli import with_appcontext
from techpulse.extensions import db
from techpulse.models import User, Article, Category, MediaAsset, ARTICLE_STATUSES, STATUS_PUBLISHED
from techpulse.models.base import utcnow
from techpulse.utils.fake_gen import fake
from techpulse.utils.validators import slugify


@click.command('status')
@with_appcontext
def status():
    """
    [验证指令] 查看当前数据库中的内容统计。
    """
    click.echo(click.style('📊 TechPulse 内容统计:', fg='cyan', bold=True))

    try:
        u_count = User.query.count()
        c_count = Category.query.count()
        m_count = MediaAsset.query.count()
        click.echo(f" - 编辑 (Editors): \t{u_count}")
        for s in ARTICLE_STATUSES:
            click.echo(f" - 文章 [{s}]: \t{Article.query.filter_by(status=s).count()}")
        click.echo(f" - 分类 (Categories): \t{c_count}")
        click.echo(f" - 媒体 (Media): \t{m_count}")

        if u_count > 0:
            click.echo(click.style('✔ 数据库连接正常，数据已存在。', fg='green'))
        else:
            click.echo(click.style('⚠ 数据库为空，请运行 flask forge 生成数据。', fg='yellow'))

    except Exception as e:
        click.echo(click.style(f'✘ 数据库读取失败: {str(e)}', fg='red'))
        click.echo("请检查是否执行了 'flask db upgrade'")


@click.command('forge')
@click.option('--posts', default=30, help='每个分类的文章数 (默认30)')
@with_appcontext
def forge(posts):
    """
    [造物主指令] 初始化并填充演示数据。
    警告：这将清除数据库中的现有数据！
    """
    click.echo(click.style(f'⚡ 初始化 TechPulse 演示数据 (每分类 {posts} 篇)...', fg='cyan', bold=True))

    db.drop_all()
    db.create_all()

    admin = User(email='admin@techpulse.dev', display_name='Admin', password='admin')
    db.session.add(admin)

    click.echo('正在创建分类...')
    slugs = current_app.config['BLOG_CATEGORIES']
    for slug in slugs:
        db.session.add(Category(name=slug.title(), slug=slug,
                                description=f'The latest {slug} news, reviews, and insights.'))
    db.session.commit()

    click.echo('正在发布文章...')
    now = utcnow()
    count = 0
    for slug in slugs:
        for i in range(posts):
            title = fake.tech_headline()
            # 以分钟错开创建时间，保证排序稳定
            created = now - timedelta(minutes=random.randint(1, 60 * 24 * 90))
            db.session.add(Article(
                title=title,
                slug=f'{slugify(title)}-{slug}-{i}',
                category=slug,
                status=STATUS_PUBLISHED if random.random() > 0.15 else random.choice(ARTICLE_STATUSES),
                excerpt=fake.sentence(nb_words=18),
                content=''.join(f'<p>{fake.paragraph(nb_sentences=5)}</p>' for _ in range(4)),
                author_id=admin.id,
                author_name=admin.name,
                created_at=created,
                updated_at=created,
            ))
            count += 1
    db.session.commit()

    click.echo(click.style('✔ TechPulse 演示数据构建完成！', fg='green', bold=True))
    click.echo(f"管理员账号: admin@techpulse.dev / 密码: admin")
    click.echo(f"数据统计: {len(slugs)} 分类, {count} 篇文章")


@click.command('create-editor')
@click.argument('email')
@click.option('--name', default=None, help='展示名')
@click.password_option()
@with_appcontext
def create_editor(email, name, password):
    """创建编辑账号"""
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        raise click.ClickException(f'{email} 已存在')
    user = User(email=email, display_name=name, password=password)
    db.session.add(user)
    db.session.commit()
    click.echo(click.style(f'✔ 已创建编辑账号 {email}', fg='green'))
