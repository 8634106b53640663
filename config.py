import os
from dotenv import load_dotenv

# 本地开发时从 .env 读取密钥与数据库地址
load_dotenv()
basedir = os.path.abspath(os.path.dirname(__file__))


class Config:
    """公共配置，各环境在子类中覆盖"""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'hard-to-guess-string'

    # SQLAlchemy
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_RECORD_QUERIES = True

    # 媒体上传 (本地存储后端)
    UPLOAD_FOLDER = os.path.join(basedir, 'techpulse', 'static', 'uploads')
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024  # 单个文件上限 16MB

    # Cloudinary 云存储 (未配置时回退到本地 UPLOAD_FOLDER)
    CLOUDINARY_URL = os.environ.get('CLOUDINARY_URL')
    CLOUDINARY_CLOUD_NAME = os.environ.get('CLOUDINARY_CLOUD_NAME')
    CLOUDINARY_API_KEY = os.environ.get('CLOUDINARY_API_KEY')
    CLOUDINARY_API_SECRET = os.environ.get('CLOUDINARY_API_SECRET')
    USE_CLOUD_STORAGE = os.environ.get('USE_CLOUD_STORAGE', 'auto').lower()

    # 博客配置
    SITE_NAME = os.environ.get('SITE_NAME', 'TechPulse')
    POSTS_PER_PAGE = int(os.environ.get('POSTS_PER_PAGE', 9))
    BLOG_CATEGORIES = ['technology', 'smartphones', 'laptops', 'gaming', 'software', 'gadgets']

    # 账号注册开关
    ALLOW_REGISTRATION = os.environ.get('ALLOW_REGISTRATION', 'true').lower() in ('1', 'true', 'yes')

    # 缓存配置 (公开页面缓存一小时，编辑登录后不走缓存)
    CACHE_TYPE = "SimpleCache"
    CACHE_DEFAULT_TIMEOUT = int(os.environ.get('CACHE_DEFAULT_TIMEOUT', 3600))

    @staticmethod
    def init_app(app):
        # 本地存储后端需要上传目录
        upload_folder = app.config['UPLOAD_FOLDER']
        if not os.path.exists(upload_folder):
            os.makedirs(upload_folder)


class DevelopmentConfig(Config):
    """本地开发：调试模式，不缓存页面"""
    DEBUG = True
    CACHE_TYPE = "NullCache"
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'techpulse.db')


class ProductionConfig(Config):
    """生产环境：开启页面缓存与安全 Cookie"""
    DEBUG = False

    DATABASE_URL = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'instance', 'techpulse_prod.db')
    # PostgreSQL URL 修正（部分平台使用 postgres://）
    if DATABASE_URL and DATABASE_URL.startswith('postgres://'):
        DATABASE_URL = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

    SQLALCHEMY_DATABASE_URI = DATABASE_URL

    # Cookie
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'

    @classmethod
    def init_app(cls, app):
        Config.init_app(app)


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    WTF_CSRF_ENABLED = False
    CACHE_TYPE = "NullCache"
    USE_CLOUD_STORAGE = 'false'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
