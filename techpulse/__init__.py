import logging
import colorlog
from flask import Flask, render_template, request, jsonify
from config import config
from techpulse.extensions import db, migrate, login_manager, cache, csrf
from techpulse.exceptions import TechPulseException

# 导入 commands 模块，用于注册 CLI 命令
from techpulse import commands


def create_app(config_name='default'):
    """TechPulse 应用工厂函数"""
    app = Flask(__name__)

    # 1. 加载配置
    app.config.from_object(config[config_name])
    config[config_name].init_app(app)

    # 2. 初始化扩展
    db.init_app(app)
    migrate.init_app(app, db)
    login_manager.init_app(app)
    cache.init_app(app)
    csrf.init_app(app)

    # 3. 配置日志
    configure_logging(app)

    # 4. 对象存储 (Cloudinary / 本地)
    from techpulse.utils.cloud_storage import init_cloud_storage
    init_cloud_storage(app)

    # 5. 注册蓝图 (Blueprints)
    register_blueprints(app)

    # 6. 注册全局错误处理
    register_error_handlers(app)

    # 7. 注册 CLI 命令
    register_commands(app)

    # 8. 模板全局变量
    register_template_context(app)

    return app


def register_blueprints(app):
    """注册公开站点与后台蓝图"""
    # 公开站点
    from techpulse.blueprints.blog import blog_bp
    app.register_blueprint(blog_bp)

    # 后台登录 (/admin, /admin/logout, /admin/register)
    from techpulse.blueprints.auth import auth_bp
    app.register_blueprint(auth_bp)

    # 后台管理
    from techpulse.blueprints.admin import admin_bp
    app.register_blueprint(admin_bp, url_prefix='/admin')


def _wants_json():
    best = request.accept_mimetypes.best_match(['application/json', 'text/html'])
    return request.is_json or best == 'application/json'


def register_error_handlers(app):
    @app.errorhandler(404)
    def page_not_found(e):
        if _wants_json():
            return jsonify(success=False, message='Not found', code=404), 404
        return render_template('errors/404.html'), 404

    @app.errorhandler(500)
    def internal_server_error(e):
        return render_template('errors/500.html'), 500

    @app.errorhandler(TechPulseException)
    def handle_techpulse_exception(e):
        # 只影响当前请求；存储错误以错误横幅形式展示
        if e.code >= 500:
            app.logger.error(f'❌ {request.path}: {e.message}')
        else:
            app.logger.warning(f'⚠️ {request.path}: {e.message}')
        if _wants_json():
            return jsonify(e.to_dict()), e.code
        return render_template('errors/error.html', error=e), e.code


def register_commands(app):
    """flask forge / status / create-editor"""
    app.cli.add_command(commands.forge)
    app.cli.add_command(commands.status)
    app.cli.add_command(commands.create_editor)


def register_template_context(app):
    @app.context_processor
    def inject_site():
        from techpulse.services.listing_service import category_choices
        from techpulse.utils.file_helper import format_size
        return {
            'site_name': app.config['SITE_NAME'],
            'nav_categories': category_choices,
            'format_size': format_size,
        }


def configure_logging(app):
    """调试模式下为 app.logger 挂一个彩色控制台 handler"""
    if app.debug:
        handler = logging.StreamHandler()
        handler.setLevel(logging.INFO)

        formatter = colorlog.ColoredFormatter(
            "%(log_color)s%(asctime)s %(levelname)-7s%(reset)s %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
            reset=True,
            log_colors={
                'DEBUG':    'cyan',
                'INFO':     'green',
                'WARNING':  'yellow',
                'ERROR':    'red',
                'CRITICAL': 'red,bg_white',
            },
            secondary_log_colors={},
            style='%'
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
        app.logger.setLevel(logging.INFO)
