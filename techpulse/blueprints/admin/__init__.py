from flask import Blueprint

# 注意：url_prefix 在 techpulse/__init__.py 注册时设置，这里不重复设置
admin_bp = Blueprint('admin', __name__)

from . import routes
