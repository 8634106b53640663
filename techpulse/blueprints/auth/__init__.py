from flask import Blueprint

# 后台登录 / 注册 / 退出，路由直接挂在 /admin 下
auth_bp = Blueprint('auth', __name__)

from . import routes
