from flask import Blueprint

# 公开站点：首页、分类列表、文章详情
blog_bp = Blueprint('blog', __name__)

from . import routes
