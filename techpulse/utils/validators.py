"""
表单验证器与 slug 工具
"""
from wtforms.validators import ValidationError
import re

SLUG_RE = re.compile(r'^[a-z0-9]+(?:[-_][a-z0-9]+)*$')
SLUG_MAX_LENGTH = 200


def slugify(text):
    """
    由标题 / 名称生成 slug：
    小写，去掉非 ASCII 单词字符 (é 等直接丢弃)，空白折叠为连字符
    """
    text = (text or '').strip().lower()
    text = re.sub(r'[^\w\s-]', '', text, flags=re.ASCII)
    text = re.sub(r'[\s_-]+', '-', text)
    return text.strip('-')[:SLUG_MAX_LENGTH]


def is_valid_slug(value):
    """外部传入的 slug 是否合法 (URL 参数不可信)"""
    if not value or len(value) > SLUG_MAX_LENGTH:
        return False
    return bool(SLUG_RE.match(value))


def validate_slug(form, field):
    """验证 slug 格式"""
    if field.data and not is_valid_slug(field.data):
        raise ValidationError('Slug may only contain lowercase letters, digits and hyphens.')
