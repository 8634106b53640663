"""
富文本 HTML 清洗
编辑器提交的正文在入库前统一过滤，模板中才可以安全地 |safe 输出
"""
from html import unescape

import bleach
from bleach.css_sanitizer import CSSSanitizer

# 富文本编辑器工具栏能产生的标签
ALLOWED_TAGS = [
    'p', 'br', 'hr',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6',
    'strong', 'b', 'em', 'i', 'u', 's',
    'blockquote', 'pre', 'code',
    'ul', 'ol', 'li',
    'span', 'div',
    'a', 'img', 'iframe',
]

ALLOWED_ATTRS = {
    '*': ['class', 'style'],
    'a': ['href', 'title', 'target', 'rel'],
    'img': ['src', 'alt', 'title', 'width', 'height'],
    'iframe': ['src', 'width', 'height', 'frameborder', 'allowfullscreen'],
}

ALLOWED_CSS_PROPS = [
    'color', 'background-color',
    'font-size', 'font-weight', 'font-style', 'text-decoration',
    'text-align', 'line-height',
    'padding-left', 'margin-left',
]

css_sanitizer = CSSSanitizer(allowed_css_properties=ALLOWED_CSS_PROPS)


def sanitize_html(html):
    html = (html or '').strip()
    if not html:
        return ''

    return bleach.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRS,
        protocols=['http', 'https', 'mailto'],
        strip=True,
        css_sanitizer=css_sanitizer,
    )


def plain_text(html, length=None):
    """去掉所有标签，用于自动生成摘要"""
    text = unescape(bleach.clean(html or '', tags=[], strip=True))
    text = ' '.join(text.split())
    if length and len(text) > length:
        text = text[:length].rsplit(' ', 1)[0] + '…'
    return text
