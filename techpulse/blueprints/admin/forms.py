from flask_wtf import FlaskForm
from flask_wtf.file import FileField, FileAllowed, FileRequired, MultipleFileField
from wtforms import StringField, TextAreaField, SelectField, SubmitField
from wtforms.validators import DataRequired, Length, Optional

from techpulse.models import ARTICLE_STATUSES
from techpulse.utils.file_helper import IMAGE_EXTENSIONS
from techpulse.utils.validators import validate_slug

IMAGES_ONLY = FileAllowed(sorted(IMAGE_EXTENSIONS), 'Images only!')


class ArticleForm(FlaskForm):
    """文章编辑表单 (category 选项在视图中按当前分类填充)"""
    title = StringField('Title', validators=[DataRequired(), Length(max=256)])
    slug = StringField('Slug', validators=[Optional(), Length(max=200), validate_slug])
    category = SelectField('Category', validators=[DataRequired()])
    status = SelectField('Status', choices=[(s, s.capitalize()) for s in ARTICLE_STATUSES],
                         default='draft')
    excerpt = TextAreaField('Excerpt', validators=[Optional(), Length(max=500)])
    # content 存储富文本编辑器生成的 HTML
    content = TextAreaField('Content', validators=[DataRequired()])
    featured_image = StringField('Featured image URL', validators=[Optional(), Length(max=512)])
    image = FileField('Upload featured image', validators=[IMAGES_ONLY])
    submit = SubmitField('Save')

    def to_data(self):
        return {
            'title': self.title.data,
            'slug': self.slug.data,
            'category': self.category.data,
            'status': self.status.data,
            'excerpt': self.excerpt.data,
            'content': self.content.data,
            'featured_image': self.featured_image.data,
        }


class CategoryForm(FlaskForm):
    """分类表单"""
    name = StringField('Name', validators=[DataRequired(), Length(max=64)])
    slug = StringField('Slug', validators=[Optional(), Length(max=64), validate_slug])
    description = TextAreaField('Description', validators=[Optional()])
    submit = SubmitField('Add Category')


class UploadForm(FlaskForm):
    """媒体上传表单 (一次可选多张图片)"""
    files = MultipleFileField('Images', validators=[FileRequired('Please choose a file to upload'), IMAGES_ONLY])
    submit = SubmitField('Upload')
