from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from techpulse.extensions import db
from .base import BaseModel, utcnow


class User(UserMixin, BaseModel):
    """编辑账号 (后台登录身份)"""
    __tablename__ = 'auth_users'
    email = db.Column(db.String(128), unique=True, index=True, nullable=False)
    display_name = db.Column(db.String(64))
    password_hash = db.Column(db.String(256))

    is_active_user = db.Column(db.Boolean, default=True)  # 封号开关
    last_login = db.Column(db.DateTime)

    @property
    def password(self):
        raise AttributeError('password is not a readable attribute')

    @password.setter
    def password(self, password):
        self.password_hash = generate_password_hash(password)

    def verify_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def record_login(self):
        self.last_login = utcnow()
        db.session.commit()

    @property
    def name(self):
        """展示名，未设置时回退到邮箱前缀"""
        return self.display_name or self.email.split('@')[0]

    # Flask-Login 必须属性覆盖
    @property
    def is_active(self):
        return bool(self.is_active_user)

    def __repr__(self):
        return f'<User {self.email}>'
