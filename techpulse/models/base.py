from datetime import datetime, timezone
from techpulse.extensions import db


def utcnow():
    """当前 UTC 时间 (naive，与数据库存储保持一致)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class BaseModel(db.Model):
    """
    TechPulse 模型基类
    包含：ID主键, 创建时间 (列表排序键), 更新时间
    """
    __abstract__ = True

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
