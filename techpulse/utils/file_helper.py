import time
import uuid
from werkzeug.utils import secure_filename

IMAGE_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}


def get_file_extension(filename):
    """从文件名获取扩展名"""
    if not filename or '.' not in filename:
        return None
    return filename.rsplit('.', 1)[1].lower()


def is_image_file(filename):
    """检查文件扩展名是否为允许的图片类型"""
    return get_file_extension(filename) in IMAGE_EXTENSIONS


def build_object_name(filename):
    """
    生成对象存储文件名：{毫秒时间戳}-{安全文件名}
    secure_filename 可能会清空非 ASCII 字符，此时使用 uuid
    """
    ext = get_file_extension(filename)
    safe_name = secure_filename(filename or '')
    if not safe_name or '.' not in safe_name:
        safe_name = f"file_{uuid.uuid4().hex[:8]}.{ext or 'bin'}"
    return f"{int(time.time() * 1000)}-{safe_name}"


def format_size(size):
    """将字节转换为易读格式 (KB, MB)"""
    size = size or 0
    power = 2**10
    n = 0
    power_labels = {0: '', 1: 'K', 2: 'M', 3: 'G', 4: 'T'}
    while size > power and n < 4:
        size /= power
        n += 1
    return f"{size:.1f} {power_labels[n]}B"
