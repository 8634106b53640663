"""
对象存储工具模块
配置了 Cloudinary 时上传到云端，否则保存到本地 UPLOAD_FOLDER 并由应用提供访问
两种后端都返回稳定的公开 URL，并支持按存储路径删除
"""
import os

import cloudinary
import cloudinary.uploader
from flask import current_app, url_for

from techpulse.exceptions import StorageError
from techpulse.utils.file_helper import build_object_name

BACKEND_LOCAL = 'local'
BACKEND_CLOUDINARY = 'cloudinary'

# Cloudinary 是否已完成配置（应用启动时初始化）
_cloudinary_configured = False


def init_cloud_storage(app):
    """初始化云存储配置"""
    global _cloudinary_configured

    cloudinary_url = app.config.get('CLOUDINARY_URL')
    cloud_name = app.config.get('CLOUDINARY_CLOUD_NAME')
    api_key = app.config.get('CLOUDINARY_API_KEY')
    api_secret = app.config.get('CLOUDINARY_API_SECRET')

    if cloudinary_url:
        cloudinary.config(cloudinary_url=cloudinary_url)
        _cloudinary_configured = True
    elif cloud_name and api_key and api_secret:
        cloudinary.config(
            cloud_name=cloud_name,
            api_key=api_key,
            api_secret=api_secret,
            secure=True
        )
        _cloudinary_configured = True
    else:
        _cloudinary_configured = False

    if _cloudinary_configured:
        app.logger.info('✅ Cloudinary 云存储已配置')
    else:
        app.logger.info('ℹ️ 未配置云存储，使用本地文件系统')


def is_cloud_storage_enabled():
    """检查云存储是否可用"""
    use_cloud = str(current_app.config.get('USE_CLOUD_STORAGE', 'auto')).lower()

    if use_cloud in ('false', '0'):
        return False
    # true / auto: 已配置即启用
    return _cloudinary_configured


def upload_file(file, folder='media'):
    """
    上传文件到对象存储

    Args:
        file: werkzeug FileStorage
        folder: 存储目录，例如 'media' 或 'images/posts'

    Returns:
        dict: {'path': 存储路径, 'url': 公开URL, 'backend': 后端名称, 'size': 字节数}

    Raises:
        StorageError: 上传失败
    """
    object_name = build_object_name(file.filename)

    if is_cloud_storage_enabled():
        return _upload_to_cloudinary(file, folder, object_name)
    return _save_local(file, folder, object_name)


def delete_file(path, backend=BACKEND_LOCAL):
    """
    从对象存储删除文件；文件已不存在时视为成功

    Raises:
        StorageError: 删除失败
    """
    if backend == BACKEND_CLOUDINARY:
        try:
            result = cloudinary.uploader.destroy(path, resource_type='image')
        except Exception as e:
            current_app.logger.error(f'❌ 删除云存储文件失败: {path} - {e}')
            raise StorageError(f'Could not delete {path} from cloud storage') from e
        if result.get('result') not in ('ok', 'not found'):
            current_app.logger.warning(f'⚠️ 云存储文件删除失败: {path} - {result}')
            raise StorageError(f'Could not delete {path} from cloud storage')
        current_app.logger.info(f'✅ 云存储文件已删除: {path}')
        return

    full_path = _local_path(path)
    try:
        if os.path.exists(full_path):
            os.remove(full_path)
    except OSError as e:
        current_app.logger.error(f'❌ 删除本地文件失败: {full_path} - {e}')
        raise StorageError(f'Could not delete {path}') from e
    current_app.logger.info(f'✅ 本地文件已删除: {path}')


def _upload_to_cloudinary(file, folder, object_name):
    public_id = os.path.splitext(object_name)[0]
    try:
        result = cloudinary.uploader.upload(
            file,
            folder=f'techpulse/{folder}',
            public_id=public_id,
            resource_type='image',
            overwrite=False,
        )
    except Exception as e:
        current_app.logger.error(f'❌ 云存储上传失败: {e}')
        raise StorageError(f'Could not upload {file.filename}') from e

    current_app.logger.info(f'✅ 文件上传到云存储: {result.get("secure_url")}')
    return {
        'path': result.get('public_id'),
        'url': result.get('secure_url'),
        'backend': BACKEND_CLOUDINARY,
        'size': result.get('bytes'),
    }


def _save_local(file, folder, object_name):
    relative_path = f'{folder}/{object_name}'
    full_path = _local_path(relative_path)
    try:
        os.makedirs(os.path.dirname(full_path), exist_ok=True)
        file.save(full_path)
    except OSError as e:
        current_app.logger.error(f'❌ 本地文件保存失败: {full_path} - {e}')
        raise StorageError(f'Could not save {file.filename}') from e

    size = os.path.getsize(full_path)
    current_app.logger.info(f'save_file: 文件保存成功 {relative_path}, 大小 = {size}')
    return {
        'path': relative_path,
        'url': url_for('blog.uploaded_file', filename=relative_path),
        'backend': BACKEND_LOCAL,
        'size': size,
    }


def _local_path(relative_path):
    upload_folder = current_app.config['UPLOAD_FOLDER']
    full_path = os.path.abspath(os.path.join(upload_folder, relative_path))
    if not full_path.startswith(os.path.abspath(upload_folder) + os.sep):
        raise StorageError(f'Invalid storage path: {relative_path}')
    return full_path
