from urllib.parse import urlsplit

from flask import render_template, redirect, request, url_for, flash, abort, current_app
from flask_login import login_user, logout_user, login_required, current_user

from techpulse.extensions import db
from techpulse.models import User
from techpulse.blueprints.auth import auth_bp
from techpulse.blueprints.auth.forms import LoginForm, RegisterForm


def _is_local_path(target):
    """只接受站内绝对路径；// 与 /\\ 开头会被浏览器当作外部地址"""
    if not target or not target.startswith('/') or target.startswith(('//', '/\\')):
        return False
    parts = urlsplit(target)
    return not parts.scheme and not parts.netloc


@auth_bp.route('/admin', methods=['GET', 'POST'])
def login():
    # 如果已登录，直接跳到仪表盘
    if current_user.is_authenticated:
        return redirect(url_for('admin.dashboard'))

    form = LoginForm()
    if form.validate_on_submit():
        user = User.query.filter_by(email=form.email.data.strip().lower()).first()

        # 用户不存在与密码错误返回同样的提示
        if user is None or not user.verify_password(form.password.data):
            current_app.logger.warning(f'🔒 登录失败: {form.email.data}')
            flash('Invalid email or password', 'danger')
            return render_template('auth/login.html', form=form), 401

        if not user.is_active:
            flash('This account has been disabled.', 'danger')
            return render_template('auth/login.html', form=form), 403

        login_user(user, remember=form.remember_me.data)
        user.record_login()
        current_app.logger.info(f'✅ 编辑登录: {user.email}')

        # 处理 Next 跳转 (防止开放重定向攻击)
        next_page = request.args.get('next')
        if not _is_local_path(next_page):
            next_page = url_for('admin.dashboard')
        return redirect(next_page)

    return render_template('auth/login.html', form=form)


@auth_bp.route('/admin/logout')
@login_required
def logout():
    current_app.logger.info(f'编辑退出: {current_user.email}')
    logout_user()
    flash('You have been signed out.', 'info')
    return redirect(url_for('auth.login'))


@auth_bp.route('/admin/register', methods=['GET', 'POST'])
def register():
    """注册编辑账号，同时设置展示名"""
    if not current_app.config.get('ALLOW_REGISTRATION', True):
        abort(404)
    if current_user.is_authenticated:
        return redirect(url_for('admin.dashboard'))

    form = RegisterForm()
    if form.validate_on_submit():
        email = form.email.data.strip().lower()
        if User.query.filter_by(email=email).first():
            flash('That email address is already registered.', 'warning')
            return render_template('auth/register.html', form=form), 409

        user = User(
            email=email,
            display_name=form.display_name.data.strip(),
            password=form.password.data,  # Setter 会自动 Hash
        )
        db.session.add(user)
        db.session.commit()
        current_app.logger.info(f'🆕 新编辑注册: {email}')

        login_user(user)
        flash(f'Welcome, {user.name}!', 'success')
        return redirect(url_for('admin.dashboard'))

    return render_template('auth/register.html', form=form)
