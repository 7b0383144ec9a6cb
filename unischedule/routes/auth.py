"""
Вход, регистрация и текущий пользователь
"""
import logging
import re
from flask import Blueprint, jsonify
from unischedule.core.auth import create_token, login_required, current_user
from unischedule.core.db_manager import db
from unischedule.core.errors import (
    FieldAlreadyExistsException, IncorrectPasswordException, ValidationError
)
from unischedule.models.system import User, ROLE_USER
from unischedule.routes.utils import get_json_body, clean_string
from unischedule.services.mappers import user_to_dict

logger = logging.getLogger(__name__)

auth_bp = Blueprint('auth', __name__, url_prefix='/auth')

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')
MIN_PASSWORD_LENGTH = 6


@auth_bp.route('/sign-in', methods=['POST'])
def sign_in():
    """Выдает токен по email и паролю"""
    data = get_json_body()
    email = clean_string(data, 'email').lower()
    password = data.get('password') or ''
    logger.info(f"In sign_in(email = [{email}])")

    user = db.session.query(User).filter_by(email=email).first()
    if user is None or not user.check_password(password):
        raise IncorrectPasswordException('Неверный email или пароль')
    return jsonify({'success': True, 'token': create_token(user), 'user': user_to_dict(user)})


@auth_bp.route('/sign-up', methods=['POST'])
def sign_up():
    """Регистрация обычного пользователя"""
    data = get_json_body()
    email = clean_string(data, 'email', max_length=40).lower()
    password = data.get('password') or ''
    logger.info(f"In sign_up(email = [{email}])")

    if not EMAIL_RE.match(email):
        raise ValidationError('Некорректный формат email')
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f'Пароль должен содержать не менее {MIN_PASSWORD_LENGTH} символов')
    if db.session.query(User).filter_by(email=email).first():
        raise FieldAlreadyExistsException(User, 'email', email)

    user = User(email=email, role=ROLE_USER)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    return jsonify({'success': True, 'user': user_to_dict(user)}), 201


@auth_bp.route('/me')
@login_required
def me():
    return jsonify({'success': True, 'user': user_to_dict(current_user)})
