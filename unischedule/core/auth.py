"""
Модуль авторизации: Flask-Login без серверной сессии.
Пользователь определяется по подписанному токену в заголовке Authorization.
"""
import logging
from functools import wraps
from flask import current_app, jsonify
from flask_login import LoginManager, login_required, current_user
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired
from unischedule.core.db_manager import db
from unischedule.models.system import User

logger = logging.getLogger(__name__)

TOKEN_SALT = 'auth-token'
BEARER_PREFIX = 'Bearer '

login_manager = LoginManager()


def _serializer():
    return URLSafeTimedSerializer(current_app.config['SECRET_KEY'], salt=TOKEN_SALT)


def create_token(user):
    """Создает подписанный токен с id и ролью пользователя"""
    return _serializer().dumps({'user_id': user.id, 'role': user.role})


def load_user_from_token(token):
    """Возвращает пользователя по токену или None, если токен неверный или истек"""
    try:
        payload = _serializer().loads(token, max_age=current_app.config['TOKEN_MAX_AGE'])
    except SignatureExpired:
        logger.info("Токен истек")
        return None
    except BadSignature:
        logger.warning("Получен токен с неверной подписью")
        return None
    return db.session.get(User, payload.get('user_id'))


@login_manager.request_loader
def load_user_from_request(request):
    """Загрузка пользователя из заголовка 'Authorization: Bearer <token>'"""
    header = request.headers.get('Authorization', '')
    if not header.startswith(BEARER_PREFIX):
        return None
    return load_user_from_token(header[len(BEARER_PREFIX):].strip())


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'success': False, 'error': 'Требуется авторизация'}), 401


def manager_required(f):
    """Декоратор для проверки прав менеджера расписания"""
    @wraps(f)
    @login_required
    def decorated_function(*args, **kwargs):
        if not current_user.is_manager():
            logger.warning(f"Доступ запрещен для пользователя {current_user.email}")
            return jsonify({'success': False, 'error': 'Доступ запрещен'}), 403
        return f(*args, **kwargs)
    return decorated_function


def is_manager_request():
    """Проверяет, что запрос сделан авторизованным менеджером"""
    return current_user.is_authenticated and current_user.is_manager()


__all__ = [
    'login_manager', 'login_required', 'manager_required', 'is_manager_request',
    'create_token', 'load_user_from_token', 'current_user'
]
