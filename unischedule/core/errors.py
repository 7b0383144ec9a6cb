"""
Исключения приложения и их преобразование в JSON-ответы
"""
import logging
from flask import jsonify
from sqlalchemy.exc import IntegrityError
from werkzeug.exceptions import HTTPException

logger = logging.getLogger(__name__)


class ScheduleAppError(Exception):
    """Базовое исключение: сообщение для пользователя и HTTP-статус"""
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class EntityNotFoundException(ScheduleAppError):
    status_code = 404

    def __init__(self, entity, field='id', value=None):
        name = entity if isinstance(entity, str) else entity.__name__
        self.entity_name = name
        super().__init__(f'Запись {name} с {field}={value} не найдена')


class EntityAlreadyExistsException(ScheduleAppError):
    pass


class FieldAlreadyExistsException(ScheduleAppError):

    def __init__(self, entity, field, value):
        name = entity if isinstance(entity, str) else entity.__name__
        super().__init__(f'Запись {name} с {field}={value} уже существует')


class ScheduleConflictException(ScheduleAppError):
    pass


class PeriodConflictException(ScheduleConflictException):
    """Пара пересекается по времени с уже существующей"""


class IncorrectTimeException(ScheduleAppError):
    pass


class UsedEntityException(ScheduleAppError):
    pass


class ValidationError(ScheduleAppError):
    pass


class ParseFileException(ScheduleAppError):
    pass


class IncorrectPasswordException(ScheduleAppError):
    status_code = 401


def _error_response(message, status_code):
    return jsonify({'success': False, 'error': message}), status_code


def register_error_handlers(app):
    """Регистрирует обработчики ошибок для всего приложения"""

    @app.errorhandler(ScheduleAppError)
    def handle_app_error(error):
        logger.error(error.message)
        return _error_response(error.message, error.status_code)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(error):
        from unischedule.core.db_manager import db
        db.session.rollback()
        logger.error(f"Нарушение целостности данных: {error.orig}")
        return _error_response('Нарушение целостности данных', 500)

    @app.errorhandler(HTTPException)
    def handle_http_error(error):
        logger.error(f"{error.code} {error.name}: {error.description}")
        return _error_response(error.description, error.code)
