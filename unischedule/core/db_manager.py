"""
Менеджер базы данных: один экземпляр SQLAlchemy на всё приложение
"""
import logging
from contextlib import contextmanager
from flask_sqlalchemy import SQLAlchemy
from unischedule.core.errors import EntityNotFoundException

logger = logging.getLogger(__name__)

db = SQLAlchemy()


def init_db(app):
    """Инициализирует SQLAlchemy и создает таблицы, если их нет"""
    db.init_app(app)
    with app.app_context():
        # Импорт регистрирует модели в metadata
        from unischedule import models  # noqa: F401
        db.create_all()
    logger.info(f"БД инициализирована: {app.config['SQLALCHEMY_DATABASE_URI']}")


def get_by_id_or_raise(model, entity_id):
    """Возвращает запись по id или выбрасывает EntityNotFoundException"""
    entity = db.session.get(model, entity_id) if entity_id is not None else None
    if entity is None:
        raise EntityNotFoundException(model, 'id', entity_id)
    return entity


@contextmanager
def transaction():
    """
    Контекст для изменения данных: commit при успехе, rollback при любой ошибке.
    Исключение пробрасывается дальше, его обрабатывает register_error_handlers.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
