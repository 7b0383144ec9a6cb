"""
Фабрика приложения: расписание университета
"""
import logging
import click
from flask import Flask

from unischedule.core.config import Config
from unischedule.core.db_manager import db, init_db
from unischedule.core.auth import login_manager
from unischedule.core.errors import register_error_handlers, ValidationError, FieldAlreadyExistsException

logger = logging.getLogger(__name__)


def create_app(config_object=None):
    """Создает и настраивает Flask-приложение"""
    # Настройка логирования
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    app = Flask(__name__)
    app.config.from_object(config_object or Config)
    app.json.sort_keys = app.config.get('JSON_SORT_KEYS', False)

    init_db(app)
    login_manager.init_app(app)
    register_error_handlers(app)

    # Импортируем Blueprint с API маршрутами
    from unischedule.routes import api_bp
    app.register_blueprint(api_bp)

    register_commands(app)
    logger.info("Приложение создано")
    return app


def register_commands(app):
    """Команды flask: init-db и create-manager"""

    @app.cli.command('init-db')
    def init_db_command():
        """Создает таблицы БД"""
        db.create_all()
        click.echo('✅ Таблицы созданы')

    @app.cli.command('create-manager')
    @click.argument('email')
    @click.argument('password')
    def create_manager_command(email, password):
        """Создает пользователя с ролью менеджера расписания"""
        try:
            user = create_manager(email, password)
        except (ValidationError, FieldAlreadyExistsException) as e:
            raise click.ClickException(e.message)
        click.echo(f'✅ Менеджер {user.email} создан')


def create_manager(email, password):
    from unischedule.models.system import User, ROLE_MANAGER
    email = (email or '').strip().lower()
    if not email or not password:
        raise ValidationError('Email и пароль обязательны')
    if db.session.query(User).filter_by(email=email).first():
        raise FieldAlreadyExistsException(User, 'email', email)
    user = User(email=email, role=ROLE_MANAGER)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    logger.info(f"Создан менеджер {email}")
    return user
