import os
# BASE_DIR указывает на корень проекта (на уровень выше unischedule/)
BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), '..', '..'))


class Config:
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        'DATABASE_URL', 'sqlite:///' + os.path.join(BASE_DIR, 'schedule.db'))
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SECRET_KEY = os.environ.get('SECRET_KEY', 'change-me-in-production')
    JSON_SORT_KEYS = False

    # Максимальный размер загружаемого файла (импорт групп и преподавателей)
    MAX_CONTENT_LENGTH = 16 * 1024 * 1024

    # Время жизни токена авторизации в секундах (по умолчанию сутки)
    TOKEN_MAX_AGE = int(os.environ.get('TOKEN_MAX_AGE', 24 * 60 * 60))

    # Публикация расписания: пока расписание скрыто, публичные страницы
    # получают только статус и сообщение
    SCHEDULE_PUBLISHED = os.environ.get('SCHEDULE_PUBLISHED', 'true').lower() == 'true'
    SCHEDULE_HIDDEN_MESSAGE = os.environ.get('SCHEDULE_HIDDEN_MESSAGE', 'Расписание появится позже')

    # Значения по умолчанию для нового семестра
    DEFAULT_WORK_DAYS = ['MONDAY', 'TUESDAY', 'WEDNESDAY', 'THURSDAY', 'FRIDAY']
    DEFAULT_PERIODS_COUNT = 4


class TestConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SECRET_KEY = 'test-secret'
    SCHEDULE_PUBLISHED = True
