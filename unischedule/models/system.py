"""
Системные модели: пользователи и их роли
"""
from flask_login import UserMixin
from werkzeug.security import generate_password_hash, check_password_hash
from datetime import datetime
from unischedule.core.db_manager import db

ROLE_USER = 'ROLE_USER'
ROLE_TEACHER = 'ROLE_TEACHER'
ROLE_MANAGER = 'ROLE_MANAGER'

ROLES = (ROLE_USER, ROLE_TEACHER, ROLE_MANAGER)


class User(UserMixin, db.Model):
    """Модель пользователя (менеджеры расписания, преподаватели)"""
    __tablename__ = 'users'
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(40), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=ROLE_USER)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def set_password(self, password):
        """Установить пароль"""
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        """Проверить пароль"""
        return check_password_hash(self.password_hash, password)

    def is_manager(self):
        return self.role == ROLE_MANAGER

    def __repr__(self):
        return f'<User {self.email}>'
