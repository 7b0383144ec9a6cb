"""
Регистрация всех маршрутов приложения
"""
from flask import Blueprint

# Главный Blueprint для API маршрутов
api_bp = Blueprint('api', __name__, url_prefix='/api')

# Импортируем и регистрируем все подмодули
from . import auth, departments, teachers, groups, rooms, subjects, periods, semesters, lessons, schedules  # noqa: E402

api_bp.register_blueprint(auth.auth_bp)
api_bp.register_blueprint(departments.departments_bp)
api_bp.register_blueprint(teachers.teachers_bp)
api_bp.register_blueprint(groups.groups_bp)
api_bp.register_blueprint(rooms.rooms_bp)
api_bp.register_blueprint(subjects.subjects_bp)
api_bp.register_blueprint(periods.periods_bp)
api_bp.register_blueprint(semesters.semesters_bp)
api_bp.register_blueprint(lessons.lessons_bp)
api_bp.register_blueprint(schedules.schedules_bp)

__all__ = ['api_bp']
