"""
Общие фикстуры: приложение на SQLite в памяти, клиент, токен менеджера и справочники
"""
from datetime import date, time
from types import SimpleNamespace

import pytest

from unischedule import create_app, create_manager
from unischedule.core.auth import create_token
from unischedule.core.config import TestConfig
from unischedule.core.db_manager import db
from unischedule.models import (
    Department, Teacher, Group, RoomType, Room, Subject, Period, Semester
)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def manager_headers(app):
    with app.app_context():
        token = create_token(create_manager('manager@university.test', 'secret-password'))
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def seed(app):
    """
    Справочники и текущий семестр (понедельник и вторник, две пары, три группы).
    Возвращает идентификаторы созданных записей.
    """
    with app.app_context():
        department = Department(name='Кафедра информатики')
        ivanov = Teacher(name='Иван', surname='Иванов', patronymic='Иванович',
                         position='Доцент', department=department)
        petrov = Teacher(name='Петр', surname='Петров', patronymic='Петрович',
                         position='Профессор', department=department)
        groups = [Group(title=f'ИВТ-10{i}', sort_order=i) for i in (1, 2, 3)]
        lecture_hall = RoomType(description='Лекционная')
        room_101 = Room(name='101', type=lecture_hall, sort_order=1)
        room_202 = Room(name='202', type=lecture_hall, sort_order=2)
        math = Subject(name='Математика')
        physics = Subject(name='Физика')
        first = Period(name='1', start_time=time(8, 30), end_time=time(10, 0))
        second = Period(name='2', start_time=time(10, 10), end_time=time(11, 40))
        semester = Semester(
            description='Осенний', year=2024,
            start_day=date(2024, 9, 1), end_day=date(2024, 12, 31),
            current_semester=True, default_semester=True,
        )
        semester.days_of_week = ['MONDAY', 'TUESDAY']
        semester.periods = [first, second]
        semester.groups = groups

        db.session.add_all([department, ivanov, petrov, lecture_hall, room_101, room_202,
                            math, physics, first, second, semester, *groups])
        db.session.commit()

        return SimpleNamespace(
            department_id=department.id,
            ivanov_id=ivanov.id,
            petrov_id=petrov.id,
            group_ids=[g.id for g in groups],
            room_type_id=lecture_hall.id,
            room_101_id=room_101.id,
            room_202_id=room_202.id,
            math_id=math.id,
            physics_id=physics.id,
            first_period_id=first.id,
            second_period_id=second.id,
            semester_id=semester.id,
        )


@pytest.fixture
def create_lessons(client, manager_headers, seed):
    """Создает занятие через API и возвращает JSON ответа"""
    def _create(group_ids, subject_id=None, teacher_id=None, lesson_type='LECTURE', hours=2, **extra):
        body = {
            'subject_id': subject_id or seed.math_id,
            'teacher_id': teacher_id or seed.ivanov_id,
            'lesson_type': lesson_type,
            'hours': hours,
            'group_ids': group_ids,
        }
        body.update(extra)
        response = client.post('/api/lessons', json=body, headers=manager_headers)
        assert response.status_code == 201, response.get_json()
        return response.get_json()
    return _create


@pytest.fixture
def place(client, manager_headers, seed):
    """Ставит занятие в слот через API и возвращает ответ"""
    def _place(lesson_id, day='MONDAY', even_odd='WEEKLY', period_id=None, room_id=None):
        return client.post('/api/schedules', json={
            'lesson_id': lesson_id,
            'room_id': room_id or seed.room_101_id,
            'period_id': period_id or seed.first_period_id,
            'day_of_week': day,
            'even_odd': even_odd,
        }, headers=manager_headers)
    return _place
