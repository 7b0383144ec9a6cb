"""
Модели предметной области: кафедры, преподаватели, группы, аудитории,
предметы, пары, семестры, занятия и расписание
"""
from enum import Enum
from sqlalchemy import ForeignKey, UniqueConstraint, Table, Column, Integer
from unischedule.core.db_manager import db


class DayOfWeek(Enum):
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6
    SUNDAY = 7


class EvenOdd(Enum):
    EVEN = 'EVEN'
    ODD = 'ODD'
    WEEKLY = 'WEEKLY'  # занятие стоит и по четным, и по нечетным неделям


class LessonType(Enum):
    LECTURE = 'LECTURE'
    PRACTICAL = 'PRACTICAL'
    LABORATORY = 'LABORATORY'


def day_sort_key(day):
    """Ключ сортировки дня недели по порядку в неделе (а не по алфавиту)"""
    return DayOfWeek[day].value


# Связь семестра с парами и группами (many-to-many)
semester_periods = Table(
    'semester_periods',
    db.Model.metadata,
    Column('semester_id', Integer, ForeignKey('semesters.id', ondelete='CASCADE'), primary_key=True),
    Column('period_id', Integer, ForeignKey('periods.id', ondelete='CASCADE'), primary_key=True),
)

semester_groups = Table(
    'semester_groups',
    db.Model.metadata,
    Column('semester_id', Integer, ForeignKey('semesters.id', ondelete='CASCADE'), primary_key=True),
    Column('group_id', Integer, ForeignKey('groups.id', ondelete='CASCADE'), primary_key=True),
)


class Department(db.Model):
    __tablename__ = 'departments'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, unique=True)
    disable = db.Column(db.Boolean, default=False, nullable=False)

    teachers = db.relationship('Teacher', back_populates='department')


class Teacher(db.Model):
    __tablename__ = 'teachers'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(35), nullable=False)
    surname = db.Column(db.String(35), nullable=False)
    patronymic = db.Column(db.String(35), nullable=False)
    position = db.Column(db.String(35), nullable=False)
    email = db.Column(db.String(40), nullable=True)
    user_id = db.Column(db.Integer, ForeignKey('users.id'), nullable=True)
    department_id = db.Column(db.Integer, ForeignKey('departments.id'), nullable=True)
    disable = db.Column(db.Boolean, default=False, nullable=False)

    department = db.relationship('Department', back_populates='teachers')

    @property
    def short_name(self):
        """Фамилия с инициалами: 'Smith J. P.'"""
        return f"{self.surname} {self.name[:1]}. {self.patronymic[:1]}."


class Group(db.Model):
    __tablename__ = 'groups'
    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(35), nullable=False, unique=True)
    sort_order = db.Column(db.Integer, nullable=True)
    disable = db.Column(db.Boolean, default=False, nullable=False)


class RoomType(db.Model):
    __tablename__ = 'room_types'
    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(40), nullable=False, unique=True)


class Room(db.Model):
    __tablename__ = 'rooms'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(35), nullable=False)
    type_id = db.Column(db.Integer, ForeignKey('room_types.id'), nullable=True)
    sort_order = db.Column(db.Integer, nullable=True)
    disable = db.Column(db.Boolean, default=False, nullable=False)

    type = db.relationship('RoomType', backref='rooms')


class Subject(db.Model):
    __tablename__ = 'subjects'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(80), nullable=False, unique=True)
    disable = db.Column(db.Boolean, default=False, nullable=False)


class Period(db.Model):
    """Пара - фиксированный временной слот в течение дня"""
    __tablename__ = 'periods'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(20), nullable=False, unique=True)
    start_time = db.Column(db.Time, nullable=False)
    end_time = db.Column(db.Time, nullable=False)


class SemesterDay(db.Model):
    """Рабочий день недели семестра"""
    __tablename__ = 'semester_days'
    semester_id = db.Column(db.Integer, ForeignKey('semesters.id', ondelete='CASCADE'), primary_key=True)
    day_of_week = db.Column(db.String(10), primary_key=True)


class Semester(db.Model):
    __tablename__ = 'semesters'
    id = db.Column(db.Integer, primary_key=True)
    description = db.Column(db.String(100), nullable=False)
    year = db.Column(db.Integer, nullable=False)
    start_day = db.Column(db.Date, nullable=False)
    end_day = db.Column(db.Date, nullable=False)
    current_semester = db.Column(db.Boolean, default=False, nullable=False)
    default_semester = db.Column(db.Boolean, default=False, nullable=False)
    disable = db.Column(db.Boolean, default=False, nullable=False)
    __table_args__ = (UniqueConstraint('description', 'year', name='uix_semester_description_year'),)

    days = db.relationship('SemesterDay', cascade='all, delete-orphan', lazy='selectin')
    periods = db.relationship('Period', secondary=semester_periods, lazy='selectin')
    groups = db.relationship('Group', secondary=semester_groups, lazy='selectin')

    @property
    def days_of_week(self):
        """Дни семестра в порядке недели"""
        return sorted((d.day_of_week for d in self.days), key=day_sort_key)

    @days_of_week.setter
    def days_of_week(self, values):
        wanted = set(values)
        self.days = [d for d in self.days if d.day_of_week in wanted]
        present = {d.day_of_week for d in self.days}
        for day in sorted(wanted - present, key=day_sort_key):
            self.days.append(SemesterDay(day_of_week=day))

    @property
    def ordered_periods(self):
        """Пары семестра в порядке начала"""
        return sorted(self.periods, key=lambda p: (p.start_time, p.id))


class Lesson(db.Model):
    """Занятие: предмет, тип, преподаватель и группа в рамках семестра"""
    __tablename__ = 'lessons'
    id = db.Column(db.Integer, primary_key=True)
    hours = db.Column(db.Integer, nullable=False, default=1)
    link_to_meeting = db.Column(db.String(300), nullable=True)
    subject_for_site = db.Column(db.String(80), nullable=True)
    lesson_type = db.Column(db.String(20), nullable=False, default=LessonType.LECTURE.value)
    teacher_id = db.Column(db.Integer, ForeignKey('teachers.id'), nullable=False)
    subject_id = db.Column(db.Integer, ForeignKey('subjects.id'), nullable=False)
    group_id = db.Column(db.Integer, ForeignKey('groups.id'), nullable=False)
    semester_id = db.Column(db.Integer, ForeignKey('semesters.id', ondelete='CASCADE'), nullable=False)
    # Объединенное занятие: один предмет/преподаватель/тип сразу для нескольких групп
    grouped = db.Column(db.Boolean, default=False, nullable=False)

    teacher = db.relationship('Teacher', lazy='joined')
    subject = db.relationship('Subject', lazy='joined')
    group = db.relationship('Group', lazy='joined')
    semester = db.relationship('Semester')


class Schedule(db.Model):
    """Постановка занятия в расписание: день, четность недели, пара, аудитория"""
    __tablename__ = 'schedules'
    id = db.Column(db.Integer, primary_key=True)
    day_of_week = db.Column(db.String(10), nullable=False)
    even_odd = db.Column(db.String(10), nullable=False, default=EvenOdd.WEEKLY.value)
    period_id = db.Column(db.Integer, ForeignKey('periods.id'), nullable=False)
    room_id = db.Column(db.Integer, ForeignKey('rooms.id'), nullable=False)
    lesson_id = db.Column(db.Integer, ForeignKey('lessons.id', ondelete='CASCADE'), nullable=False)
    __table_args__ = (UniqueConstraint('lesson_id', 'day_of_week', 'even_odd', 'period_id',
                                       name='uix_schedule_lesson_slot'),)

    period = db.relationship('Period', lazy='joined')
    room = db.relationship('Room', lazy='joined')
    lesson = db.relationship('Lesson', lazy='joined', backref=db.backref('schedules', cascade='all, delete-orphan'))


class PublishSettings(db.Model):
    """Статус публикации расписания; в таблице одна строка"""
    __tablename__ = 'publish_settings'
    id = db.Column(db.Integer, primary_key=True)
    published = db.Column(db.Boolean, nullable=False)
    hidden_message = db.Column(db.String(255), nullable=True)
