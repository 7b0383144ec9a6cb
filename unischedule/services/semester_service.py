"""
Семестры: проверки, текущий/основной семестр, копирование семестра
"""
import logging
from flask import current_app
from unischedule.core.db_manager import db, get_by_id_or_raise
from unischedule.core.errors import (
    EntityAlreadyExistsException, IncorrectTimeException, ScheduleConflictException,
    UsedEntityException
)
from unischedule.models.university import Semester, Period, Group, Lesson, Schedule

logger = logging.getLogger(__name__)


def get_semester(semester_id):
    return get_by_id_or_raise(Semester, semester_id)


def get_current_semester():
    semester = db.session.query(Semester).filter_by(current_semester=True).first()
    if semester is None:
        raise ScheduleConflictException('Текущий семестр не задан')
    return semester


def get_default_semester():
    semester = db.session.query(Semester).filter_by(default_semester=True).first()
    if semester is None:
        raise ScheduleConflictException('Семестр по умолчанию не задан')
    return semester


def _check_constraints(semester):
    if semester.start_day >= semester.end_day:
        raise IncorrectTimeException('Дата окончания должна быть позже даты начала')
    with db.session.no_autoflush:
        existing = db.session.query(Semester).filter_by(
            description=semester.description, year=semester.year).first()
    if existing is not None and existing.id != semester.id:
        raise EntityAlreadyExistsException('Семестр с таким описанием и годом уже существует')


def _fill_default_values(semester):
    """Пустые дни - рабочая неделя, пустые пары - первые пары по времени"""
    if not semester.days:
        semester.days_of_week = current_app.config['DEFAULT_WORK_DAYS']
    if not semester.periods:
        count = current_app.config['DEFAULT_PERIODS_COUNT']
        semester.periods = db.session.query(Period).order_by(Period.start_time).limit(count).all()


def _apply_flags(semester):
    """В системе ровно один текущий и один основной семестр"""
    if semester.current_semester:
        db.session.query(Semester).filter(Semester.id != semester.id).update({'current_semester': False})
    if semester.default_semester:
        db.session.query(Semester).filter(Semester.id != semester.id).update({'default_semester': False})


def _days_in_schedule(semester_id):
    rows = db.session.query(Schedule.day_of_week).join(Lesson).filter(
        Lesson.semester_id == semester_id).distinct().all()
    return {row[0] for row in rows}


def _periods_in_schedule(semester_id):
    rows = db.session.query(Schedule.period_id).join(Lesson).filter(
        Lesson.semester_id == semester_id).distinct().all()
    return {row[0] for row in rows}


def create_semester(semester):
    logger.info(f"In create_semester(description = [{semester.description}], year = [{semester.year}])")
    _check_constraints(semester)
    _fill_default_values(semester)
    db.session.add(semester)
    db.session.flush()
    _apply_flags(semester)
    db.session.commit()
    return semester


def update_semester(semester):
    """Обновление; нельзя убрать дни и пары, в которых уже стоят занятия"""
    logger.info(f"In update_semester(id = [{semester.id}])")
    _check_constraints(semester)
    if not _periods_in_schedule(semester.id) <= {p.id for p in semester.periods}:
        raise UsedEntityException('Нельзя убрать пары, в которых уже стоят занятия')
    if not _days_in_schedule(semester.id) <= set(semester.days_of_week):
        raise UsedEntityException('Нельзя убрать дни, в которые уже стоят занятия')
    _apply_flags(semester)
    db.session.commit()
    return semester


def delete_semester(semester_id):
    logger.info(f"In delete_semester(id = [{semester_id}])")
    semester = get_semester(semester_id)
    lesson_ids = [row[0] for row in db.session.query(Lesson.id).filter_by(semester_id=semester_id).all()]
    if lesson_ids:
        db.session.query(Schedule).filter(Schedule.lesson_id.in_(lesson_ids)).delete(synchronize_session=False)
        db.session.query(Lesson).filter(Lesson.id.in_(lesson_ids)).delete(synchronize_session=False)
    db.session.delete(semester)
    db.session.commit()


def change_current_semester(semester_id):
    logger.info(f"In change_current_semester(semester_id = [{semester_id}])")
    semester = get_semester(semester_id)
    semester.current_semester = True
    _apply_flags(semester)
    db.session.commit()
    return semester


def change_default_semester(semester_id):
    logger.info(f"In change_default_semester(semester_id = [{semester_id}])")
    semester = get_semester(semester_id)
    semester.default_semester = True
    _apply_flags(semester)
    db.session.commit()
    return semester


def add_groups_to_semester(semester_id, group_ids):
    logger.info(f"In add_groups_to_semester(semester_id = [{semester_id}], group_ids = [{group_ids}])")
    semester = get_semester(semester_id)
    groups = db.session.query(Group).filter(Group.id.in_(group_ids)).all() if group_ids else []
    semester.groups = groups
    db.session.commit()
    return semester


def copy_semester(from_semester_id, to_semester_id):
    """
    Копирует в семестр to_semester_id группы, дни, пары, занятия и расписание
    семестра from_semester_id. Прежнее содержимое целевого семестра заменяется.
    """
    logger.info(f"In copy_semester(from = [{from_semester_id}], to = [{to_semester_id}])")
    if from_semester_id == to_semester_id:
        raise ScheduleConflictException('Нельзя копировать семестр сам в себя')
    source = get_semester(from_semester_id)
    target = get_semester(to_semester_id)

    target.groups = list(source.groups)
    target.days_of_week = source.days_of_week
    target.periods = list(source.periods)

    schedules = db.session.query(Schedule).join(Lesson).filter(Lesson.semester_id == source.id).all()
    new_lessons = {}
    for schedule in schedules:
        lesson = schedule.lesson
        if lesson.id not in new_lessons:
            copy = Lesson(
                semester=target,
                hours=lesson.hours,
                lesson_type=lesson.lesson_type,
                subject_for_site=lesson.subject_for_site,
                link_to_meeting=lesson.link_to_meeting,
                group_id=lesson.group_id,
                subject_id=lesson.subject_id,
                teacher_id=lesson.teacher_id,
                grouped=lesson.grouped,
            )
            db.session.add(copy)
            new_lessons[lesson.id] = copy
        db.session.add(Schedule(
            day_of_week=schedule.day_of_week,
            even_odd=schedule.even_odd,
            period_id=schedule.period_id,
            room_id=schedule.room_id,
            lesson=new_lessons[lesson.id],
        ))
    db.session.commit()
    logger.info(f"Скопировано занятий: {len(new_lessons)}, записей расписания: {len(schedules)}")
    return target
