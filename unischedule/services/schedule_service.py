"""
Работа с расписанием: постановка занятий с проверкой конфликтов, удаление,
смена аудитории и загрузка данных для представлений расписания
"""
import logging
from flask import current_app
from unischedule.core.db_manager import db, get_by_id_or_raise
from unischedule.core.errors import ScheduleConflictException, EntityAlreadyExistsException
from unischedule.models.university import (
    EvenOdd, Group, Lesson, Period, PublishSettings, Room, Schedule, Teacher
)
from unischedule.services import schedule_views
from unischedule.services.lesson_service import get_lesson, grouped_lessons_of
from unischedule.services.mappers import groups_to_refs, group_sort_key, room_sort_key
from unischedule.services.semester_service import get_semester

logger = logging.getLogger(__name__)


def _overlapping_parities(even_odd):
    """Четности, которые занимают тот же слот: WEEKLY пересекается с любой"""
    if even_odd == EvenOdd.WEEKLY.value:
        return [e.value for e in EvenOdd]
    return [even_odd, EvenOdd.WEEKLY.value]


def _slot_query(semester_id, day_of_week, even_odd, period_id):
    return db.session.query(Schedule).join(Lesson).filter(
        Lesson.semester_id == semester_id,
        Schedule.day_of_week == day_of_week,
        Schedule.period_id == period_id,
        Schedule.even_odd.in_(_overlapping_parities(even_odd)),
    )


def is_conflict_for_group(semester_id, day_of_week, even_odd, period_id, group_id, exclude_id=None):
    query = _slot_query(semester_id, day_of_week, even_odd, period_id).filter(Lesson.group_id == group_id)
    if exclude_id is not None:
        query = query.filter(Schedule.id != exclude_id)
    return query.count() != 0


def is_teacher_available(semester_id, day_of_week, even_odd, period_id, teacher_id, lesson=None):
    """
    Преподаватель свободен, если в слоте у него нет занятий,
    кроме занятий того же объединенного набора
    """
    query = _slot_query(semester_id, day_of_week, even_odd, period_id).filter(Lesson.teacher_id == teacher_id)
    if lesson is not None:
        query = query.filter(Lesson.id.notin_([l.id for l in grouped_lessons_of(lesson)]))
    return query.count() == 0


def rooms_with_availability(semester_id, day_of_week, even_odd, period_id):
    """Все действующие аудитории с отметкой, свободна ли аудитория в слоте"""
    busy = {row.room_id for row in _slot_query(semester_id, day_of_week, even_odd, period_id).all()}
    rooms = db.session.query(Room).filter_by(disable=False).all()
    return [(room, room.id not in busy) for room in sorted(rooms, key=room_sort_key)]


def free_rooms(semester_id, day_of_week, even_odd, period_id):
    return [room for room, available in rooms_with_availability(semester_id, day_of_week, even_odd, period_id)
            if available]


def info_for_creating_schedule(semester_id, day_of_week, even_odd, period_id, lesson_id):
    """Данные перед постановкой занятия: свободен ли преподаватель и какие аудитории свободны"""
    logger.info(f"In info_for_creating_schedule(semester_id = [{semester_id}], day = [{day_of_week}], "
                f"even_odd = [{even_odd}], period_id = [{period_id}], lesson_id = [{lesson_id}])")
    lesson = get_lesson(lesson_id)
    if is_conflict_for_group(semester_id, day_of_week, even_odd, period_id, lesson.group_id):
        raise ScheduleConflictException('У группы уже есть занятие в это время')
    return {
        'teacher_available': is_teacher_available(semester_id, day_of_week, even_odd, period_id,
                                                  lesson.teacher_id, lesson),
        'rooms': rooms_with_availability(semester_id, day_of_week, even_odd, period_id),
    }


def list_schedules(semester_id):
    get_semester(semester_id)
    return db.session.query(Schedule).join(Lesson).filter(
        Lesson.semester_id == semester_id).order_by(Schedule.id).all()


def save_schedule(lesson_id, room_id, period_id, day_of_week, even_odd):
    """
    Ставит занятие в слот. Объединенное занятие ставится для всех групп набора
    в ту же аудиторию. Возвращает созданные записи.
    """
    logger.info(f"In save_schedule(lesson_id = [{lesson_id}], room_id = [{room_id}], period_id = [{period_id}], "
                f"day = [{day_of_week}], even_odd = [{even_odd}])")
    lesson = get_lesson(lesson_id)
    room = get_by_id_or_raise(Room, room_id)
    period = get_by_id_or_raise(Period, period_id)

    created = []
    with db.session.no_autoflush:
        for target in grouped_lessons_of(lesson):
            duplicate = db.session.query(Schedule).filter_by(
                lesson_id=target.id, period_id=period.id, even_odd=even_odd, day_of_week=day_of_week).count()
            if duplicate:
                logger.error(f"Занятие группы {target.group.title} уже стоит в этом слоте")
                raise EntityAlreadyExistsException('Занятие уже стоит в этом слоте')
            if is_conflict_for_group(target.semester_id, day_of_week, even_odd, period.id, target.group_id):
                logger.error(f"Конфликт расписания для группы id={target.group_id}")
                raise ScheduleConflictException('У группы уже есть занятие в это время')
            created.append(Schedule(lesson=target, room=room, period=period,
                                    day_of_week=day_of_week, even_odd=even_odd))
    db.session.add_all(created)
    db.session.commit()
    return created


def change_room(schedule_id, room_id):
    logger.info(f"In change_room(schedule_id = [{schedule_id}], room_id = [{room_id}])")
    schedule = get_by_id_or_raise(Schedule, schedule_id)
    if schedule.room_id == room_id:
        return schedule
    schedule.room = get_by_id_or_raise(Room, room_id)
    db.session.commit()
    return schedule


def _grouped_placements(schedule):
    """Записи того же слота для всех занятий объединенного набора"""
    lesson_ids = [lesson.id for lesson in grouped_lessons_of(schedule.lesson)]
    return db.session.query(Schedule).filter(
        Schedule.lesson_id.in_(lesson_ids),
        Schedule.day_of_week == schedule.day_of_week,
        Schedule.even_odd == schedule.even_odd,
        Schedule.period_id == schedule.period_id,
    ).all()


def delete_schedule(schedule_id):
    """Удаляет запись; для объединенного занятия - записи всех групп набора"""
    logger.info(f"In delete_schedule(id = [{schedule_id}])")
    schedule = get_by_id_or_raise(Schedule, schedule_id)
    targets = _grouped_placements(schedule) if schedule.lesson.grouped else [schedule]
    deleted_ids = [target.id for target in targets]
    for target in targets:
        db.session.delete(target)
    db.session.commit()
    return deleted_ids


def delete_schedules_by_semester(semester_id):
    logger.info(f"In delete_schedules_by_semester(semester_id = [{semester_id}])")
    get_semester(semester_id)
    lesson_ids = db.select(Lesson.id).where(Lesson.semester_id == semester_id)
    deleted = db.session.query(Schedule).filter(Schedule.lesson_id.in_(lesson_ids)).delete(
        synchronize_session=False)
    db.session.commit()
    return deleted


# --- Публикация ---

def _publish_settings():
    """
    Строка статуса публикации. Пока ее нет, действуют значения из конфигурации;
    строка создается при первом изменении статуса и общая для всех процессов.
    """
    settings = db.session.get(PublishSettings, 1)
    if settings is None:
        settings = PublishSettings(
            id=1,
            published=current_app.config['SCHEDULE_PUBLISHED'],
            hidden_message=current_app.config['SCHEDULE_HIDDEN_MESSAGE'],
        )
    return settings


def publish_status():
    settings = _publish_settings()
    return {
        'published': settings.published,
        'message': None if settings.published else settings.hidden_message,
    }


def set_published(published, message=None):
    logger.info(f"In set_published(published = [{published}])")
    settings = _publish_settings()
    settings.published = published
    if message:
        settings.hidden_message = message
    db.session.add(settings)
    db.session.commit()
    return publish_status()


# --- Представления расписания ---

def _semester_schedules(semester_id, *criteria):
    query = db.session.query(Schedule).join(Lesson).filter(Lesson.semester_id == semester_id, *criteria)
    return query.order_by(Schedule.id).all()


def _sorted_schedules(schedules):
    """Порядок занятий внутри ячейки - по порядку групп"""
    return sorted(schedules, key=lambda s: group_sort_key(s.lesson.group))


def room_views(semester_id):
    """Расписание всех действующих аудиторий семестра"""
    logger.info(f"In room_views(semester_id = [{semester_id}])")
    grid = schedule_views.SemesterGrid.from_semester(get_semester(semester_id))
    rooms = sorted(db.session.query(Room).filter_by(disable=False).all(), key=room_sort_key)
    schedules = _sorted_schedules(_semester_schedules(semester_id))
    return schedule_views.compose_room_views(rooms, grid, schedules, groups_to_refs)


def group_views(semester_id, group_id=None):
    """Расписание групп семестра или одной группы"""
    logger.info(f"In group_views(semester_id = [{semester_id}], group_id = [{group_id}])")
    semester = get_semester(semester_id)
    grid = schedule_views.SemesterGrid.from_semester(semester)
    if group_id is not None:
        groups = [get_by_id_or_raise(Group, group_id)]
        schedules = _semester_schedules(semester_id, Lesson.group_id == group_id)
    else:
        groups = sorted(semester.groups, key=group_sort_key)
        schedules = _semester_schedules(semester_id)
    return schedule_views.compose_group_views(groups, grid, schedules, groups_to_refs)


def teacher_views(semester_id, teacher_id):
    logger.info(f"In teacher_views(semester_id = [{semester_id}], teacher_id = [{teacher_id}])")
    grid = schedule_views.SemesterGrid.from_semester(get_semester(semester_id))
    teacher = get_by_id_or_raise(Teacher, teacher_id)
    schedules = _sorted_schedules(_semester_schedules(semester_id, Lesson.teacher_id == teacher_id))
    return schedule_views.compose_teacher_views([teacher], grid, schedules, groups_to_refs)


def teachers_views(semester_id, teacher_ids=None):
    """Расписание нескольких (или всех действующих) преподавателей - для выгрузки"""
    grid = schedule_views.SemesterGrid.from_semester(get_semester(semester_id))
    query = db.session.query(Teacher).filter_by(disable=False)
    if teacher_ids:
        query = db.session.query(Teacher).filter(Teacher.id.in_(teacher_ids))
    teachers = query.order_by(Teacher.surname, Teacher.name).all()
    schedules = _sorted_schedules(_semester_schedules(semester_id))
    return schedule_views.compose_teacher_views(teachers, grid, schedules, groups_to_refs)


def full_semester_views(semester_id):
    """
    Расписание семестра: только группы, у которых есть занятия в расписании,
    в порядке sort_order
    """
    logger.info(f"In full_semester_views(semester_id = [{semester_id}])")
    semester = get_semester(semester_id)
    grid = schedule_views.SemesterGrid.from_semester(semester)
    schedules = _semester_schedules(semester_id)
    groups = {}
    for schedule in schedules:
        groups.setdefault(schedule.lesson.group.id, schedule.lesson.group)
    ordered = sorted(groups.values(), key=group_sort_key)
    return semester, schedule_views.compose_group_views(ordered, grid, schedules, groups_to_refs)

