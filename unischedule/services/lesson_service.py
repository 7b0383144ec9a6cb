"""
Занятия: создание с проверкой дубликатов, объединенные занятия для нескольких групп,
копирование занятий
"""
import logging
from unischedule.core.db_manager import db, get_by_id_or_raise
from unischedule.core.errors import EntityAlreadyExistsException
from unischedule.models.university import Lesson, Schedule, Group, Subject, Teacher
from unischedule.services.semester_service import get_current_semester, get_semester

logger = logging.getLogger(__name__)


def get_lesson(lesson_id):
    return get_by_id_or_raise(Lesson, lesson_id)


def _duplicates_query(lesson):
    query = db.session.query(Lesson).filter_by(
        semester_id=lesson.semester_id,
        subject_id=lesson.subject_id,
        teacher_id=lesson.teacher_id,
        group_id=lesson.group_id,
        lesson_type=lesson.lesson_type,
    )
    if lesson.id is not None:
        query = query.filter(Lesson.id != lesson.id)
    return query


def grouped_lessons_of(lesson):
    """
    Все занятия объединенного набора: тот же предмет, преподаватель, тип, часы,
    название для сайта и семестр.
    Для обычного занятия - только оно само.
    """
    if not lesson.grouped:
        return [lesson]
    return db.session.query(Lesson).filter_by(
        semester_id=lesson.semester_id,
        subject_id=lesson.subject_id,
        teacher_id=lesson.teacher_id,
        lesson_type=lesson.lesson_type,
        hours=lesson.hours,
        subject_for_site=lesson.subject_for_site,
        grouped=True,
    ).order_by(Lesson.id).all()


def list_lessons(semester_id=None, group_id=None, teacher_id=None):
    if semester_id is None:
        semester_id = get_current_semester().id
    query = db.session.query(Lesson).filter_by(semester_id=semester_id)
    if group_id is not None:
        query = query.filter_by(group_id=group_id)
    if teacher_id is not None:
        query = query.filter_by(teacher_id=teacher_id)
    return query.order_by(Lesson.id).all()


def create_lessons(template, group_ids):
    """
    Создает занятие для каждой группы в текущем семестре.
    Несколько групп - объединенное занятие (grouped) с одинаковыми параметрами.
    """
    logger.info(f"In create_lessons(subject_id = [{template['subject_id']}], group_ids = [{group_ids}])")
    semester = get_current_semester()
    subject = get_by_id_or_raise(Subject, template['subject_id'])
    get_by_id_or_raise(Teacher, template['teacher_id'])
    grouped = len(group_ids) > 1
    created = []
    with db.session.no_autoflush:
        for group_id in group_ids:
            get_by_id_or_raise(Group, group_id)
            lesson = Lesson(semester_id=semester.id, group_id=group_id, grouped=grouped, **template)
            if _duplicates_query(lesson).count() != 0:
                raise EntityAlreadyExistsException('Такое занятие уже существует')
            if not lesson.subject_for_site:
                lesson.subject_for_site = subject.name
            created.append(lesson)
    db.session.add_all(created)
    db.session.commit()
    return created


def update_lesson(lesson, changes):
    """
    Обновляет занятие. Для объединенного занятия изменения предмета, преподавателя,
    типа, часов и названия применяются ко всему набору.
    """
    logger.info(f"In update_lesson(id = [{lesson.id}], changes = [{changes}])")
    targets = grouped_lessons_of(lesson)
    shared = {k: v for k, v in changes.items() if k != 'group_id'}
    with db.session.no_autoflush:
        for target in targets:
            for key, value in shared.items():
                setattr(target, key, value)
        if 'group_id' in changes:
            get_by_id_or_raise(Group, changes['group_id'])
            lesson.group_id = changes['group_id']
        for target in targets:
            if _duplicates_query(target).count() != 0:
                raise EntityAlreadyExistsException('Такое занятие уже существует')
    db.session.commit()
    return lesson


def delete_lesson(lesson_id):
    """Удаляет занятие вместе с расписанием; объединенное - весь набор"""
    logger.info(f"In delete_lesson(id = [{lesson_id}])")
    lesson = get_lesson(lesson_id)
    targets = grouped_lessons_of(lesson)
    deleted_ids = [target.id for target in targets]
    for target in targets:
        db.session.delete(target)
    db.session.commit()
    return deleted_ids


def copy_lesson_for_groups(lesson_id, group_ids):
    """Копирует занятие для других групп того же семестра; существующие дубликаты пропускаются"""
    logger.info(f"In copy_lesson_for_groups(lesson_id = [{lesson_id}], group_ids = [{group_ids}])")
    source = get_lesson(lesson_id)
    created = []
    for group_id in group_ids:
        if db.session.get(Group, group_id) is None:
            logger.warning(f"Группа {group_id} не найдена, пропускаем")
            continue
        lesson = Lesson(
            semester_id=source.semester_id, group_id=group_id, hours=source.hours,
            subject_id=source.subject_id, teacher_id=source.teacher_id,
            lesson_type=source.lesson_type, subject_for_site=source.subject_for_site,
            link_to_meeting=source.link_to_meeting,
        )
        with db.session.no_autoflush:
            if _duplicates_query(lesson).count() != 0:
                continue
        db.session.add(lesson)
        created.append(lesson)
    db.session.commit()
    return created


def copy_lessons_to_semester(from_semester_id, to_semester_id):
    """Копирует все занятия одного семестра в другой (без расписания)"""
    logger.info(f"In copy_lessons_to_semester(from = [{from_semester_id}], to = [{to_semester_id}])")
    get_semester(from_semester_id)
    target = get_semester(to_semester_id)
    created = []
    for source in list_lessons(semester_id=from_semester_id):
        lesson = Lesson(
            semester_id=target.id, group_id=source.group_id, hours=source.hours,
            subject_id=source.subject_id, teacher_id=source.teacher_id,
            lesson_type=source.lesson_type, subject_for_site=source.subject_for_site,
            link_to_meeting=source.link_to_meeting, grouped=source.grouped,
        )
        with db.session.no_autoflush:
            if _duplicates_query(lesson).count() != 0:
                continue
        db.session.add(lesson)
        created.append(lesson)
    db.session.commit()
    return created


def update_link_to_meeting(semester_id, subject_id, teacher_id, lesson_type, link):
    """Ставит ссылку на встречу всем занятиям преподавателя по предмету и типу в семестре"""
    logger.info(f"In update_link_to_meeting(semester_id = [{semester_id}], subject_id = [{subject_id}], "
                f"teacher_id = [{teacher_id}], lesson_type = [{lesson_type}])")
    query = db.session.query(Lesson).filter_by(
        semester_id=semester_id, subject_id=subject_id, teacher_id=teacher_id)
    if lesson_type:
        query = query.filter_by(lesson_type=lesson_type)
    updated = query.update({'link_to_meeting': link}, synchronize_session=False)
    db.session.commit()
    return updated


def count_scheduled(lesson_id):
    """Сколько раз занятие уже поставлено в расписание"""
    return db.session.query(Schedule).filter_by(lesson_id=lesson_id).count()


def groups_for_grouped_lesson(lesson_id):
    """
    Занятия с тем же предметом, преподавателем и типом в семестре (кроме самого занятия),
    у которых еще остались нераспределенные часы.
    """
    lesson = get_lesson(lesson_id)
    candidates = db.session.query(Lesson).filter(
        Lesson.semester_id == lesson.semester_id,
        Lesson.subject_id == lesson.subject_id,
        Lesson.teacher_id == lesson.teacher_id,
        Lesson.lesson_type == lesson.lesson_type,
        Lesson.id != lesson.id,
    ).order_by(Lesson.id).all()
    return [candidate for candidate in candidates if count_scheduled(candidate.id) < candidate.hours]
