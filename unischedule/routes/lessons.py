"""
Занятия (нагрузка): создание для одной или нескольких групп, копирование, ссылки на встречи
"""
import logging
from flask import Blueprint, jsonify
from unischedule.core.auth import manager_required
from unischedule.core.db_manager import get_by_id_or_raise
from unischedule.core.errors import ValidationError
from unischedule.models.university import LessonType, Subject, Teacher
from unischedule.routes.utils import (
    get_json_body, clean_string, parse_int, parse_lesson_type, require_fields, arg_int
)
from unischedule.services import lesson_service
from unischedule.services.mappers import lesson_to_dict

logger = logging.getLogger(__name__)

lessons_bp = Blueprint('lessons', __name__, url_prefix='/lessons')


def _parse_hours(data):
    hours = parse_int(data.get('hours', 1), 'hours')
    if hours < 1:
        raise ValidationError('Количество часов должно быть положительным')
    return hours


def _read_template(data):
    """Общие поля занятия из тела запроса (без группы)"""
    require_fields(data, 'subject_id', 'teacher_id', 'lesson_type')
    return {
        'subject_id': parse_int(data['subject_id'], 'subject_id'),
        'teacher_id': parse_int(data['teacher_id'], 'teacher_id'),
        'lesson_type': parse_lesson_type(data['lesson_type']),
        'hours': _parse_hours(data),
        'subject_for_site': clean_string(data, 'subject_for_site', max_length=80, required=False),
        'link_to_meeting': clean_string(data, 'link_to_meeting', max_length=300, required=False),
    }


def _group_ids(data):
    values = data.get('group_ids')
    if values is None and data.get('group_id') is not None:
        values = [data['group_id']]
    if not isinstance(values, list) or not values:
        raise ValidationError('group_ids должен быть непустым списком')
    # Порядок сохраняется, повторы отбрасываются
    return list(dict.fromkeys(parse_int(value, 'group_ids') for value in values))


@lessons_bp.route('')
def lessons_list():
    """Занятия семестра (по умолчанию текущего), можно отфильтровать по группе"""
    lessons = lesson_service.list_lessons(
        semester_id=arg_int('semester_id', required=False),
        group_id=arg_int('group_id', required=False),
    )
    return jsonify([lesson_to_dict(lesson) for lesson in lessons])


@lessons_bp.route('/types')
def lesson_types():
    return jsonify([lesson_type.value for lesson_type in LessonType])


@lessons_bp.route('/teacher/<int:teacher_id>')
def teacher_lessons(teacher_id):
    get_by_id_or_raise(Teacher, teacher_id)
    lessons = lesson_service.list_lessons(
        semester_id=arg_int('semester_id', required=False), teacher_id=teacher_id)
    return jsonify([lesson_to_dict(lesson) for lesson in lessons])


@lessons_bp.route('/<int:lesson_id>')
def get_lesson(lesson_id):
    return jsonify(lesson_to_dict(lesson_service.get_lesson(lesson_id)))


@lessons_bp.route('/<int:lesson_id>/grouped')
@manager_required
def grouped_candidates(lesson_id):
    """Занятия, которые можно поставить в один слот вместе с этим"""
    lessons = lesson_service.groups_for_grouped_lesson(lesson_id)
    return jsonify([lesson_to_dict(lesson) for lesson in lessons])


@lessons_bp.route('', methods=['POST'])
@manager_required
def create_lessons():
    """Создает занятие; для нескольких групп - объединенное занятие"""
    data = get_json_body()
    lessons = lesson_service.create_lessons(_read_template(data), _group_ids(data))
    return jsonify([lesson_to_dict(lesson) for lesson in lessons]), 201


@lessons_bp.route('/<int:lesson_id>', methods=['PUT'])
@manager_required
def update_lesson(lesson_id):
    lesson = lesson_service.get_lesson(lesson_id)
    data = get_json_body()
    changes = {}
    if 'subject_id' in data:
        changes['subject_id'] = get_by_id_or_raise(Subject, parse_int(data['subject_id'], 'subject_id')).id
    if 'teacher_id' in data:
        changes['teacher_id'] = get_by_id_or_raise(Teacher, parse_int(data['teacher_id'], 'teacher_id')).id
    if 'lesson_type' in data:
        changes['lesson_type'] = parse_lesson_type(data['lesson_type'])
    if 'hours' in data:
        changes['hours'] = _parse_hours(data)
    if 'subject_for_site' in data:
        changes['subject_for_site'] = clean_string(data, 'subject_for_site', max_length=80, required=False)
    if 'link_to_meeting' in data:
        changes['link_to_meeting'] = clean_string(data, 'link_to_meeting', max_length=300, required=False)
    if 'group_id' in data:
        changes['group_id'] = parse_int(data['group_id'], 'group_id')
    lesson = lesson_service.update_lesson(lesson, changes)
    return jsonify(lesson_to_dict(lesson))


@lessons_bp.route('/<int:lesson_id>', methods=['DELETE'])
@manager_required
def delete_lesson(lesson_id):
    deleted_ids = lesson_service.delete_lesson(lesson_id)
    return jsonify({'success': True, 'deleted_ids': deleted_ids})


@lessons_bp.route('/<int:lesson_id>/copy', methods=['POST'])
@manager_required
def copy_lesson(lesson_id):
    lessons = lesson_service.copy_lesson_for_groups(lesson_id, _group_ids(get_json_body()))
    return jsonify([lesson_to_dict(lesson) for lesson in lessons]), 201


@lessons_bp.route('/copy', methods=['POST'])
@manager_required
def copy_lessons():
    """Копирует занятия одного семестра в другой"""
    data = get_json_body()
    require_fields(data, 'from_semester_id', 'to_semester_id')
    lessons = lesson_service.copy_lessons_to_semester(
        parse_int(data['from_semester_id'], 'from_semester_id'),
        parse_int(data['to_semester_id'], 'to_semester_id'),
    )
    return jsonify({'success': True, 'created': len(lessons)})


@lessons_bp.route('/link-to-meeting', methods=['PUT'])
@manager_required
def update_link_to_meeting():
    data = get_json_body()
    require_fields(data, 'semester_id', 'subject_id', 'teacher_id')
    lesson_type = parse_lesson_type(data['lesson_type']) if data.get('lesson_type') else None
    updated = lesson_service.update_link_to_meeting(
        parse_int(data['semester_id'], 'semester_id'),
        parse_int(data['subject_id'], 'subject_id'),
        parse_int(data['teacher_id'], 'teacher_id'),
        lesson_type,
        clean_string(data, 'link_to_meeting', max_length=300, required=False),
    )
    return jsonify({'success': True, 'updated': updated})
