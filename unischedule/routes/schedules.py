"""
Расписание: постановка занятий, публичные представления, публикация и выгрузка в Excel
"""
import logging
from flask import Blueprint, request, jsonify, send_file
from unischedule.core.auth import manager_required, is_manager_request
from unischedule.core.errors import ValidationError
from unischedule.routes.utils import (
    get_json_body, parse_day, parse_even_odd, parse_int, require_fields, arg_int, arg_str
)
from unischedule.services import schedule_service
from unischedule.services.excel_export import build_workbook
from unischedule.services.mappers import room_to_dict, schedule_to_dict, semester_to_dict
from unischedule.services.semester_service import get_semester

logger = logging.getLogger(__name__)

schedules_bp = Blueprint('schedules', __name__)

XLSX_MIMETYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


def _slot_from_args():
    return (
        arg_int('semester_id'),
        parse_day(arg_str('day_of_week')),
        parse_even_odd(arg_str('even_odd')),
        arg_int('period_id'),
    )


def _hidden_response():
    """Для неопубликованного расписания публичные страницы видят только статус"""
    if schedule_service.publish_status()['published'] or is_manager_request():
        return None
    return jsonify(schedule_service.publish_status())


# --- Управление расписанием ---

@schedules_bp.route('/schedules')
@manager_required
def schedules_list():
    schedules = schedule_service.list_schedules(arg_int('semester_id'))
    return jsonify([schedule_to_dict(s) for s in schedules])


@schedules_bp.route('/schedules/data-before')
@manager_required
def data_before():
    """Данные перед постановкой занятия в слот"""
    semester_id, day, even_odd, period_id = _slot_from_args()
    info = schedule_service.info_for_creating_schedule(
        semester_id, day, even_odd, period_id, arg_int('lesson_id'))
    return jsonify({
        'teacher_available': info['teacher_available'],
        'rooms': [dict(room_to_dict(room), available=available) for room, available in info['rooms']],
    })


@schedules_bp.route('/schedules', methods=['POST'])
@manager_required
def save_schedule():
    data = get_json_body()
    require_fields(data, 'lesson_id', 'room_id', 'period_id', 'day_of_week', 'even_odd')
    schedules = schedule_service.save_schedule(
        parse_int(data['lesson_id'], 'lesson_id'),
        parse_int(data['room_id'], 'room_id'),
        parse_int(data['period_id'], 'period_id'),
        parse_day(data['day_of_week']),
        parse_even_odd(data['even_odd']),
    )
    return jsonify([schedule_to_dict(s) for s in schedules]), 201


@schedules_bp.route('/schedules/by-room', methods=['PUT'])
@manager_required
def change_room():
    data = get_json_body()
    require_fields(data, 'schedule_id', 'room_id')
    schedule = schedule_service.change_room(
        parse_int(data['schedule_id'], 'schedule_id'), parse_int(data['room_id'], 'room_id'))
    return jsonify(schedule_to_dict(schedule))


@schedules_bp.route('/schedules/delete-schedules', methods=['DELETE'])
@manager_required
def delete_schedules():
    """Удаляет все расписание семестра"""
    deleted = schedule_service.delete_schedules_by_semester(arg_int('semester_id'))
    return jsonify({'success': True, 'deleted': deleted})


@schedules_bp.route('/schedules/<int:schedule_id>', methods=['DELETE'])
@manager_required
def delete_schedule(schedule_id):
    deleted_ids = schedule_service.delete_schedule(schedule_id)
    return jsonify({'success': True, 'deleted_ids': deleted_ids})


# --- Публикация ---

@schedules_bp.route('/public/schedules/status')
def publish_status():
    return jsonify(schedule_service.publish_status())


@schedules_bp.route('/schedules/publish', methods=['POST'])
@manager_required
def publish():
    return jsonify(schedule_service.set_published(True))


@schedules_bp.route('/schedules/publish', methods=['DELETE'])
@manager_required
def unpublish():
    """Скрывает расписание; можно передать сообщение для публичных страниц"""
    data = request.get_json(silent=True) or {}
    return jsonify(schedule_service.set_published(False, data.get('message')))


# --- Публичные представления ---

@schedules_bp.route('/public/schedules/full/rooms')
def full_rooms():
    hidden = _hidden_response()
    if hidden is not None:
        return hidden
    views = schedule_service.room_views(arg_int('semester_id'))
    return jsonify([view.to_dict() for view in views])


@schedules_bp.route('/public/schedules/full/groups')
def full_groups():
    hidden = _hidden_response()
    if hidden is not None:
        return hidden
    views = schedule_service.group_views(arg_int('semester_id'), arg_int('group_id', required=False))
    return jsonify([view.to_dict() for view in views])


@schedules_bp.route('/public/schedules/full/teachers')
def full_teachers():
    hidden = _hidden_response()
    if hidden is not None:
        return hidden
    views = schedule_service.teacher_views(arg_int('semester_id'), arg_int('teacher_id'))
    return jsonify([view.to_dict() for view in views])


@schedules_bp.route('/public/schedules/full/semester')
def full_semester():
    hidden = _hidden_response()
    if hidden is not None:
        return hidden
    semester, views = schedule_service.full_semester_views(arg_int('semester_id'))
    return jsonify({
        'semester': semester_to_dict(semester, with_groups=False),
        'schedules': [view.to_dict() for view in views],
    })


# --- Выгрузка ---

@schedules_bp.route('/schedules/export/<owner_type>')
@manager_required
def export_schedule(owner_type):
    """Выгрузка расписания аудиторий, групп или преподавателей в Excel"""
    semester_id = arg_int('semester_id')
    owner_id = arg_int('owner_id', required=False)
    logger.info(f"In export_schedule(owner_type = [{owner_type}], semester_id = [{semester_id}], "
                f"owner_id = [{owner_id}])")
    if owner_type == 'rooms':
        views = schedule_service.room_views(semester_id)
        if owner_id is not None:
            views = [view for view in views if view.owner['id'] == owner_id]
    elif owner_type == 'groups':
        views = schedule_service.group_views(semester_id, owner_id)
    elif owner_type == 'teachers':
        views = schedule_service.teachers_views(semester_id, [owner_id] if owner_id is not None else None)
    else:
        raise ValidationError(f'Неизвестный тип расписания: {owner_type}')

    semester = get_semester(semester_id)
    semester_title = f"{semester.description} {semester.year}"
    output = build_workbook([view.to_dict() for view in views], semester_title)
    return send_file(
        output,
        mimetype=XLSX_MIMETYPE,
        as_attachment=True,
        download_name=f"schedule_{owner_type}_{semester.year}.xlsx",
    )
