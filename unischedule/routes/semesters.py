"""
Семестры: CRUD, текущий и основной семестр, группы семестра, копирование
"""
import logging
from flask import Blueprint, jsonify
from unischedule.core.auth import manager_required
from unischedule.core.db_manager import db
from unischedule.core.errors import ValidationError
from unischedule.models.university import Group, Period, Semester
from unischedule.routes.utils import (
    get_json_body, clean_string, parse_date, parse_day, parse_int, require_fields
)
from unischedule.services import semester_service
from unischedule.services.mappers import semester_to_dict

logger = logging.getLogger(__name__)

semesters_bp = Blueprint('semesters', __name__, url_prefix='/semesters')


def _id_list(data, name):
    values = data.get(name) or []
    if not isinstance(values, list):
        raise ValidationError(f'{name} должен быть списком')
    return [parse_int(value, name) for value in values]


def _fill_semester(semester, data):
    require_fields(data, 'description', 'year', 'start_day', 'end_day')
    semester.description = clean_string(data, 'description', 2, 100)
    semester.year = parse_int(data['year'], 'year')
    semester.start_day = parse_date(data['start_day'], 'start_day')
    semester.end_day = parse_date(data['end_day'], 'end_day')
    for flag in ('current_semester', 'default_semester', 'disable'):
        if flag in data:
            setattr(semester, flag, bool(data[flag]))
    if 'days_of_week' in data:
        semester.days_of_week = [parse_day(day) for day in data.get('days_of_week') or []]
    if 'period_ids' in data:
        period_ids = _id_list(data, 'period_ids')
        semester.periods = db.session.query(Period).filter(Period.id.in_(period_ids)).all() if period_ids else []
    if 'group_ids' in data:
        group_ids = _id_list(data, 'group_ids')
        semester.groups = db.session.query(Group).filter(Group.id.in_(group_ids)).all() if group_ids else []
    return semester


def _ordered(disable):
    semesters = db.session.query(Semester).filter_by(disable=disable).order_by(
        Semester.year.desc(), Semester.start_day.desc()).all()
    return [semester_to_dict(s, with_groups=False) for s in semesters]


@semesters_bp.route('')
def semesters_list():
    return jsonify(_ordered(False))


@semesters_bp.route('/disabled')
@manager_required
def disabled_semesters():
    return jsonify(_ordered(True))


@semesters_bp.route('/current')
def current_semester():
    """Семестр, с которым работают менеджеры"""
    return jsonify(semester_to_dict(semester_service.get_current_semester()))


@semesters_bp.route('/default')
def default_semester():
    """Семестр, который показывается на публичных страницах по умолчанию"""
    return jsonify(semester_to_dict(semester_service.get_default_semester()))


@semesters_bp.route('/<int:semester_id>')
def get_semester(semester_id):
    return jsonify(semester_to_dict(semester_service.get_semester(semester_id)))


@semesters_bp.route('', methods=['POST'])
@manager_required
def create_semester():
    with db.session.no_autoflush:
        semester = _fill_semester(Semester(), get_json_body())
    semester = semester_service.create_semester(semester)
    return jsonify(semester_to_dict(semester)), 201


@semesters_bp.route('/<int:semester_id>', methods=['PUT'])
@manager_required
def update_semester(semester_id):
    semester = semester_service.get_semester(semester_id)
    with db.session.no_autoflush:
        _fill_semester(semester, get_json_body())
    semester = semester_service.update_semester(semester)
    return jsonify(semester_to_dict(semester))


@semesters_bp.route('/<int:semester_id>', methods=['DELETE'])
@manager_required
def delete_semester(semester_id):
    """Удаляет семестр вместе с его занятиями и расписанием"""
    semester_service.delete_semester(semester_id)
    return jsonify({'success': True, 'id': semester_id})


@semesters_bp.route('/current/<int:semester_id>', methods=['PUT'])
@manager_required
def change_current_semester(semester_id):
    return jsonify(semester_to_dict(semester_service.change_current_semester(semester_id)))


@semesters_bp.route('/default/<int:semester_id>', methods=['PUT'])
@manager_required
def change_default_semester(semester_id):
    return jsonify(semester_to_dict(semester_service.change_default_semester(semester_id)))


@semesters_bp.route('/<int:semester_id>/groups', methods=['PUT'])
@manager_required
def set_semester_groups(semester_id):
    """Заменяет список групп семестра"""
    group_ids = _id_list(get_json_body(), 'group_ids')
    return jsonify(semester_to_dict(semester_service.add_groups_to_semester(semester_id, group_ids)))


@semesters_bp.route('/copy', methods=['POST'])
@manager_required
def copy_semester():
    data = get_json_body()
    require_fields(data, 'from_semester_id', 'to_semester_id')
    semester = semester_service.copy_semester(
        parse_int(data['from_semester_id'], 'from_semester_id'),
        parse_int(data['to_semester_id'], 'to_semester_id'),
    )
    return jsonify(semester_to_dict(semester))
