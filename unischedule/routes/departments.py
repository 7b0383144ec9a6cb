"""
CRUD операции для кафедр
"""
import logging
from flask import Blueprint, jsonify
from unischedule.core.auth import manager_required
from unischedule.core.db_manager import db, get_by_id_or_raise, transaction
from unischedule.core.errors import FieldAlreadyExistsException
from unischedule.models.university import Department, Teacher
from unischedule.routes.utils import get_json_body, clean_string
from unischedule.services.mappers import department_to_dict, teacher_to_dict

logger = logging.getLogger(__name__)

departments_bp = Blueprint('departments', __name__, url_prefix='/departments')


def _check_name(name, department_id=None):
    existing = db.session.query(Department).filter_by(name=name).first()
    if existing and existing.id != department_id:
        raise FieldAlreadyExistsException(Department, 'name', name)


@departments_bp.route('')
def departments_list():
    departments = db.session.query(Department).filter_by(disable=False).order_by(Department.name).all()
    return jsonify([department_to_dict(d) for d in departments])


@departments_bp.route('/disabled')
@manager_required
def disabled_departments():
    departments = db.session.query(Department).filter_by(disable=True).order_by(Department.name).all()
    return jsonify([department_to_dict(d) for d in departments])


@departments_bp.route('/<int:department_id>')
def get_department(department_id):
    return jsonify(department_to_dict(get_by_id_or_raise(Department, department_id)))


@departments_bp.route('/<int:department_id>/teachers')
def department_teachers(department_id):
    """Действующие преподаватели кафедры"""
    get_by_id_or_raise(Department, department_id)
    teachers = db.session.query(Teacher).filter_by(department_id=department_id, disable=False).order_by(
        Teacher.surname, Teacher.name).all()
    return jsonify([teacher_to_dict(t) for t in teachers])


@departments_bp.route('', methods=['POST'])
@manager_required
def create_department():
    data = get_json_body()
    name = clean_string(data, 'name', 2, 100)
    logger.info(f"In create_department(name = [{name}])")
    _check_name(name)
    department = Department(name=name, disable=bool(data.get('disable', False)))
    with transaction() as session:
        session.add(department)
    return jsonify(department_to_dict(department)), 201


@departments_bp.route('/<int:department_id>', methods=['PUT'])
@manager_required
def update_department(department_id):
    department = get_by_id_or_raise(Department, department_id)
    data = get_json_body()
    name = clean_string(data, 'name', 2, 100)
    logger.info(f"In update_department(id = [{department_id}], name = [{name}])")
    _check_name(name, department_id)
    with transaction():
        department.name = name
        if 'disable' in data:
            department.disable = bool(data['disable'])
    return jsonify(department_to_dict(department))


@departments_bp.route('/<int:department_id>', methods=['DELETE'])
@manager_required
def delete_department(department_id):
    """Удаление кафедры; преподаватели остаются без кафедры"""
    department = get_by_id_or_raise(Department, department_id)
    logger.info(f"In delete_department(id = [{department_id}])")
    with transaction() as session:
        for teacher in department.teachers:
            teacher.department = None
        session.delete(department)
    return jsonify({'success': True, 'id': department_id})
