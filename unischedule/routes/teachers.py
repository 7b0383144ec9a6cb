"""
CRUD операции для преподавателей и импорт из Excel
"""
import logging
from flask import Blueprint, request, jsonify
from unischedule.core.auth import manager_required
from unischedule.core.db_manager import db, get_by_id_or_raise, transaction
from unischedule.core.errors import UsedEntityException, ValidationError
from unischedule.models.university import Department, Lesson, Teacher
from unischedule.routes.utils import get_json_body, clean_string
from unischedule.services.excel_loader import load_teachers_excel
from unischedule.services.mappers import teacher_to_dict

logger = logging.getLogger(__name__)

teachers_bp = Blueprint('teachers', __name__, url_prefix='/teachers')


def _fill_teacher(teacher, data):
    teacher.name = clean_string(data, 'name', 2, 35)
    teacher.surname = clean_string(data, 'surname', 2, 35)
    teacher.patronymic = clean_string(data, 'patronymic', max_length=35, required=False) or ''
    teacher.position = clean_string(data, 'position', max_length=35, required=False) or ''
    teacher.email = clean_string(data, 'email', max_length=40, required=False)
    department_id = data.get('department_id')
    teacher.department = get_by_id_or_raise(Department, department_id) if department_id else None
    if 'disable' in data:
        teacher.disable = bool(data['disable'])
    return teacher


def _ordered(query):
    return query.order_by(Teacher.surname, Teacher.name, Teacher.patronymic).all()


@teachers_bp.route('')
def teachers_list():
    """Список действующих преподавателей"""
    return jsonify([teacher_to_dict(t) for t in _ordered(db.session.query(Teacher).filter_by(disable=False))])


@teachers_bp.route('/disabled')
@manager_required
def disabled_teachers():
    return jsonify([teacher_to_dict(t) for t in _ordered(db.session.query(Teacher).filter_by(disable=True))])


@teachers_bp.route('/<int:teacher_id>')
def get_teacher(teacher_id):
    return jsonify(teacher_to_dict(get_by_id_or_raise(Teacher, teacher_id)))


@teachers_bp.route('', methods=['POST'])
@manager_required
def create_teacher():
    """Создать преподавателя"""
    data = get_json_body()
    teacher = _fill_teacher(Teacher(), data)
    logger.info(f"In create_teacher(surname = [{teacher.surname}], name = [{teacher.name}])")
    with transaction() as session:
        session.add(teacher)
    return jsonify(teacher_to_dict(teacher)), 201


@teachers_bp.route('/<int:teacher_id>', methods=['PUT'])
@manager_required
def update_teacher(teacher_id):
    """Обновить преподавателя"""
    teacher = get_by_id_or_raise(Teacher, teacher_id)
    logger.info(f"In update_teacher(id = [{teacher_id}])")
    with transaction():
        _fill_teacher(teacher, get_json_body())
    return jsonify(teacher_to_dict(teacher))


@teachers_bp.route('/<int:teacher_id>', methods=['DELETE'])
@manager_required
def delete_teacher(teacher_id):
    """Удалить преподавателя; нельзя, пока у него есть занятия"""
    teacher = get_by_id_or_raise(Teacher, teacher_id)
    logger.info(f"In delete_teacher(id = [{teacher_id}])")
    if db.session.query(Lesson).filter_by(teacher_id=teacher_id).count():
        raise UsedEntityException('У преподавателя есть занятия, удаление невозможно')
    with transaction() as session:
        session.delete(teacher)
    return jsonify({'success': True, 'id': teacher_id})


@teachers_bp.route('/import', methods=['POST'])
@manager_required
def import_teachers():
    """Загрузка преподавателей из Excel"""
    file = request.files.get('file')
    if file is None or not file.filename:
        raise ValidationError('Файл обязателен')
    if not file.filename.lower().endswith(('.xlsx', '.xls')):
        raise ValidationError('Поддерживаются только файлы .xlsx и .xls')
    logger.info(f"In import_teachers(file = [{file.filename}])")
    created, skipped = load_teachers_excel(file.stream)
    return jsonify({'success': True, 'created': created, 'skipped': skipped})
