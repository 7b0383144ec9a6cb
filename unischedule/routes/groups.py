"""
CRUD операции для учебных групп: порядок отображения и импорт из Excel
"""
import logging
from flask import Blueprint, request, jsonify
from unischedule.core.auth import manager_required
from unischedule.core.db_manager import db, get_by_id_or_raise, transaction
from unischedule.core.errors import FieldAlreadyExistsException, UsedEntityException, ValidationError
from unischedule.models.university import Group, Lesson, Semester
from unischedule.routes.utils import get_json_body, clean_string, next_sort_order, parse_int, place_after
from unischedule.services.excel_loader import load_groups_excel
from unischedule.services.mappers import group_to_dict, group_sort_key

logger = logging.getLogger(__name__)

groups_bp = Blueprint('groups', __name__, url_prefix='/groups')


def _check_title(title, group_id=None):
    existing = db.session.query(Group).filter_by(title=title).first()
    if existing and existing.id != group_id:
        raise FieldAlreadyExistsException(Group, 'title', title)


def _ordered(disable):
    groups = db.session.query(Group).filter_by(disable=disable).all()
    return [group_to_dict(g) for g in sorted(groups, key=group_sort_key)]


@groups_bp.route('')
def groups_list():
    """Группы в порядке отображения"""
    return jsonify(_ordered(False))


@groups_bp.route('/disabled')
@manager_required
def disabled_groups():
    return jsonify(_ordered(True))


@groups_bp.route('/<int:group_id>')
def get_group(group_id):
    return jsonify(group_to_dict(get_by_id_or_raise(Group, group_id)))


@groups_bp.route('', methods=['POST'])
@manager_required
def create_group():
    """Новая группа ставится в конец списка"""
    data = get_json_body()
    title = clean_string(data, 'title', 2, 35)
    logger.info(f"In create_group(title = [{title}])")
    _check_title(title)
    group = Group(title=title, sort_order=next_sort_order(Group), disable=bool(data.get('disable', False)))
    with transaction() as session:
        session.add(group)
    return jsonify(group_to_dict(group)), 201


@groups_bp.route('/after/<int:after_id>', methods=['POST'])
@manager_required
def create_group_after(after_id):
    """Новая группа сразу после группы after_id (0 - в начало списка)"""
    data = get_json_body()
    title = clean_string(data, 'title', 2, 35)
    logger.info(f"In create_group_after(title = [{title}], after_id = [{after_id}])")
    _check_title(title)
    group = Group(title=title, disable=bool(data.get('disable', False)))
    with transaction() as session:
        place_after(Group, group, after_id)
        session.add(group)
    return jsonify(group_to_dict(group)), 201


@groups_bp.route('/<int:group_id>', methods=['PUT'])
@manager_required
def update_group(group_id):
    group = get_by_id_or_raise(Group, group_id)
    data = get_json_body()
    title = clean_string(data, 'title', 2, 35)
    logger.info(f"In update_group(id = [{group_id}], title = [{title}])")
    _check_title(title, group_id)
    with transaction():
        group.title = title
        if 'disable' in data:
            group.disable = bool(data['disable'])
        if data.get('after_id') is not None:
            place_after(Group, group, parse_int(data['after_id'], 'after_id'))
    return jsonify(group_to_dict(group))


@groups_bp.route('/<int:group_id>', methods=['DELETE'])
@manager_required
def delete_group(group_id):
    group = get_by_id_or_raise(Group, group_id)
    logger.info(f"In delete_group(id = [{group_id}])")
    if db.session.query(Lesson).filter_by(group_id=group_id).count():
        raise UsedEntityException('У группы есть занятия, удаление невозможно')
    with transaction() as session:
        for semester in db.session.query(Semester).filter(Semester.groups.contains(group)).all():
            semester.groups.remove(group)
        session.delete(group)
    return jsonify({'success': True, 'id': group_id})


@groups_bp.route('/import', methods=['POST'])
@manager_required
def import_groups():
    """Загрузка групп из Excel"""
    file = request.files.get('file')
    if file is None or not file.filename:
        raise ValidationError('Файл обязателен')
    if not file.filename.lower().endswith(('.xlsx', '.xls')):
        raise ValidationError('Поддерживаются только файлы .xlsx и .xls')
    logger.info(f"In import_groups(file = [{file.filename}])")
    created, skipped = load_groups_excel(file.stream)
    return jsonify({'success': True, 'created': created, 'skipped': skipped})
