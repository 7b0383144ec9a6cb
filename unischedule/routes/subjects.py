"""
CRUD операции для предметов
"""
import logging
from flask import Blueprint, jsonify
from unischedule.core.auth import manager_required
from unischedule.core.db_manager import db, get_by_id_or_raise, transaction
from unischedule.core.errors import FieldAlreadyExistsException, UsedEntityException
from unischedule.models.university import Lesson, Subject
from unischedule.routes.utils import get_json_body, clean_string
from unischedule.services.mappers import subject_to_dict

logger = logging.getLogger(__name__)

subjects_bp = Blueprint('subjects', __name__, url_prefix='/subjects')


def _check_name(name, subject_id=None):
    existing = db.session.query(Subject).filter_by(name=name).first()
    if existing and existing.id != subject_id:
        raise FieldAlreadyExistsException(Subject, 'name', name)


@subjects_bp.route('')
def subjects_list():
    subjects = db.session.query(Subject).filter_by(disable=False).order_by(Subject.name).all()
    return jsonify([subject_to_dict(s) for s in subjects])


@subjects_bp.route('/disabled')
@manager_required
def disabled_subjects():
    subjects = db.session.query(Subject).filter_by(disable=True).order_by(Subject.name).all()
    return jsonify([subject_to_dict(s) for s in subjects])


@subjects_bp.route('/<int:subject_id>')
def get_subject(subject_id):
    return jsonify(subject_to_dict(get_by_id_or_raise(Subject, subject_id)))


@subjects_bp.route('', methods=['POST'])
@manager_required
def create_subject():
    """Создать предмет"""
    data = get_json_body()
    name = clean_string(data, 'name', 2, 80)
    logger.info(f"In create_subject(name = [{name}])")
    _check_name(name)
    subject = Subject(name=name, disable=bool(data.get('disable', False)))
    with transaction() as session:
        session.add(subject)
    return jsonify(subject_to_dict(subject)), 201


@subjects_bp.route('/<int:subject_id>', methods=['PUT'])
@manager_required
def update_subject(subject_id):
    subject = get_by_id_or_raise(Subject, subject_id)
    data = get_json_body()
    name = clean_string(data, 'name', 2, 80)
    logger.info(f"In update_subject(id = [{subject_id}], name = [{name}])")
    _check_name(name, subject_id)
    with transaction():
        subject.name = name
        if 'disable' in data:
            subject.disable = bool(data['disable'])
    return jsonify(subject_to_dict(subject))


@subjects_bp.route('/<int:subject_id>', methods=['DELETE'])
@manager_required
def delete_subject(subject_id):
    subject = get_by_id_or_raise(Subject, subject_id)
    logger.info(f"In delete_subject(id = [{subject_id}])")
    if db.session.query(Lesson).filter_by(subject_id=subject_id).count():
        raise UsedEntityException('По предмету есть занятия, удаление невозможно')
    with transaction() as session:
        session.delete(subject)
    return jsonify({'success': True, 'id': subject_id})
