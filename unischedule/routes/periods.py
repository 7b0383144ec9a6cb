"""
Пары (временные слоты дня)
"""
import logging
from flask import Blueprint, request, jsonify
from unischedule.core.auth import manager_required
from unischedule.core.db_manager import db, get_by_id_or_raise, transaction
from unischedule.core.errors import (
    FieldAlreadyExistsException, IncorrectTimeException, PeriodConflictException,
    UsedEntityException, ValidationError
)
from unischedule.models.university import Period, Schedule, Semester
from unischedule.routes.utils import get_json_body, clean_string, parse_time, require_fields
from unischedule.services.mappers import period_to_dict

logger = logging.getLogger(__name__)

periods_bp = Blueprint('periods', __name__, url_prefix='/classes')


def _read_period(data):
    require_fields(data, 'name', 'start_time', 'end_time')
    name = clean_string(data, 'name', 1, 20)
    start_time = parse_time(data['start_time'], 'start_time')
    end_time = parse_time(data['end_time'], 'end_time')
    if start_time >= end_time:
        raise IncorrectTimeException('Время начала должно быть раньше времени окончания')
    return name, start_time, end_time


def _check_period(name, start_time, end_time, period_id=None, pending=()):
    """
    Имя уникально, время не пересекается с другими парами.
    pending - пары, добавляемые в том же запросе и еще не сохраненные
    """
    existing = db.session.query(Period).filter_by(name=name).first()
    if existing and existing.id != period_id or any(p.name == name for p in pending):
        raise FieldAlreadyExistsException(Period, 'name', name)
    query = db.session.query(Period)
    if period_id is not None:
        query = query.filter(Period.id != period_id)
    for other in query.all() + list(pending):
        # Интервалы [start, end) пересекаются
        if start_time < other.end_time and other.start_time < end_time:
            raise PeriodConflictException(f"Пара пересекается с парой '{other.name}'")


@periods_bp.route('')
def periods_list():
    """Пары в порядке начала"""
    periods = db.session.query(Period).order_by(Period.start_time, Period.id).all()
    return jsonify([period_to_dict(p) for p in periods])


@periods_bp.route('/<int:period_id>')
def get_period(period_id):
    return jsonify(period_to_dict(get_by_id_or_raise(Period, period_id)))


@periods_bp.route('', methods=['POST'])
@manager_required
def create_period():
    name, start_time, end_time = _read_period(get_json_body())
    logger.info(f"In create_period(name = [{name}], start = [{start_time}], end = [{end_time}])")
    _check_period(name, start_time, end_time)
    period = Period(name=name, start_time=start_time, end_time=end_time)
    with transaction() as session:
        session.add(period)
    return jsonify(period_to_dict(period)), 201


@periods_bp.route('/many', methods=['POST'])
@manager_required
def create_periods():
    """Создает несколько пар за один запрос: все или ни одной"""
    items = request.get_json(silent=True)
    if not isinstance(items, list) or not items:
        raise ValidationError('Тело запроса должно быть непустым JSON-массивом')
    logger.info(f"In create_periods(count = [{len(items)}])")
    created = []
    for data in items:
        if not isinstance(data, dict):
            raise ValidationError('Каждая пара должна быть JSON-объектом')
        name, start_time, end_time = _read_period(data)
        _check_period(name, start_time, end_time, pending=created)
        created.append(Period(name=name, start_time=start_time, end_time=end_time))
    with transaction() as session:
        session.add_all(created)
    return jsonify([period_to_dict(p) for p in created]), 201


@periods_bp.route('/<int:period_id>', methods=['PUT'])
@manager_required
def update_period(period_id):
    period = get_by_id_or_raise(Period, period_id)
    name, start_time, end_time = _read_period(get_json_body())
    logger.info(f"In update_period(id = [{period_id}], name = [{name}])")
    _check_period(name, start_time, end_time, period_id)
    with transaction():
        period.name = name
        period.start_time = start_time
        period.end_time = end_time
    return jsonify(period_to_dict(period))


@periods_bp.route('/<int:period_id>', methods=['DELETE'])
@manager_required
def delete_period(period_id):
    period = get_by_id_or_raise(Period, period_id)
    logger.info(f"In delete_period(id = [{period_id}])")
    if db.session.query(Schedule).filter_by(period_id=period_id).count():
        raise UsedEntityException('Пара используется в расписании, удаление невозможно')
    with transaction() as session:
        for semester in db.session.query(Semester).filter(Semester.periods.contains(period)).all():
            semester.periods.remove(period)
        session.delete(period)
    return jsonify({'success': True, 'id': period_id})
