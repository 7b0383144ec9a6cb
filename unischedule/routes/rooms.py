"""
Аудитории и типы аудиторий
"""
import logging
from flask import Blueprint, jsonify
from unischedule.core.auth import manager_required
from unischedule.core.db_manager import db, get_by_id_or_raise, transaction
from unischedule.core.errors import FieldAlreadyExistsException, UsedEntityException
from unischedule.models.university import Room, RoomType, Schedule
from unischedule.routes.utils import (
    get_json_body, clean_string, next_sort_order, parse_int, place_after,
    arg_int, arg_str, parse_day, parse_even_odd
)
from unischedule.services.mappers import room_to_dict, room_type_to_dict, room_sort_key
from unischedule.services.schedule_service import free_rooms

logger = logging.getLogger(__name__)

rooms_bp = Blueprint('rooms', __name__)


# --- Типы аудиторий ---

def _check_description(description, type_id=None):
    existing = db.session.query(RoomType).filter_by(description=description).first()
    if existing and existing.id != type_id:
        raise FieldAlreadyExistsException(RoomType, 'description', description)


@rooms_bp.route('/room-types')
def room_types_list():
    types = db.session.query(RoomType).order_by(RoomType.description).all()
    return jsonify([room_type_to_dict(t) for t in types])


@rooms_bp.route('/room-types', methods=['POST'])
@manager_required
def create_room_type():
    description = clean_string(get_json_body(), 'description', 2, 40)
    logger.info(f"In create_room_type(description = [{description}])")
    _check_description(description)
    room_type = RoomType(description=description)
    with transaction() as session:
        session.add(room_type)
    return jsonify(room_type_to_dict(room_type)), 201


@rooms_bp.route('/room-types/<int:type_id>', methods=['PUT'])
@manager_required
def update_room_type(type_id):
    room_type = get_by_id_or_raise(RoomType, type_id)
    description = clean_string(get_json_body(), 'description', 2, 40)
    logger.info(f"In update_room_type(id = [{type_id}], description = [{description}])")
    _check_description(description, type_id)
    with transaction():
        room_type.description = description
    return jsonify(room_type_to_dict(room_type))


@rooms_bp.route('/room-types/<int:type_id>', methods=['DELETE'])
@manager_required
def delete_room_type(type_id):
    """Тип нельзя удалить, пока есть аудитории этого типа"""
    room_type = get_by_id_or_raise(RoomType, type_id)
    logger.info(f"In delete_room_type(id = [{type_id}])")
    if db.session.query(Room).filter_by(type_id=type_id).count():
        raise UsedEntityException('Тип используется аудиториями, удаление невозможно')
    with transaction() as session:
        session.delete(room_type)
    return jsonify({'success': True, 'id': type_id})


# --- Аудитории ---

def _fill_room(room, data):
    room.name = clean_string(data, 'name', 2, 35)
    type_id = data.get('type_id')
    room.type = get_by_id_or_raise(RoomType, parse_int(type_id, 'type_id')) if type_id else None
    if 'disable' in data:
        room.disable = bool(data['disable'])
    return room


def _ordered(disable):
    rooms = db.session.query(Room).filter_by(disable=disable).all()
    return [room_to_dict(r) for r in sorted(rooms, key=room_sort_key)]


@rooms_bp.route('/rooms')
def rooms_list():
    return jsonify(_ordered(False))


@rooms_bp.route('/rooms/disabled')
@manager_required
def disabled_rooms():
    return jsonify(_ordered(True))


@rooms_bp.route('/rooms/free')
@manager_required
def rooms_free():
    """Аудитории, свободные в слоте (семестр, день, четность, пара)"""
    semester_id = arg_int('semester_id')
    period_id = arg_int('period_id')
    day = parse_day(arg_str('day_of_week'))
    even_odd = parse_even_odd(arg_str('even_odd'))
    rooms = free_rooms(semester_id, day, even_odd, period_id)
    return jsonify([room_to_dict(r) for r in rooms])


@rooms_bp.route('/rooms/<int:room_id>')
def get_room(room_id):
    return jsonify(room_to_dict(get_by_id_or_raise(Room, room_id)))


@rooms_bp.route('/rooms', methods=['POST'])
@manager_required
def create_room():
    data = get_json_body()
    room = _fill_room(Room(), data)
    logger.info(f"In create_room(name = [{room.name}])")
    room.sort_order = next_sort_order(Room)
    with transaction() as session:
        session.add(room)
    return jsonify(room_to_dict(room)), 201


@rooms_bp.route('/rooms/after/<int:after_id>', methods=['POST'])
@manager_required
def create_room_after(after_id):
    """Новая аудитория сразу после аудитории after_id (0 - в начало списка)"""
    data = get_json_body()
    room = _fill_room(Room(), data)
    logger.info(f"In create_room_after(name = [{room.name}], after_id = [{after_id}])")
    with transaction() as session:
        place_after(Room, room, after_id)
        session.add(room)
    return jsonify(room_to_dict(room)), 201


@rooms_bp.route('/rooms/<int:room_id>', methods=['PUT'])
@manager_required
def update_room(room_id):
    room = get_by_id_or_raise(Room, room_id)
    data = get_json_body()
    logger.info(f"In update_room(id = [{room_id}])")
    with transaction():
        _fill_room(room, data)
        if data.get('after_id') is not None:
            place_after(Room, room, parse_int(data['after_id'], 'after_id'))
    return jsonify(room_to_dict(room))


@rooms_bp.route('/rooms/<int:room_id>', methods=['DELETE'])
@manager_required
def delete_room(room_id):
    room = get_by_id_or_raise(Room, room_id)
    logger.info(f"In delete_room(id = [{room_id}])")
    if db.session.query(Schedule).filter_by(room_id=room_id).count():
        raise UsedEntityException('Аудитория используется в расписании, удаление невозможно')
    with transaction() as session:
        session.delete(room)
    return jsonify({'success': True, 'id': room_id})
