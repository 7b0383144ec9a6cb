"""
Вспомогательные функции для маршрутов: разбор запросов и проверка полей
"""
from datetime import datetime
from flask import request
from unischedule.core.db_manager import db
from unischedule.core.errors import ValidationError
from unischedule.models.university import DayOfWeek, EvenOdd, LessonType


def get_json_body():
    """Тело запроса как словарь; пустое или не-JSON тело - ошибка"""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError('Тело запроса должно быть JSON-объектом')
    return data


def require_fields(data, *names):
    missing = [name for name in names if data.get(name) in (None, '')]
    if missing:
        raise ValidationError(f"Не заполнены обязательные поля: {', '.join(missing)}")


def clean_string(data, name, min_length=None, max_length=None, required=True):
    """
    Возвращает строковое поле без пробелов по краям и проверяет длину.

    Args:
        data: словарь из тела запроса
        name: имя поля
        min_length, max_length: допустимые границы длины (включительно)
        required: если False, отсутствующее поле дает None
    """
    value = data.get(name)
    if value is None or str(value).strip() == '':
        if required:
            raise ValidationError(f'Поле {name} обязательно')
        return None
    value = str(value).strip()
    if min_length is not None and len(value) < min_length or max_length is not None and len(value) > max_length:
        raise ValidationError(f'Длина поля {name} должна быть от {min_length} до {max_length} символов')
    return value


def parse_int(value, name):
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f'Поле {name} должно быть целым числом')


def parse_time(value, name):
    try:
        return datetime.strptime(str(value), '%H:%M').time()
    except (TypeError, ValueError):
        raise ValidationError(f'Поле {name} должно быть в формате ЧЧ:ММ')


def parse_date(value, name):
    try:
        return datetime.strptime(str(value), '%Y-%m-%d').date()
    except (TypeError, ValueError):
        raise ValidationError(f'Поле {name} должно быть в формате ГГГГ-ММ-ДД')


def parse_day(value):
    day = str(value or '').strip().upper()
    if day not in DayOfWeek.__members__:
        raise ValidationError(f'Неизвестный день недели: {value}')
    return day


def parse_even_odd(value):
    even_odd = str(value or '').strip().upper()
    if even_odd not in EvenOdd.__members__:
        raise ValidationError(f'Неизвестная четность недели: {value}')
    return even_odd


def parse_lesson_type(value):
    lesson_type = str(value or '').strip().upper()
    if lesson_type not in LessonType.__members__:
        raise ValidationError(f'Неизвестный тип занятия: {value}')
    return lesson_type


def arg_int(name, required=True):
    """Целочисленный параметр строки запроса"""
    value = request.args.get(name)
    if value in (None, ''):
        if required:
            raise ValidationError(f'Параметр запроса {name} обязателен')
        return None
    return parse_int(value, name)


def arg_str(name, required=True):
    """Строковый параметр строки запроса"""
    value = (request.args.get(name) or '').strip()
    if not value and required:
        raise ValidationError(f'Параметр запроса {name} обязателен')
    return value or None


def next_sort_order(model):
    """Следующий свободный sort_order для групп и аудиторий"""
    current = db.session.query(db.func.max(model.sort_order)).scalar()
    return (current or 0) + 1


def place_after(model, entity, after_id):
    """
    Ставит запись сразу после записи after_id, сдвигая следующие на единицу.
    after_id = 0 ставит запись первой.
    """
    if after_id:
        anchor = db.session.get(model, after_id)
        if anchor is None:
            raise ValidationError(f'Запись {model.__name__} с id={after_id} не найдена')
        position = (anchor.sort_order or 0) + 1
    else:
        position = 1
    query = db.session.query(model).filter(model.sort_order >= position)
    if entity.id is not None:
        query = query.filter(model.id != entity.id)
    for other in query.all():
        other.sort_order += 1
    entity.sort_order = position
    return entity
