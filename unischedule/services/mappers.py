"""
Преобразование моделей в словари для JSON-ответов
"""


def _time(value):
    return value.strftime('%H:%M') if value else None


def department_to_dict(department):
    return {'id': department.id, 'name': department.name, 'disable': department.disable}


def teacher_to_dict(teacher):
    return {
        'id': teacher.id,
        'name': teacher.name,
        'surname': teacher.surname,
        'patronymic': teacher.patronymic,
        'position': teacher.position,
        'email': teacher.email,
        'user_id': teacher.user_id,
        'department': department_to_dict(teacher.department) if teacher.department else None,
        'disable': teacher.disable,
    }


def group_to_dict(group):
    return {'id': group.id, 'title': group.title, 'sort_order': group.sort_order, 'disable': group.disable}


def groups_to_refs(groups):
    """Облегченные ссылки на группы (id + название) для вложения в занятия"""
    return [{'id': group.id, 'title': group.title} for group in groups]


def room_type_to_dict(room_type):
    return {'id': room_type.id, 'description': room_type.description}


def room_to_dict(room):
    return {
        'id': room.id,
        'name': room.name,
        'type': room_type_to_dict(room.type) if room.type else None,
        'sort_order': room.sort_order,
        'disable': room.disable,
    }


def subject_to_dict(subject):
    return {'id': subject.id, 'name': subject.name, 'disable': subject.disable}


def period_to_dict(period):
    return {
        'id': period.id,
        'name': period.name,
        'start_time': _time(period.start_time),
        'end_time': _time(period.end_time),
    }


def semester_to_dict(semester, with_groups=True):
    data = {
        'id': semester.id,
        'description': semester.description,
        'year': semester.year,
        'start_day': semester.start_day.isoformat(),
        'end_day': semester.end_day.isoformat(),
        'current_semester': semester.current_semester,
        'default_semester': semester.default_semester,
        'disable': semester.disable,
        'days_of_week': semester.days_of_week,
        'periods': [period_to_dict(p) for p in semester.ordered_periods],
    }
    if with_groups:
        data['groups'] = [group_to_dict(g) for g in sorted(semester.groups, key=group_sort_key)]
    return data


def lesson_to_dict(lesson):
    return {
        'id': lesson.id,
        'hours': lesson.hours,
        'link_to_meeting': lesson.link_to_meeting,
        'subject_for_site': lesson.subject_for_site,
        'lesson_type': lesson.lesson_type,
        'grouped': lesson.grouped,
        'teacher': {'id': lesson.teacher.id, 'surname': lesson.teacher.surname,
                    'short_name': lesson.teacher.short_name},
        'subject': subject_to_dict(lesson.subject),
        'group': {'id': lesson.group.id, 'title': lesson.group.title},
        'semester_id': lesson.semester_id,
    }


def schedule_to_dict(schedule):
    """Запись расписания без вложенного семестра"""
    return {
        'id': schedule.id,
        'day_of_week': schedule.day_of_week,
        'even_odd': schedule.even_odd,
        'period': period_to_dict(schedule.period),
        'room': {'id': schedule.room.id, 'name': schedule.room.name},
        'lesson': lesson_to_dict(schedule.lesson),
    }


def user_to_dict(user):
    return {'id': user.id, 'email': user.email, 'role': user.role}


def group_sort_key(group):
    """Группы без sort_order - в конец, затем по названию"""
    return (group.sort_order is None, group.sort_order or 0, group.title)


def room_sort_key(room):
    return (room.sort_order is None, room.sort_order or 0, room.name)
