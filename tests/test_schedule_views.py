"""
Сборка представлений расписания без БД и без Flask
"""
from types import SimpleNamespace

from unischedule.services.mappers import groups_to_refs
from unischedule.services.schedule_views import (
    PeriodRef, SemesterGrid, compose_group_views, compose_room_views, compose_teacher_views,
    empty_days, group_by_day,
)

FIRST = PeriodRef(id=1, name='1', start_time='08:30', end_time='10:00')
SECOND = PeriodRef(id=2, name='2', start_time='10:10', end_time='11:40')
GRID = SemesterGrid(days=('MONDAY', 'TUESDAY'), periods=(FIRST, SECOND))


def make_teacher(teacher_id, surname):
    return SimpleNamespace(id=teacher_id, name='Иван', surname=surname, patronymic='Иванович',
                           position='Доцент', short_name=f'{surname} И. И.')


def make_group(group_id, title):
    return SimpleNamespace(id=group_id, title=title)


def make_room(room_id, name):
    return SimpleNamespace(id=room_id, name=name, type=None)


def make_item(day, even_odd, period_id, group, teacher, room, subject='Математика',
              lesson_type='LECTURE', subject_for_site=None):
    # Новый объект пары на каждую запись: сравнение только по id
    period = SimpleNamespace(id=period_id)
    lesson = SimpleNamespace(
        subject_for_site=subject_for_site,
        subject=SimpleNamespace(name=subject),
        lesson_type=lesson_type,
        teacher=teacher,
        group=group,
    )
    return SimpleNamespace(day_of_week=day, even_odd=even_odd, period=period, room=room, lesson=lesson)


IVANOV = make_teacher(1, 'Иванов')
PETROV = make_teacher(2, 'Петров')
G1 = make_group(10, 'ИВТ-101')
G2 = make_group(11, 'ИВТ-102')
R101 = make_room(100, '101')
R202 = make_room(200, '202')


def cell(view, day, parity, period_index):
    day_entry = next(d for d in view.days if d.day == day)
    return getattr(day_entry, parity)[period_index].lessons


def test_owner_without_schedule_gets_full_empty_grid():
    [view] = compose_room_views([R101], GRID, [], groups_to_refs)

    assert [d.day for d in view.days] == ['MONDAY', 'TUESDAY']
    for day in view.days:
        assert [p.period for p in day.even] == [FIRST, SECOND]
        assert [p.period for p in day.odd] == [FIRST, SECOND]
        assert all(p.lessons == [] for p in day.even + day.odd)
    assert view.days == empty_days(GRID)


def test_empty_and_filled_owners_have_the_same_shape():
    items = [make_item('TUESDAY', 'EVEN', 2, G1, IVANOV, R101)]
    busy, free = compose_room_views([R101, R202], GRID, items, groups_to_refs)

    def shape(view):
        return [(d.day, [p.period.id for p in d.even], [p.period.id for p in d.odd]) for d in view.days]

    assert shape(busy) == shape(free)
    assert free.owner == {'id': 200, 'name': '202', 'type': None}


def test_weekly_lesson_appears_in_both_parities():
    items = [make_item('MONDAY', 'WEEKLY', 1, G1, IVANOV, R101)]
    [view] = compose_group_views([G1], GRID, items, groups_to_refs)

    assert len(cell(view, 'MONDAY', 'even', 0)) == 1
    assert len(cell(view, 'MONDAY', 'odd', 0)) == 1
    assert cell(view, 'MONDAY', 'even', 1) == []


def test_even_lesson_stays_in_even_week_only():
    items = [make_item('MONDAY', 'EVEN', 2, G1, IVANOV, R101)]
    [view] = compose_group_views([G1], GRID, items, groups_to_refs)

    assert len(cell(view, 'MONDAY', 'even', 1)) == 1
    assert cell(view, 'MONDAY', 'odd', 1) == []


def test_same_lesson_for_several_groups_is_collapsed():
    items = [
        make_item('MONDAY', 'WEEKLY', 1, G1, IVANOV, R101),
        make_item('MONDAY', 'WEEKLY', 1, G2, IVANOV, R101),
        make_item('MONDAY', 'WEEKLY', 1, G1, IVANOV, R101),
    ]
    [view] = compose_room_views([R101], GRID, items, groups_to_refs)

    [lesson] = cell(view, 'MONDAY', 'even', 0)
    assert lesson.subject_name == 'Математика'
    assert lesson.teacher == {'id': 1, 'surname': 'Иванов', 'short_name': 'Иванов И. И.'}
    assert lesson.groups == [{'id': 10, 'title': 'ИВТ-101'}, {'id': 11, 'title': 'ИВТ-102'}]


def test_different_teachers_in_one_slot_are_not_collapsed():
    items = [
        make_item('MONDAY', 'ODD', 1, G1, IVANOV, R101),
        make_item('MONDAY', 'ODD', 1, G2, PETROV, R101),
    ]
    [view] = compose_room_views([R101], GRID, items, groups_to_refs)

    lessons = cell(view, 'MONDAY', 'odd', 0)
    assert [lesson.teacher['id'] for lesson in lessons] == [1, 2]


def test_collapsed_lesson_keeps_room_of_first_item():
    items = [
        make_item('TUESDAY', 'EVEN', 1, G1, IVANOV, R101),
        make_item('TUESDAY', 'EVEN', 1, G2, IVANOV, R202),
    ]
    [view] = compose_teacher_views([IVANOV], GRID, items, groups_to_refs)

    [lesson] = cell(view, 'TUESDAY', 'even', 0)
    assert lesson.room == {'id': 100, 'name': '101'}
    assert len(lesson.groups) == 2


def test_subject_for_site_overrides_subject_name():
    items = [
        make_item('MONDAY', 'EVEN', 1, G1, IVANOV, R101, subject_for_site='Высшая математика'),
        make_item('MONDAY', 'EVEN', 2, G1, IVANOV, R101),
    ]
    [view] = compose_group_views([G1], GRID, items, groups_to_refs)

    assert cell(view, 'MONDAY', 'even', 0)[0].subject_name == 'Высшая математика'
    assert cell(view, 'MONDAY', 'even', 1)[0].subject_name == 'Математика'


def test_days_outside_semester_are_ignored():
    items = [make_item('SATURDAY', 'WEEKLY', 1, G1, IVANOV, R101)]

    assert group_by_day(items, GRID) == {}
    [view] = compose_group_views([G1], GRID, items, groups_to_refs)
    assert [d.day for d in view.days] == ['MONDAY', 'TUESDAY']
    assert view.days == empty_days(GRID)


def test_owners_keep_input_order_and_get_only_their_items():
    items = [
        make_item('MONDAY', 'WEEKLY', 1, G1, IVANOV, R101),
        make_item('MONDAY', 'WEEKLY', 2, G2, PETROV, R101),
    ]
    views = compose_group_views([G2, G1], GRID, items, groups_to_refs)

    assert [v.owner['id'] for v in views] == [11, 10]
    assert cell(views[0], 'MONDAY', 'even', 0) == []
    assert cell(views[0], 'MONDAY', 'even', 1)[0].teacher['id'] == 2
    assert cell(views[1], 'MONDAY', 'even', 0)[0].teacher['id'] == 1


def test_period_ref_equality_is_by_id():
    assert PeriodRef(id=1, name='1') == PeriodRef(id=1, name='первая', start_time='08:00')
    assert len({PeriodRef(id=1, name='1'), PeriodRef(id=1, name='x')}) == 1


def test_view_serializes_to_owner_and_days():
    items = [make_item('MONDAY', 'WEEKLY', 1, G1, IVANOV, R101)]
    [view] = compose_teacher_views([IVANOV], GRID, items, groups_to_refs)
    data = view.to_dict()

    assert set(data) == {'teacher', 'days'}
    assert data['teacher']['surname'] == 'Иванов'
    monday = data['days'][0]
    assert monday['day'] == 'MONDAY'
    assert monday['even'][0]['period'] == {'id': 1, 'name': '1', 'start_time': '08:30', 'end_time': '10:00'}
    assert monday['even'][0]['lessons'][0]['groups'] == [{'id': 10, 'title': 'ИВТ-101'}]
    assert monday['odd'][1]['lessons'] == []


def test_single_lecture_in_one_room_and_empty_neighbour():
    p1 = PeriodRef(id=7, name='1')
    grid = SemesterGrid(days=('MONDAY',), periods=(p1,))
    smith = make_teacher(5, 'Smith')
    r101, r102 = make_room(1, 'R101'), make_room(2, 'R102')
    items = [make_item('MONDAY', 'EVEN', 7, make_group(3, '311-B'), smith, r101, subject='JS Frameworks')]

    busy, free = compose_room_views([r101, r102], grid, items, groups_to_refs)

    [monday] = busy.days
    assert monday.day == 'MONDAY'
    [even] = monday.even
    assert even.period == p1
    assert [g['title'] for g in even.lessons[0].groups] == ['311-B']
    assert even.lessons[0].subject_name == 'JS Frameworks'
    assert [(entry.period, entry.lessons) for entry in monday.odd] == [(p1, [])]

    [monday] = free.days
    assert [(entry.period, entry.lessons) for entry in monday.even] == [(p1, [])]
    assert [(entry.period, entry.lessons) for entry in monday.odd] == [(p1, [])]
