"""
Сборка представлений расписания (по аудитории, группе, преподавателю).

Плоские записи расписания раскладываются в дерево
день недели -> четность недели -> пара -> список занятий.
Для каждого дня и каждой пары семестра создается запись, даже если занятий нет,
поэтому результат всегда является полной прямоугольной сеткой.

Модуль не обращается к БД: на вход приходят уже загруженные объекты.
Записи расписания сравниваются только по идентификаторам (id пары, id владельца,
id преподавателя), а не по объектам.
"""
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from unischedule.models.university import EvenOdd, day_sort_key

EVEN = EvenOdd.EVEN.value
ODD = EvenOdd.ODD.value
WEEKLY = EvenOdd.WEEKLY.value

GroupMapper = Callable[[List[Any]], List[Dict[str, Any]]]


@dataclass(frozen=True, eq=False)
class PeriodRef:
    """Пара в сетке семестра. Равенство и хэш - только по id"""
    id: int
    name: str
    start_time: Optional[str] = None
    end_time: Optional[str] = None

    def __eq__(self, other):
        if not isinstance(other, PeriodRef):
            return NotImplemented
        return self.id == other.id

    def __hash__(self):
        return hash(self.id)

    @classmethod
    def from_period(cls, period):
        return cls(
            id=period.id,
            name=period.name,
            start_time=period.start_time.strftime('%H:%M') if period.start_time else None,
            end_time=period.end_time.strftime('%H:%M') if period.end_time else None,
        )

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'start_time': self.start_time, 'end_time': self.end_time}


@dataclass(frozen=True)
class SemesterGrid:
    """Область построения сетки: упорядоченные дни и пары семестра"""
    days: Tuple[str, ...]
    periods: Tuple[PeriodRef, ...]

    @classmethod
    def from_semester(cls, semester):
        return cls(
            days=tuple(sorted(semester.days_of_week, key=day_sort_key)),
            periods=tuple(PeriodRef.from_period(p)
                          for p in sorted(semester.periods, key=lambda p: (p.start_time, p.id))),
        )


@dataclass
class LessonEntry:
    subject_name: str
    lesson_type: str
    teacher: Dict[str, Any]
    room: Optional[Dict[str, Any]]
    groups: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self):
        return {
            'subject_name': self.subject_name,
            'lesson_type': self.lesson_type,
            'teacher': self.teacher,
            'room': self.room,
            'groups': self.groups,
        }


@dataclass
class PeriodEntry:
    period: PeriodRef
    lessons: List[LessonEntry] = field(default_factory=list)

    def to_dict(self):
        return {'period': self.period.to_dict(), 'lessons': [lesson.to_dict() for lesson in self.lessons]}


@dataclass
class DayEntry:
    day: str
    even: List[PeriodEntry]
    odd: List[PeriodEntry]

    def to_dict(self):
        return {
            'day': self.day,
            'even': [entry.to_dict() for entry in self.even],
            'odd': [entry.to_dict() for entry in self.odd],
        }


@dataclass
class OwnerView:
    """Расписание одного владельца (аудитории, группы или преподавателя)"""
    owner_type: str
    owner: Dict[str, Any]
    days: List[DayEntry]

    def to_dict(self):
        return {self.owner_type: self.owner, 'days': [day.to_dict() for day in self.days]}


# --- Группировка ---

def _parities(even_odd):
    """Недели, в которые попадает запись: WEEKLY стоит и в четной, и в нечетной"""
    if even_odd == WEEKLY:
        return (EVEN, ODD)
    return (even_odd,)


def group_by_day(assignments: Iterable[Any], grid: SemesterGrid):
    """
    Группирует записи одного владельца: день -> четность -> id пары -> записи.

    Порядок дней берется из семестра, а не из входных данных.
    Дни вне семестра отбрасываются.
    """
    grouped = OrderedDict((day, {EVEN: OrderedDict(), ODD: OrderedDict()}) for day in grid.days)
    for item in assignments:
        day = grouped.get(item.day_of_week)
        if day is None:
            continue
        for parity in _parities(item.even_odd):
            day[parity].setdefault(item.period.id, []).append(item)
    # Дни без записей не нужны на этом этапе: их заполнит fill_days
    return OrderedDict((day, weeks) for day, weeks in grouped.items() if weeks[EVEN] or weeks[ODD])


def index_by_owner(assignments: Iterable[Any], owner_key: Callable[[Any], Any]):
    """Строит отображение id владельца -> список его записей (порядок входа сохраняется)"""
    index = OrderedDict()
    for item in assignments:
        index.setdefault(owner_key(item), []).append(item)
    return index


# --- Свертка занятий внутри пары ---

def _lesson_identity(item):
    lesson = item.lesson
    return (lesson.subject_for_site or lesson.subject.name, lesson.lesson_type, lesson.teacher.id)


def _teacher_ref(teacher):
    return {'id': teacher.id, 'surname': teacher.surname, 'short_name': teacher.short_name}


def _room_ref(room):
    if room is None:
        return None
    return {'id': room.id, 'name': room.name}


def collapse_lessons(items: Sequence[Any], group_mapper: GroupMapper) -> List[LessonEntry]:
    """
    Сворачивает записи одной ячейки с одинаковыми (предмет, тип, преподаватель)
    в одно занятие со списком всех групп.
    """
    buckets = OrderedDict()
    for item in items:
        buckets.setdefault(_lesson_identity(item), []).append(item)

    entries = []
    for (subject_name, lesson_type, _), bucket in buckets.items():
        first = bucket[0]
        groups = []
        seen = set()
        for item in bucket:
            group = item.lesson.group
            if group.id not in seen:
                seen.add(group.id)
                groups.append(group)
        entries.append(LessonEntry(
            subject_name=subject_name,
            lesson_type=lesson_type,
            teacher=_teacher_ref(first.lesson.teacher),
            room=_room_ref(first.room),
            groups=group_mapper(groups),
        ))
    return entries


# --- Заполнение пропусков ---

def _fill_periods(grid, by_period, group_mapper):
    entries = []
    for period in grid.periods:
        items = by_period.get(period.id)
        lessons = collapse_lessons(items, group_mapper) if items else []
        entries.append(PeriodEntry(period=period, lessons=lessons))
    return entries


def fill_days(grid: SemesterGrid, grouped, group_mapper: GroupMapper) -> List[DayEntry]:
    """
    Строит по одной записи на каждый день семестра, в каждой - четная и нечетная
    недели с записью на каждую пару. Пустые ячейки получают пустой список занятий.
    """
    days = []
    for day in grid.days:
        weeks = grouped.get(day) or {}
        days.append(DayEntry(
            day=day,
            even=_fill_periods(grid, weeks.get(EVEN, {}), group_mapper),
            odd=_fill_periods(grid, weeks.get(ODD, {}), group_mapper),
        ))
    return days


def empty_days(grid: SemesterGrid) -> List[DayEntry]:
    """Пустая сетка: та же структура, что у владельца без единого занятия"""
    return fill_days(grid, {}, lambda groups: [])


# --- Сборка ---

def compose_views(owner_type: str,
                  owners: Iterable[Any],
                  grid: SemesterGrid,
                  assignments_by_owner: Dict[Any, List[Any]],
                  describe_owner: Callable[[Any], Dict[str, Any]],
                  group_mapper: GroupMapper) -> List[OwnerView]:
    """
    Для каждого владельца из списка собирает полное расписание.
    Владельцы без записей получают пустую сетку той же формы.
    """
    views = []
    for owner in owners:
        assignments = assignments_by_owner.get(owner.id)
        if assignments:
            days = fill_days(grid, group_by_day(assignments, grid), group_mapper)
        else:
            days = empty_days(grid)
        views.append(OwnerView(owner_type=owner_type, owner=describe_owner(owner), days=days))
    return views


def describe_room(room):
    return {'id': room.id, 'name': room.name, 'type': room.type.description if room.type else None}


def describe_group(group):
    return {'id': group.id, 'title': group.title}


def describe_teacher(teacher):
    return {
        'id': teacher.id,
        'name': teacher.name,
        'surname': teacher.surname,
        'patronymic': teacher.patronymic,
        'position': teacher.position,
    }


def compose_room_views(rooms, grid, schedules, group_mapper):
    by_room = index_by_owner(schedules, lambda s: s.room.id)
    return compose_views('room', rooms, grid, by_room, describe_room, group_mapper)


def compose_group_views(groups, grid, schedules, group_mapper):
    by_group = index_by_owner(schedules, lambda s: s.lesson.group.id)
    return compose_views('group', groups, grid, by_group, describe_group, group_mapper)


def compose_teacher_views(teachers, grid, schedules, group_mapper):
    by_teacher = index_by_owner(schedules, lambda s: s.lesson.teacher.id)
    return compose_views('teacher', teachers, grid, by_teacher, describe_teacher, group_mapper)
