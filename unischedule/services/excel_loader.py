# unischedule/services/excel_loader.py
import logging
import zipfile
import pandas as pd
from unischedule.core.db_manager import db
from unischedule.core.errors import ParseFileException
from unischedule.models.university import Group, Teacher, Department

logger = logging.getLogger(__name__)

GROUP_COLUMNS = {
    'title': ['title', 'group', 'группа', 'название'],
}

TEACHER_COLUMNS = {
    'surname': ['surname', 'фамилия'],
    'name': ['name', 'имя'],
    'patronymic': ['patronymic', 'отчество'],
    'position': ['position', 'должность'],
    'email': ['email', 'e-mail', 'почта'],
    'department': ['department', 'кафедра'],
}


def _read_sheet(source):
    """
    Читает первый лист файла и убирает полностью пустые строки и столбцы.
    source - путь или поток загруженного файла
    """
    try:
        df = pd.read_excel(source)
    except (ValueError, OSError, zipfile.BadZipFile) as e:
        logger.error(f"Не удалось прочитать файл: {e}")
        raise ParseFileException('Не удалось прочитать файл, загрузите корректный Excel-файл')
    return df.dropna(how='all').dropna(axis=1, how='all')


def _match_columns(df, expected):
    """
    Сопоставляет поля с заголовками файла без учета регистра.
    Возвращает словарь поле -> столбец (только найденные поля).
    """
    found = {}
    for col in df.columns:
        col_lower = str(col).strip().lower()
        for field, names in expected.items():
            if field not in found and col_lower in names:
                found[field] = col
    return found


def _cell(df, idx, col):
    if col is None:
        return None
    value = df.loc[idx, col]
    if pd.isna(value):
        return None
    value = str(value).strip()
    if value.lower() in ['nan', 'none', '']:
        return None
    return value


def load_groups_excel(source):
    """
    Загружает группы. Столбец с названием группы ищется по заголовку,
    иначе берется первый столбец. Существующие группы пропускаются.
    Возвращает (создано, пропущено).
    """
    logger.info("In load_groups_excel()")
    df = _read_sheet(source)
    if df.empty:
        raise ParseFileException('В файле нет данных')
    title_col = _match_columns(df, GROUP_COLUMNS).get('title', df.columns[0])

    current = db.session.query(db.func.max(Group.sort_order)).scalar() or 0
    created_count = 0
    skipped_count = 0
    seen = set()
    for idx in df.index:
        title = _cell(df, idx, title_col)
        if not title:
            continue
        if title in seen or db.session.query(Group).filter_by(title=title).first():
            skipped_count += 1
            continue
        seen.add(title)
        current += 1
        db.session.add(Group(title=title, sort_order=current))
        created_count += 1

    db.session.commit()
    logger.info(f"Создано групп: {created_count}, пропущено: {skipped_count}")
    return created_count, skipped_count


def load_teachers_excel(source):
    """
    Загружает преподавателей: фамилия, имя, отчество, должность, email и кафедра.
    Фамилия и имя обязательны; преподаватель с тем же ФИО пропускается.
    Кафедра создается, если ее еще нет.
    Возвращает (создано, пропущено).
    """
    logger.info("In load_teachers_excel()")
    df = _read_sheet(source)
    columns = _match_columns(df, TEACHER_COLUMNS)
    if 'surname' not in columns or 'name' not in columns:
        raise ParseFileException("В файле должны быть столбцы 'surname' и 'name'")

    created_count = 0
    skipped_count = 0
    departments = {}
    for idx in df.index:
        values = {field: _cell(df, idx, columns.get(field)) for field in TEACHER_COLUMNS}
        if not values['surname'] or not values['name']:
            continue
        patronymic = values['patronymic'] or ''
        exists = db.session.query(Teacher).filter_by(
            surname=values['surname'], name=values['name'], patronymic=patronymic).first()
        if exists:
            skipped_count += 1
            continue

        department = None
        if values['department']:
            department = departments.get(values['department'])
            if department is None:
                department = db.session.query(Department).filter_by(name=values['department']).first()
                if department is None:
                    department = Department(name=values['department'])
                    db.session.add(department)
                departments[values['department']] = department

        db.session.add(Teacher(
            surname=values['surname'],
            name=values['name'],
            patronymic=patronymic,
            position=values['position'] or '',
            email=values['email'],
            department=department,
        ))
        db.session.flush()
        created_count += 1

    db.session.commit()
    logger.info(f"Создано преподавателей: {created_count}, пропущено: {skipped_count}")
    return created_count, skipped_count
