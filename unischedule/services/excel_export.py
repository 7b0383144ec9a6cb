"""
Выгрузка расписания в Excel: один лист на владельца (аудиторию, группу, преподавателя)
"""
import logging
from io import BytesIO
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

logger = logging.getLogger(__name__)

DAYS_NAMES = {
    'MONDAY': 'Понедельник',
    'TUESDAY': 'Вторник',
    'WEDNESDAY': 'Среда',
    'THURSDAY': 'Четверг',
    'FRIDAY': 'Пятница',
    'SATURDAY': 'Суббота',
    'SUNDAY': 'Воскресенье',
}

LESSON_TYPES_NAMES = {
    'LECTURE': 'лек.',
    'PRACTICAL': 'пр.',
    'LABORATORY': 'лаб.',
}

# Excel запрещает эти символы в названии листа
_FORBIDDEN_SHEET_CHARS = '[]:*?/\\'

HEADER_FILL = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
HEADER_FONT = Font(bold=True, color="FFFFFF", size=12)
BORDER = Border(
    left=Side(style='thin'),
    right=Side(style='thin'),
    top=Side(style='thin'),
    bottom=Side(style='thin')
)
CENTER = Alignment(horizontal='center', vertical='center', wrap_text=True)
CELL_ALIGNMENT = Alignment(horizontal='left', vertical='top', wrap_text=True)


def owner_title(owner_type, owner):
    if owner_type == 'room':
        return owner['name']
    if owner_type == 'group':
        return owner['title']
    return f"{owner['surname']} {owner['name'][:1]}. {owner['patronymic'][:1]}."


def _sheet_title(title, used):
    """Название листа: без запрещенных символов, не длиннее 31 символа и уникальное"""
    clean = ''.join('_' if ch in _FORBIDDEN_SHEET_CHARS else ch for ch in str(title))[:31] or 'Sheet'
    candidate = clean
    suffix = 2
    while candidate in used:
        tail = f" ({suffix})"
        candidate = clean[:31 - len(tail)] + tail
        suffix += 1
    used.add(candidate)
    return candidate


def format_lesson(owner_type, lesson):
    """Текст ячейки для одного занятия; поле владельца листа не повторяется"""
    lines = [f"{lesson['subject_name']} ({LESSON_TYPES_NAMES.get(lesson['lesson_type'], lesson['lesson_type'])})"]
    if owner_type != 'teacher':
        lines.append(lesson['teacher']['short_name'])
    if owner_type != 'group':
        lines.append(', '.join(group['title'] for group in lesson['groups']))
    if owner_type != 'room' and lesson['room']:
        lines.append(lesson['room']['name'])
    return '\n'.join(lines)


def _cell_text(owner_type, period_entry):
    return '\n\n'.join(format_lesson(owner_type, lesson) for lesson in period_entry['lessons'])


def _write_header(ws, row, values):
    for col, value in enumerate(values, start=1):
        cell = ws.cell(row=row, column=col, value=value)
        cell.fill = HEADER_FILL
        cell.font = HEADER_FONT
        cell.alignment = CENTER
        cell.border = BORDER


def _write_view(ws, view, semester_title):
    owner_type = next(key for key in view if key != 'days')
    owner = view[owner_type]

    ws['A1'] = f"{semester_title} - {owner_title(owner_type, owner)}"
    ws.merge_cells('A1:D1')
    ws['A1'].font = Font(bold=True, size=14)
    ws['A1'].alignment = CENTER

    row = 3
    _write_header(ws, row, ['День', 'Пара', 'Четная неделя', 'Нечетная неделя'])
    row += 1

    for day in view['days']:
        first_row = row
        for even, odd in zip(day['even'], day['odd']):
            period = even['period']
            ws.cell(row=row, column=2, value=f"{period['name']}\n{period['start_time']}-{period['end_time']}")
            ws.cell(row=row, column=3, value=_cell_text(owner_type, even))
            ws.cell(row=row, column=4, value=_cell_text(owner_type, odd))
            for col in range(1, 5):
                ws.cell(row=row, column=col).border = BORDER
                ws.cell(row=row, column=col).alignment = CELL_ALIGNMENT
            ws.row_dimensions[row].height = 60
            row += 1
        if row > first_row:
            ws.cell(row=first_row, column=1, value=DAYS_NAMES.get(day['day'], day['day']))
            ws.cell(row=first_row, column=1).alignment = CENTER
            if row - 1 > first_row:
                ws.merge_cells(start_row=first_row, start_column=1, end_row=row - 1, end_column=1)

    ws.column_dimensions['A'].width = 16
    ws.column_dimensions['B'].width = 14
    for col in (3, 4):
        ws.column_dimensions[get_column_letter(col)].width = 40


def build_workbook(views, semester_title):
    """
    Строит книгу Excel из представлений расписания (результат OwnerView.to_dict()).
    Возвращает BytesIO, готовый к отправке через send_file.
    """
    logger.info(f"In build_workbook(views = [{len(views)}], semester = [{semester_title}])")
    wb = Workbook()
    wb.remove(wb.active)
    used = set()
    for view in views:
        owner_type = next(key for key in view if key != 'days')
        ws = wb.create_sheet(_sheet_title(owner_title(owner_type, view[owner_type]), used))
        _write_view(ws, view, semester_title)
    if not wb.worksheets:
        ws = wb.create_sheet('Расписание')
        ws['A1'] = f"{semester_title} - расписание пусто"

    output = BytesIO()
    wb.save(output)
    output.seek(0)
    return output
