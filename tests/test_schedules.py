"""
Постановка занятий в расписание, конфликты, представления, публикация и выгрузка
"""
from io import BytesIO

from openpyxl import load_workbook


def find_cell(view, day, parity, period_index):
    day_entry = next(d for d in view['days'] if d['day'] == day)
    return day_entry[parity][period_index]['lessons']


def test_save_schedule(client, manager_headers, seed, create_lessons, place):
    [lesson] = create_lessons([seed.group_ids[0]])
    response = place(lesson['id'], day='MONDAY', even_odd='EVEN')

    assert response.status_code == 201
    [item] = response.get_json()
    assert item['day_of_week'] == 'MONDAY'
    assert item['even_odd'] == 'EVEN'
    assert item['room']['name'] == '101'


def test_weekly_conflicts_with_both_parities(client, seed, create_lessons, place):
    [math] = create_lessons([seed.group_ids[0]])
    [physics] = create_lessons([seed.group_ids[0]], subject_id=seed.physics_id, teacher_id=seed.petrov_id)
    assert place(math['id'], even_odd='WEEKLY').status_code == 201

    for even_odd in ('EVEN', 'ODD', 'WEEKLY'):
        response = place(physics['id'], even_odd=even_odd, room_id=seed.room_202_id)
        assert response.status_code == 400, even_odd


def test_even_and_odd_weeks_share_a_slot(client, seed, create_lessons, place):
    [math] = create_lessons([seed.group_ids[0]])
    [physics] = create_lessons([seed.group_ids[0]], subject_id=seed.physics_id, teacher_id=seed.petrov_id)

    assert place(math['id'], even_odd='EVEN').status_code == 201
    assert place(physics['id'], even_odd='ODD').status_code == 201


def test_grouped_lesson_is_placed_for_every_group(client, manager_headers, seed, create_lessons, place):
    first, second = create_lessons(seed.group_ids[:2])
    response = place(first['id'])

    assert response.status_code == 201
    items = response.get_json()
    assert sorted(item['lesson']['group']['id'] for item in items) == seed.group_ids[:2]
    assert {item['room']['id'] for item in items} == {seed.room_101_id}


def test_grouped_sets_with_different_site_names_stay_apart(client, manager_headers, seed, create_lessons, place):
    fourth = client.post('/api/groups', json={'title': 'ИВТ-104'}, headers=manager_headers).get_json()
    higher = create_lessons(seed.group_ids[:2], subject_for_site='Высшая математика')
    discrete = create_lessons([seed.group_ids[2], fourth['id']], subject_for_site='Дискретная математика')

    response = place(higher[0]['id'])
    assert response.status_code == 201
    items = response.get_json()
    assert sorted(item['lesson']['group']['id'] for item in items) == seed.group_ids[:2]
    assert {item['lesson']['subject_for_site'] for item in items} == {'Высшая математика'}

    response = client.delete(f"/api/lessons/{discrete[0]['id']}", headers=manager_headers)
    assert sorted(response.get_json()['deleted_ids']) == sorted(lesson['id'] for lesson in discrete)
    remaining = [lesson['id'] for lesson in client.get('/api/lessons').get_json()]
    assert remaining == [lesson['id'] for lesson in higher]


def test_delete_grouped_placement_returns_all_ids(client, manager_headers, seed, create_lessons, place):
    create_lessons(seed.group_ids[:2])
    first, _ = client.get('/api/lessons').get_json()
    items = place(first['id']).get_json()

    response = client.delete(f"/api/schedules/{items[0]['id']}", headers=manager_headers)
    assert sorted(response.get_json()['deleted_ids']) == sorted(item['id'] for item in items)
    assert client.get(f'/api/schedules?semester_id={seed.semester_id}', headers=manager_headers).get_json() == []


def test_change_room(client, manager_headers, seed, create_lessons, place):
    [lesson] = create_lessons([seed.group_ids[0]])
    [item] = place(lesson['id']).get_json()

    response = client.put('/api/schedules/by-room', json={'schedule_id': item['id'], 'room_id': seed.room_202_id},
                          headers=manager_headers)
    assert response.get_json()['room']['name'] == '202'


def test_data_before_reports_teacher_and_rooms(client, manager_headers, seed, create_lessons, place):
    [busy] = create_lessons([seed.group_ids[0]])
    [lesson] = create_lessons([seed.group_ids[1]], subject_id=seed.physics_id)
    place(busy['id'], even_odd='WEEKLY')

    response = client.get('/api/schedules/data-before', query_string={
        'semester_id': seed.semester_id, 'day_of_week': 'MONDAY', 'even_odd': 'ODD',
        'period_id': seed.first_period_id, 'lesson_id': lesson['id'],
    }, headers=manager_headers)
    data = response.get_json()

    assert data['teacher_available'] is False
    assert [(room['name'], room['available']) for room in data['rooms']] == [('101', False), ('202', True)]


def test_data_before_refuses_busy_group(client, manager_headers, seed, create_lessons, place):
    [math] = create_lessons([seed.group_ids[0]])
    [physics] = create_lessons([seed.group_ids[0]], subject_id=seed.physics_id)
    place(math['id'], even_odd='EVEN')

    response = client.get('/api/schedules/data-before', query_string={
        'semester_id': seed.semester_id, 'day_of_week': 'MONDAY', 'even_odd': 'WEEKLY',
        'period_id': seed.first_period_id, 'lesson_id': physics['id'],
    }, headers=manager_headers)
    assert response.status_code == 400
    assert response.get_json() == {'success': False, 'error': 'У группы уже есть занятие в это время'}


def test_free_rooms(client, manager_headers, seed, create_lessons, place):
    [lesson] = create_lessons([seed.group_ids[0]])
    place(lesson['id'], even_odd='WEEKLY', room_id=seed.room_202_id)

    response = client.get('/api/rooms/free', query_string={
        'semester_id': seed.semester_id, 'day_of_week': 'MONDAY', 'even_odd': 'EVEN',
        'period_id': seed.first_period_id,
    }, headers=manager_headers)
    assert [room['name'] for room in response.get_json()] == ['101']


def test_delete_all_schedules_of_semester(client, manager_headers, seed, create_lessons, place):
    [lesson] = create_lessons([seed.group_ids[0]])
    place(lesson['id'], day='MONDAY')
    place(lesson['id'], day='TUESDAY')

    response = client.delete(f'/api/schedules/delete-schedules?semester_id={seed.semester_id}',
                             headers=manager_headers)
    assert response.get_json()['deleted'] == 2


def test_room_view_collapses_grouped_lesson(client, seed, create_lessons, place):
    first, _ = create_lessons(seed.group_ids[:2])
    place(first['id'], day='TUESDAY', even_odd='ODD', period_id=seed.second_period_id)

    views = client.get(f'/api/public/schedules/full/rooms?semester_id={seed.semester_id}').get_json()
    assert [view['room']['name'] for view in views] == ['101', '202']

    [lesson] = find_cell(views[0], 'TUESDAY', 'odd', 1)
    assert [group['title'] for group in lesson['groups']] == ['ИВТ-101', 'ИВТ-102']
    assert lesson['teacher']['surname'] == 'Иванов'
    assert find_cell(views[0], 'TUESDAY', 'even', 1) == []
    assert all(find_cell(views[1], day, parity, i) == []
               for day in ('MONDAY', 'TUESDAY') for parity in ('even', 'odd') for i in (0, 1))


def test_group_views(client, seed, create_lessons, place):
    [lesson] = create_lessons([seed.group_ids[1]])
    place(lesson['id'])

    views = client.get(f'/api/public/schedules/full/groups?semester_id={seed.semester_id}').get_json()
    assert [view['group']['title'] for view in views] == ['ИВТ-101', 'ИВТ-102', 'ИВТ-103']
    assert find_cell(views[1], 'MONDAY', 'even', 0)[0]['room']['name'] == '101'

    one = client.get(f'/api/public/schedules/full/groups?semester_id={seed.semester_id}'
                     f'&group_id={seed.group_ids[1]}').get_json()
    assert len(one) == 1
    assert one[0] == views[1]


def test_teacher_view(client, seed, create_lessons, place):
    [lesson] = create_lessons([seed.group_ids[0]], teacher_id=seed.petrov_id)
    place(lesson['id'], even_odd='ODD')

    [view] = client.get('/api/public/schedules/full/teachers', query_string={
        'semester_id': seed.semester_id, 'teacher_id': seed.petrov_id}).get_json()
    assert view['teacher']['surname'] == 'Петров'
    assert find_cell(view, 'MONDAY', 'odd', 0)[0]['groups'] == [{'id': seed.group_ids[0], 'title': 'ИВТ-101'}]


def test_semester_view_contains_only_groups_with_schedule(client, seed, create_lessons, place):
    [lesson] = create_lessons([seed.group_ids[2]])
    place(lesson['id'])

    data = client.get(f'/api/public/schedules/full/semester?semester_id={seed.semester_id}').get_json()
    assert data['semester']['description'] == 'Осенний'
    assert [view['group']['id'] for view in data['schedules']] == [seed.group_ids[2]]


def test_unpublished_schedule_is_hidden_from_public(client, manager_headers, seed):
    response = client.delete('/api/schedules/publish', json={'message': 'Скоро'}, headers=manager_headers)
    assert response.get_json() == {'published': False, 'message': 'Скоро'}

    hidden = client.get(f'/api/public/schedules/full/rooms?semester_id={seed.semester_id}').get_json()
    assert hidden == {'published': False, 'message': 'Скоро'}

    visible = client.get(f'/api/public/schedules/full/rooms?semester_id={seed.semester_id}',
                         headers=manager_headers).get_json()
    assert len(visible) == 2

    client.post('/api/schedules/publish', headers=manager_headers)
    assert client.get('/api/public/schedules/status').get_json()['published'] is True


def test_publish_status_is_stored_in_database(app, client, manager_headers, seed):
    client.delete('/api/schedules/publish', json={'message': 'Скоро'}, headers=manager_headers)
    # Конфигурация другого процесса по-прежнему говорит "опубликовано"
    app.config['SCHEDULE_PUBLISHED'] = True

    assert client.get('/api/public/schedules/status').get_json() == {'published': False, 'message': 'Скоро'}

    client.post('/api/schedules/publish', headers=manager_headers)
    app.config['SCHEDULE_PUBLISHED'] = False
    assert client.get('/api/public/schedules/status').get_json() == {'published': True, 'message': None}


def test_export_rooms_to_excel(client, manager_headers, seed, create_lessons, place):
    [lesson] = create_lessons([seed.group_ids[0]])
    place(lesson['id'])

    response = client.get(f'/api/schedules/export/rooms?semester_id={seed.semester_id}', headers=manager_headers)
    assert response.status_code == 200
    assert response.mimetype == 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'

    workbook = load_workbook(BytesIO(response.data))
    assert workbook.sheetnames == ['101', '202']
    sheet = workbook['101']
    assert sheet['A4'].value == 'Понедельник'
    assert 'Математика' in sheet['C4'].value
    assert 'ИВТ-101' in sheet['D4'].value


def test_export_unknown_owner_type(client, manager_headers, seed):
    response = client.get(f'/api/schedules/export/buildings?semester_id={seed.semester_id}',
                          headers=manager_headers)
    assert response.status_code == 400
