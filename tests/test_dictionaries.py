"""
Справочники: кафедры, группы, аудитории, предметы и пары
"""


def test_department_name_is_unique(client, manager_headers, seed):
    response = client.post('/api/departments', json={'name': 'Кафедра информатики'}, headers=manager_headers)
    assert response.status_code == 400
    assert 'уже существует' in response.get_json()['error']


def test_department_teachers(client, seed):
    response = client.get(f'/api/departments/{seed.department_id}/teachers')
    assert [t['surname'] for t in response.get_json()] == ['Иванов', 'Петров']


def test_unknown_entity_is_not_found(client, seed):
    response = client.get('/api/subjects/9999')
    assert response.status_code == 404
    assert response.get_json() == {'success': False, 'error': 'Запись Subject с id=9999 не найдена'}


def test_group_inserted_after_another_group(client, manager_headers, seed):
    first_id = seed.group_ids[0]
    response = client.post(f'/api/groups/after/{first_id}', json={'title': 'ИВТ-101А'}, headers=manager_headers)
    assert response.status_code == 201
    assert response.get_json()['sort_order'] == 2

    titles = [g['title'] for g in client.get('/api/groups').get_json()]
    assert titles == ['ИВТ-101', 'ИВТ-101А', 'ИВТ-102', 'ИВТ-103']


def test_group_title_length_is_checked(client, manager_headers, seed):
    response = client.post('/api/groups', json={'title': 'A'}, headers=manager_headers)
    assert response.status_code == 400


def test_used_room_type_cannot_be_deleted(client, manager_headers, seed):
    response = client.delete(f'/api/room-types/{seed.room_type_id}', headers=manager_headers)
    assert response.status_code == 400

    free_type = client.post('/api/room-types', json={'description': 'Компьютерный класс'},
                            headers=manager_headers).get_json()
    response = client.delete(f"/api/room-types/{free_type['id']}", headers=manager_headers)
    assert response.status_code == 200


def test_rooms_are_listed_in_sort_order(client, manager_headers, seed):
    client.post('/api/rooms/after/0', json={'name': '001'}, headers=manager_headers)
    names = [r['name'] for r in client.get('/api/rooms').get_json()]
    assert names == ['001', '101', '202']


def test_period_start_must_be_before_end(client, manager_headers, seed):
    response = client.post('/api/classes', json={'name': '3', 'start_time': '13:00', 'end_time': '12:00'},
                           headers=manager_headers)
    assert response.status_code == 400


def test_period_cannot_overlap_existing(client, manager_headers, seed):
    response = client.post('/api/classes', json={'name': '3', 'start_time': '09:00', 'end_time': '10:30'},
                           headers=manager_headers)
    assert response.status_code == 400
    assert 'пересекается' in response.get_json()['error']


def test_create_many_periods_in_time_order(client, manager_headers, seed):
    response = client.post('/api/classes/many', json=[
        {'name': '4', 'start_time': '13:50', 'end_time': '15:20'},
        {'name': '3', 'start_time': '12:00', 'end_time': '13:30'},
    ], headers=manager_headers)
    assert response.status_code == 201

    names = [p['name'] for p in client.get('/api/classes').get_json()]
    assert names == ['1', '2', '3', '4']


def test_create_many_periods_rejects_overlap_inside_request(client, manager_headers, seed):
    response = client.post('/api/classes/many', json=[
        {'name': '3', 'start_time': '12:00', 'end_time': '13:30'},
        {'name': '4', 'start_time': '13:00', 'end_time': '14:30'},
    ], headers=manager_headers)
    assert response.status_code == 400
    assert len(client.get('/api/classes').get_json()) == 2
