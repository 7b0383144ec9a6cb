"""
Занятия: дубликаты, объединенные занятия для нескольких групп, копирование
"""


def test_lesson_for_one_group(client, seed, create_lessons):
    [lesson] = create_lessons([seed.group_ids[0]])

    assert lesson['grouped'] is False
    assert lesson['subject_for_site'] == 'Математика'
    assert lesson['group']['title'] == 'ИВТ-101'
    assert lesson['semester_id'] == seed.semester_id


def test_lesson_for_several_groups_is_grouped(client, seed, create_lessons):
    lessons = create_lessons(seed.group_ids[:2], subject_for_site='Высшая математика')

    assert [lesson['group']['id'] for lesson in lessons] == seed.group_ids[:2]
    assert all(lesson['grouped'] for lesson in lessons)
    assert {lesson['subject_for_site'] for lesson in lessons} == {'Высшая математика'}


def test_duplicate_lesson_is_refused(client, manager_headers, seed, create_lessons):
    create_lessons([seed.group_ids[0]])
    response = client.post('/api/lessons', json={
        'subject_id': seed.math_id, 'teacher_id': seed.ivanov_id, 'lesson_type': 'LECTURE',
        'hours': 1, 'group_ids': [seed.group_ids[0]],
    }, headers=manager_headers)

    assert response.status_code == 400
    assert len(client.get('/api/lessons').get_json()) == 1


def test_other_lesson_type_is_not_a_duplicate(client, seed, create_lessons):
    create_lessons([seed.group_ids[0]])
    [practical] = create_lessons([seed.group_ids[0]], lesson_type='PRACTICAL')
    assert practical['lesson_type'] == 'PRACTICAL'


def test_unknown_lesson_type_is_rejected(client, manager_headers, seed):
    response = client.post('/api/lessons', json={
        'subject_id': seed.math_id, 'teacher_id': seed.ivanov_id, 'lesson_type': 'SEMINAR',
        'group_ids': [seed.group_ids[0]],
    }, headers=manager_headers)
    assert response.status_code == 400


def test_update_of_grouped_lesson_changes_whole_set(client, manager_headers, seed, create_lessons):
    first, second = create_lessons(seed.group_ids[:2])
    response = client.put(f"/api/lessons/{first['id']}", json={'teacher_id': seed.petrov_id, 'hours': 3},
                          headers=manager_headers)
    assert response.status_code == 200

    other = client.get(f"/api/lessons/{second['id']}").get_json()
    assert other['teacher']['id'] == seed.petrov_id
    assert other['hours'] == 3


def test_delete_of_grouped_lesson_removes_whole_set(client, manager_headers, seed, create_lessons):
    first, second = create_lessons(seed.group_ids[:2])
    create_lessons([seed.group_ids[2]], subject_id=seed.physics_id)

    response = client.delete(f"/api/lessons/{first['id']}", headers=manager_headers)
    assert sorted(response.get_json()['deleted_ids']) == sorted([first['id'], second['id']])
    assert [lesson['group']['id'] for lesson in client.get('/api/lessons').get_json()] == [seed.group_ids[2]]


def test_lessons_by_group_and_teacher(client, seed, create_lessons):
    create_lessons([seed.group_ids[0]])
    create_lessons([seed.group_ids[1]], subject_id=seed.physics_id, teacher_id=seed.petrov_id)

    by_group = client.get(f'/api/lessons?group_id={seed.group_ids[1]}').get_json()
    assert [lesson['subject']['name'] for lesson in by_group] == ['Физика']

    by_teacher = client.get(f'/api/lessons/teacher/{seed.ivanov_id}').get_json()
    assert [lesson['group']['id'] for lesson in by_teacher] == [seed.group_ids[0]]


def test_copy_lesson_to_other_groups_skips_existing(client, manager_headers, seed, create_lessons):
    [lesson] = create_lessons([seed.group_ids[0]])
    response = client.post(f"/api/lessons/{lesson['id']}/copy", json={'group_ids': seed.group_ids},
                           headers=manager_headers)

    assert response.status_code == 201
    assert [copy['group']['id'] for copy in response.get_json()] == seed.group_ids[1:]


def test_link_to_meeting_is_set_for_teacher_subject(client, manager_headers, seed, create_lessons):
    create_lessons(seed.group_ids[:2])
    response = client.put('/api/lessons/link-to-meeting', json={
        'semester_id': seed.semester_id, 'subject_id': seed.math_id, 'teacher_id': seed.ivanov_id,
        'lesson_type': 'LECTURE', 'link_to_meeting': 'https://meet.example.org/math',
    }, headers=manager_headers)

    assert response.get_json()['updated'] == 2
    links = {lesson['link_to_meeting'] for lesson in client.get('/api/lessons').get_json()}
    assert links == {'https://meet.example.org/math'}


def test_grouped_candidates_have_free_hours(client, manager_headers, seed, create_lessons, place):
    [lesson] = create_lessons([seed.group_ids[0]], hours=1)
    [other] = create_lessons([seed.group_ids[1]], hours=1)
    create_lessons([seed.group_ids[2]], hours=1, teacher_id=seed.petrov_id)

    response = client.get(f"/api/lessons/{lesson['id']}/grouped", headers=manager_headers)
    assert [candidate['id'] for candidate in response.get_json()] == [other['id']]

    place(other['id'])
    response = client.get(f"/api/lessons/{lesson['id']}/grouped", headers=manager_headers)
    assert response.get_json() == []
