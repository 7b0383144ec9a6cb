"""
Модели приложения
"""
from unischedule.models.university import (
    DayOfWeek, EvenOdd, LessonType, day_sort_key,
    Department, Teacher, Group, RoomType, Room, Subject, Period,
    SemesterDay, Semester, Lesson, Schedule, PublishSettings
)
from unischedule.models.system import User, ROLE_USER, ROLE_TEACHER, ROLE_MANAGER, ROLES

__all__ = [
    # Enums
    'DayOfWeek', 'EvenOdd', 'LessonType', 'day_sort_key',
    # University models
    'Department', 'Teacher', 'Group', 'RoomType', 'Room', 'Subject', 'Period',
    'SemesterDay', 'Semester', 'Lesson', 'Schedule', 'PublishSettings',
    # System models
    'User', 'ROLE_USER', 'ROLE_TEACHER', 'ROLE_MANAGER', 'ROLES'
]
