# lessons/models.py - Lesson days with per-period attendance/homework records

from mongoengine import (
    Document, EmbeddedDocument, StringField, DateTimeField, ReferenceField,
    ListField, EmbeddedDocumentField, BooleanField, ObjectIdField, CASCADE,
)
from classrooms.models import Classroom
import datetime

MARK_CHOICES = ['O', 'X', '']


class StudentRecord(EmbeddedDocument):
    """One student's attendance/homework mark within a period"""
    student_id = ObjectIdField(required=True)
    attendance = StringField(choices=MARK_CHOICES, default='')
    homework = StringField(choices=MARK_CHOICES, default='')
    note = StringField(default='')


class Period(EmbeddedDocument):
    """A teaching period (교시) inside a lesson day"""
    teacher_id = ObjectIdField(required=True)
    memo = StringField(default='')  # progress covered in the period
    homework_description = StringField(default='')
    homework_due_date = DateTimeField(required=False)
    records = ListField(EmbeddedDocumentField(StudentRecord))

    def record_for(self, student_id):
        student_id = str(student_id)
        for record in self.records:
            if str(record.student_id) == student_id:
                return record
        return None


class LessonDay(Document):
    """All periods a class had on one day. One document per class per date."""

    classroom = ReferenceField(Classroom, required=True, reverse_delete_rule=CASCADE)
    date = DateTimeField(required=True)  # midnight of the lesson day
    periods = ListField(EmbeddedDocumentField(Period))

    # Timestamps
    created_at = DateTimeField(default=datetime.datetime.now)
    updated_at = DateTimeField(default=datetime.datetime.now)

    meta = {
        'collection': 'lesson_days',
        'indexes': [
            {'fields': ['classroom', 'date'], 'unique': True},
            '-date',
            'periods.teacher_id',
        ],
        'ordering': ['-date'],
    }

    def __str__(self):
        return f"{self.classroom.name} {self.date:%Y-%m-%d}"

    def save(self, *args, **kwargs):
        """Override save to update timestamp"""
        self.updated_at = datetime.datetime.now()
        return super().save(*args, **kwargs)


class Lesson(Document):
    """Legacy single-row lesson log kept for the teacher console"""

    classroom = ReferenceField(Classroom, required=True, reverse_delete_rule=CASCADE)
    date = DateTimeField(required=True)
    period = StringField(max_length=20, required=True)
    progress = StringField(default='')
    homework = StringField(default='')
    homework_due_date = DateTimeField(required=False)
    attendance_status = StringField(default='')
    homework_done = BooleanField(default=False)

    # Timestamps
    created_at = DateTimeField(default=datetime.datetime.now)
    updated_at = DateTimeField(default=datetime.datetime.now)

    meta = {
        'collection': 'lessons',
        'indexes': [
            ('classroom', 'date'),
        ],
    }

    def __str__(self):
        return f"{self.date:%Y-%m-%d} period {self.period}"

    def save(self, *args, **kwargs):
        """Override save to update timestamp"""
        self.updated_at = datetime.datetime.now()
        return super().save(*args, **kwargs)
