# exams/models.py - Class tests and their per-student scores

from mongoengine import (
    Document, EmbeddedDocument, StringField, DateTimeField, ReferenceField,
    ListField, EmbeddedDocumentField, IntField, FloatField, ObjectIdField, CASCADE,
)
from classrooms.models import Classroom
import datetime


class ScoreEntry(EmbeddedDocument):
    student_id = ObjectIdField(required=True)
    score = FloatField(required=True, min_value=0)


class Exam(Document):
    """A weekly or real test taken by one class"""

    TEST_TYPES = [
        ('weeklyTest', 'Weekly test'),
        ('realTest', 'Real test'),
    ]

    test_type = StringField(choices=TEST_TYPES, required=True)
    classroom = ReferenceField(Classroom, required=True, reverse_delete_rule=CASCADE)
    date = DateTimeField(required=True)
    question_count = IntField(min_value=0, required=False)
    scores = ListField(EmbeddedDocumentField(ScoreEntry))

    # Curriculum tags (weekly tests) / source (real tests)
    subject = StringField(default='')
    big_unit = StringField(default='')
    small_unit = StringField(default='')
    source = StringField(default='')

    # Timestamps
    created_at = DateTimeField(default=datetime.datetime.now)
    updated_at = DateTimeField(default=datetime.datetime.now)

    meta = {
        'collection': 'tests',
        'indexes': [
            ('classroom', '-date'),
        ],
        'ordering': ['-date'],
    }

    def __str__(self):
        return f"{self.test_type} {self.date:%Y-%m-%d}"

    def save(self, *args, **kwargs):
        """Override save to update timestamp"""
        self.updated_at = datetime.datetime.now()
        return super().save(*args, **kwargs)

    def score_for(self, student_id):
        student_id = str(student_id)
        for entry in self.scores:
            if str(entry.student_id) == student_id:
                return entry.score
        return None

    @property
    def score_values(self):
        return [entry.score for entry in self.scores if entry.score is not None]
