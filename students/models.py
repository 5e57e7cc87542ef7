from mongoengine import Document, StringField, DateTimeField, ReferenceField, NULLIFY
from accounts.models import User
from classrooms.models import Classroom
import datetime


class Student(Document):
    """Academy student. Owns two login accounts: the student's and the parent's."""

    name = StringField(max_length=100, required=True)
    school = StringField(max_length=100, required=True)
    grade = StringField(max_length=20, required=True)
    student_phone = StringField(max_length=30, required=True)
    parent_phone = StringField(max_length=30, required=True)

    user = ReferenceField(User, required=True)
    parent_user = ReferenceField(User, required=True)

    # Primary class; membership lists live on Classroom.students
    classroom = ReferenceField(Classroom, required=False, reverse_delete_rule=NULLIFY)

    # Timestamps
    created_at = DateTimeField(default=datetime.datetime.now)
    updated_at = DateTimeField(default=datetime.datetime.now)

    meta = {
        'collection': 'students',
        'indexes': [
            'name',
            'grade',
            'classroom',
            'user',
            'parent_user',
            '-created_at',
        ],
        'ordering': ['-created_at'],
    }

    def __str__(self):
        return f"{self.name} ({self.school} {self.grade})"

    def save(self, *args, **kwargs):
        """Override save to update timestamp"""
        self.updated_at = datetime.datetime.now()
        return super().save(*args, **kwargs)
