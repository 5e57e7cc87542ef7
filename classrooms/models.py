from mongoengine import Document, StringField, DateTimeField, ReferenceField, ListField
import datetime


class Classroom(Document):
    """A class (반): its teachers and its enrolled students"""

    name = StringField(max_length=100, required=True)
    description = StringField(default='')
    teachers = ListField(ReferenceField('Teacher'))
    students = ListField(ReferenceField('Student'))

    # Timestamps
    created_at = DateTimeField(default=datetime.datetime.now)
    updated_at = DateTimeField(default=datetime.datetime.now)

    meta = {
        'collection': 'classes',
        'indexes': [
            'name',
            'teachers',
            'students',
        ],
        'ordering': ['-created_at'],
    }

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        """Override save to update timestamp"""
        self.updated_at = datetime.datetime.now()
        return super().save(*args, **kwargs)

    @property
    def teacher_ids(self):
        return [str(teacher.id) for teacher in self.teachers]

    @property
    def student_ids(self):
        return [str(student.id) for student in self.students]

    def has_teacher(self, teacher):
        return teacher is not None and str(teacher.id) in self.teacher_ids

    def has_student(self, student):
        return student is not None and str(student.id) in self.student_ids
