from django.contrib.auth.hashers import check_password, make_password
from mongoengine import Document, StringField, DateTimeField
import datetime


class User(Document):
    """Login account shared by every role. Students and parents get one each."""

    ROLE_CHOICES = [
        ('admin', 'Admin'),
        ('teacher', 'Teacher'),
        ('student', 'Student'),
        ('parent', 'Parent'),
    ]

    login_id = StringField(max_length=100, required=True, unique=True)
    password = StringField(max_length=256, required=True)
    role = StringField(max_length=10, choices=ROLE_CHOICES, required=True)
    name = StringField(max_length=100, required=True)
    phone = StringField(max_length=30, default='')

    # Timestamps
    created_at = DateTimeField(default=datetime.datetime.now)
    updated_at = DateTimeField(default=datetime.datetime.now)

    meta = {
        'collection': 'users',
        'indexes': [
            'login_id',
            'role',
        ]
    }

    def __str__(self):
        return f"{self.login_id} ({self.role})"

    def save(self, *args, **kwargs):
        """Override save to update timestamp"""
        self.updated_at = datetime.datetime.now()
        return super().save(*args, **kwargs)

    def set_password(self, raw_password):
        self.password = make_password(raw_password)

    def check_password(self, raw_password):
        return check_password(raw_password, self.password)

    @classmethod
    def create_user(cls, login_id, password, role, name, phone=''):
        user = cls(login_id=login_id.strip(), role=role, name=name.strip(), phone=phone or '')
        user.set_password(password)
        user.save()
        return user
