from mongoengine import Document, StringField, DateTimeField, ReferenceField
from accounts.models import User
import datetime


class Teacher(Document):
    """Teacher profile. Login id, phone and password live on the linked User."""

    name = StringField(max_length=100, required=True)
    description = StringField(default='')
    user = ReferenceField(User, required=True)

    # Timestamps
    created_at = DateTimeField(default=datetime.datetime.now)
    updated_at = DateTimeField(default=datetime.datetime.now)

    meta = {
        'collection': 'teachers',
        'indexes': [
            'name',
            'user',
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
    def login_id(self):
        return self.user.login_id if self.user else ''

    @property
    def phone(self):
        return self.user.phone if self.user else ''
