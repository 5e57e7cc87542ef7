# academy/settings_test.py - settings for the test suite (in-memory MongoDB)

import mongomock
import mongoengine

from .settings import *  # noqa: F401,F403

mongoengine.disconnect()
mongoengine.connect(
    db='academy_test_db',
    host='mongodb://localhost',
    mongo_client_class=mongomock.MongoClient,
)

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

# Fast hashing keeps the account-heavy tests quick
PASSWORD_HASHERS = [
    'django.contrib.auth.hashers.MD5PasswordHasher',
]

JWT_SECRET = 'academy-test-secret'

LOGGING['handlers']['file'] = {  # noqa: F405
    'class': 'logging.NullHandler',
}
