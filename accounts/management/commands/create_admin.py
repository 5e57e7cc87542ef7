from django.core.management.base import BaseCommand, CommandError

from accounts.models import User


class Command(BaseCommand):
    help = 'Create the first admin account (or reset its password)'

    def add_arguments(self, parser):
        parser.add_argument('login_id')
        parser.add_argument('password')
        parser.add_argument('--name', default='Administrator')
        parser.add_argument('--reset', action='store_true', help='Reset the password of an existing admin')

    def handle(self, *args, **options):
        login_id = options['login_id'].strip()
        existing = User.objects(login_id=login_id).first()

        if existing is not None:
            if not options['reset'] or existing.role != 'admin':
                raise CommandError(f'Login ID "{login_id}" is already in use')
            existing.set_password(options['password'])
            existing.save()
            self.stdout.write(self.style.SUCCESS(f'Password reset for admin "{login_id}"'))
            return

        User.create_user(login_id, options['password'], 'admin', options['name'])
        self.stdout.write(self.style.SUCCESS(f'Admin "{login_id}" created'))
