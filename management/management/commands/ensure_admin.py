from django.core.management.base import BaseCommand, CommandError
from decouple import config

from user.models import User


class Command(BaseCommand):
    help = "Create the admin profile, or reactivate it and restore its admin role"

    def add_arguments(self, parser):
        parser.add_argument('--email', default=config('ADMIN_EMAIL', default='admin@admin.com'))
        parser.add_argument('--password', default=config('ADMIN_PASSWORD', default=None))
        parser.add_argument('--full-name', dest='full_name', default='Administrator')

    def handle(self, *args, **options):
        email = options['email']
        admin = User.objects.filter(email=email).first()

        if admin is None:
            if not options['password']:
                raise CommandError("A password is required to create the admin (--password or ADMIN_PASSWORD)")
            User.objects.create_superuser(email, options['password'], full_name=options['full_name'])
            self.stdout.write(self.style.SUCCESS(f"Admin created with email: {email}"))
            return

        self.stdout.write(f"Admin exists: {admin.email} (role={admin.role}, status={admin.status})")
        changed = []
        if admin.status != User.STATUS_ACTIVE:
            admin.status = User.STATUS_ACTIVE
            changed.append('status')
        if admin.role != User.ROLE_ADMIN:
            admin.role = User.ROLE_ADMIN
            changed.append('role')
        if not admin.is_superuser:
            admin.is_superuser = True
            changed.append('is_superuser')

        if changed:
            admin.save(update_fields=changed + ['updated_at'])
            self.stdout.write(self.style.SUCCESS(f"Updated: {', '.join(changed)}"))
        else:
            self.stdout.write("Nothing to update")
