# clinic/management/commands/ensure_admin.py
from django.conf import settings
from django.core.management.base import BaseCommand, CommandError

from clinic.models import User


class Command(BaseCommand):
    help = "Create or repair the default administrator (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--password", help="Password to set (defaults to DEFAULT_ADMIN_PASSWORD).")

    def handle(self, *args, **opts):
        username = settings.DEFAULT_ADMIN_USERNAME
        password = opts.get("password") or settings.DEFAULT_ADMIN_PASSWORD
        u, created = User.objects.get_or_create(
            username=username,
            defaults={"email": settings.DEFAULT_ADMIN_EMAIL, "phone_number": settings.DEFAULT_ADMIN_PHONE},
        )
        if created and not password:
            u.delete()
            raise CommandError("DEFAULT_ADMIN_PASSWORD (or --password) is required to create the admin.")
        # always restore role and status, the password only when one is given
        u.role = User.ROLE_ADMIN
        u.status = User.STATUS_ACTIVE
        u.is_staff = True
        u.is_superuser = True
        if password:
            u.set_password(password)
        u.save()
        state = "created" if created else "repaired"
        self.stdout.write(self.style.SUCCESS(f"ok: {username} {state}"))
