# rx_core/common/management/commands/ensure_roles.py
from django.contrib.auth.models import Group
from django.core.management.base import BaseCommand

from rx_core.common.permissions import ALL_ROLES


class Command(BaseCommand):
    help = "Create the role groups used for API access. Safe to re-run."

    def handle(self, *args, **options):
        for name in ALL_ROLES:
            _, created = Group.objects.get_or_create(name=name)
            self.stdout.write(f"{name}: {'created' if created else 'exists'}")

        self.stdout.write(self.style.SUCCESS("Role groups ready."))
