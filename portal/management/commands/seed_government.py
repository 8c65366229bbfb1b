from django.conf import settings
from django.core.management.base import BaseCommand

from portal.models import User
from portal.services.demo import ensure_government_officer


class Command(BaseCommand):
    help = "Create the government officer account from DEMO_CREDENTIALS if missing."

    def handle(self, *args, **opts):
        username = settings.DEMO_CREDENTIALS['government']['identifier']
        if User.objects.filter(username=username, role=User.ROLE_GOVERNMENT).exists():
            self.stdout.write("Government user already exists.")
            return
        user = ensure_government_officer()
        self.stdout.write(self.style.SUCCESS(f"Government user created: {user.username}"))
