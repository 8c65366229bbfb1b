from django.core.management.base import BaseCommand

from portal.services.demo import ensure_demo_admin, ensure_demo_patient, ensure_government_officer


class Command(BaseCommand):
    help = "Ensure the demo patient, hospital admin and government officer exist with their configured passwords (idempotent)."

    def handle(self, *args, **opts):
        for user in (ensure_demo_patient(), ensure_demo_admin(), ensure_government_officer()):
            self.stdout.write(self.style.SUCCESS(f"ok: {user.username} ({user.role})"))
        self.stdout.write(self.style.SUCCESS("All demo users ensured."))
