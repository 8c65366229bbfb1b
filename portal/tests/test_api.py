"""
Integration tests for the appointment workflow.

These tests exercise booking with hospital auto-onboarding, admin status
updates, both cancellation paths, document handling, transfers and the
hospital boundary between admins.  They use Django REST Framework's
APIClient within the APITestCase base class.

To run the tests:

```
pytest -q portal/tests
```
"""
import datetime
import tempfile
from unittest import mock

from django.core.files.uploadedfile import SimpleUploadedFile
from django.test import override_settings
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APIClient, APITestCase

from ..models import Appointment, AppointmentDocument, AuditEvent, Hospital, User
from ..services.appointments import city_from_address


class _RecordingLayer:
    def __init__(self):
        self.sent = []

    async def group_send(self, group, message):
        self.sent.append((group, message))


class _UnavailableLayer:
    async def group_send(self, group, message):
        raise ConnectionError("channel layer unavailable")


class AppointmentAPITests(APITestCase):
    def setUp(self) -> None:
        """Two hospitals, an admin for each, and two patients."""
        self.hospital1 = Hospital.objects.create(
            name="AIIMS New Delhi", city="Delhi", type=Hospital.TYPE_GOVERNMENT,
            address="Ansari Nagar, New Delhi", phone="011-26588500",
        )
        self.hospital2 = Hospital.objects.create(
            name="Apollo Hospital Delhi", city="Delhi", type=Hospital.TYPE_PRIVATE,
            address="Sarita Vihar, New Delhi", phone="011-26825000",
        )
        self.admin1 = User.objects.create_user(
            username="admin1", password="admin123", role="admin", name="Admin One", hospital=self.hospital1,
        )
        self.admin2 = User.objects.create_user(
            username="admin2", password="admin123", role="admin", name="Admin Two", hospital=self.hospital2,
        )
        self.patient1 = User.objects.create_user(
            username="p1", password="patient123", role="patient", name="Rahul Kumar",
            abha_id="12-3456-7890-1234", mobile="9876543210",
            date_of_birth=datetime.date(1990, 5, 15), gender="Male",
        )
        self.patient2 = User.objects.create_user(
            username="p2", password="patient123", role="patient", name="Priya Sharma",
            abha_id="98-7654-3210-9876", mobile="9123456789",
        )
        self.tomorrow = timezone.localdate() + datetime.timedelta(days=1)
        self.appt = Appointment.objects.create(
            patient=self.patient1, hospital=self.hospital1,
            hospital_name=self.hospital1.name, hospital_address=self.hospital1.address,
            doctor="Dr. Rajesh Sharma", specialty="Cardiology", date=self.tomorrow,
            time="10:00 AM", type=Appointment.TYPE_IN_PERSON, reason="Checkup",
        )

    def authenticate(self, user: User) -> APIClient:
        """Return an authenticated APIClient for the given user."""
        client = APIClient()
        client.force_authenticate(user=user)
        return client

    def booking(self, **overrides):
        body = {
            "hospital": "City General",
            "hospitalAddress": "12 Main St, Pune",
            "doctor": "Dr. Mehta",
            "specialty": "General Medicine",
            "date": self.tomorrow.isoformat(),
            "time": "11:30 AM",
            "type": "In-person",
            "reason": "Fever for three days",
        }
        body.update(overrides)
        return body

    # ------------------------------------------------------------------
    # Booking and auto-onboarding
    # ------------------------------------------------------------------
    def test_booking_unknown_hospital_onboards_it(self):
        """A name with no matching hospital creates exactly one hospital with the city from the address."""
        client = self.authenticate(self.patient1)
        before = Hospital.objects.count()
        response = client.post("/api/appointments", self.booking(hospitalId="0"), format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(Hospital.objects.count(), before + 1)
        created = Hospital.objects.get(name="City General")
        self.assertEqual(created.city, "Pune")
        self.assertEqual(created.type, Hospital.TYPE_PRIVATE)
        self.assertEqual(created.emergency_phone, "108")
        data = response.json()["data"]
        self.assertEqual(data["status"], "pending")
        self.assertEqual(data["hospital"]["city"], "Pune")
        self.assertEqual(data["hospitalName"], "City General")

    def test_booking_same_name_twice_reuses_hospital(self):
        client = self.authenticate(self.patient1)
        client.post("/api/appointments", self.booking(), format="json")
        client.post("/api/appointments", self.booking(time="04:00 PM"), format="json")
        self.assertEqual(Hospital.objects.filter(name="City General").count(), 1)

    def test_booking_by_id_uses_existing_hospital(self):
        client = self.authenticate(self.patient1)
        response = client.post(
            "/api/appointments",
            self.booking(hospitalId=str(self.hospital2.id), hospital="Some Other Name"),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        data = response.json()["data"]
        self.assertEqual(data["hospitalId"], self.hospital2.id)
        self.assertEqual(data["hospitalName"], self.hospital2.name)
        self.assertEqual(data["hospitalAddress"], self.hospital2.address)

    def test_booking_validation(self):
        client = self.authenticate(self.patient1)
        yesterday = (timezone.localdate() - datetime.timedelta(days=1)).isoformat()
        response = client.post("/api/appointments", self.booking(date=yesterday, doctor="", type="Home"), format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        errors = response.json()["errors"]
        self.assertIn("date", errors)
        self.assertIn("doctor", errors)
        self.assertIn("type", errors)

    def test_booking_rejects_values_longer_than_columns(self):
        client = self.authenticate(self.patient1)
        hospitals = Hospital.objects.count()
        response = client.post(
            "/api/appointments",
            self.booking(hospital="H" * 300, doctor="D" * 300, specialty="S" * 121, time="T" * 100),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        errors = response.json()["errors"]
        for field in ("hospital", "doctor", "specialty", "time"):
            self.assertIn(field, errors)
        self.assertEqual(Hospital.objects.count(), hospitals)
        self.assertEqual(Appointment.objects.count(), 1)

    def test_city_from_address_fallbacks(self):
        self.assertEqual(city_from_address("12 Main St, Pune"), "Pune")
        self.assertEqual(city_from_address("Sector 5, Salt Lake,  Kolkata "), "Kolkata")
        self.assertEqual(city_from_address(None), "Unknown City")
        self.assertEqual(city_from_address(""), "Unknown City")
        self.assertEqual(city_from_address("Near the bus stand"), "Unknown City")
        self.assertEqual(city_from_address("Ring Road,  "), "Unknown City")

    def test_booking_without_address_onboards_with_defaults(self):
        client = self.authenticate(self.patient1)
        body = self.booking(hospital="Lakeview Clinic")
        del body["hospitalAddress"]
        response = client.post("/api/appointments", body, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        created = Hospital.objects.get(name="Lakeview Clinic")
        self.assertEqual(created.city, "Unknown City")
        self.assertEqual(created.address, "Address not provided")
        self.assertEqual(created.phone, "0000000000")

    def test_booking_unknown_id_falls_back_to_name(self):
        client = self.authenticate(self.patient1)
        before = Hospital.objects.count()
        response = client.post(
            "/api/appointments",
            self.booking(hospitalId="987654", hospital=self.hospital2.name),
            format="json",
        )
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.json()["data"]["hospitalId"], self.hospital2.id)
        self.assertEqual(Hospital.objects.count(), before)

    def test_booking_fails_when_hospital_cannot_be_created(self):
        # the derived city exceeds its column, so the new hospital fails validation
        client = self.authenticate(self.patient1)
        before = Hospital.objects.count()
        with self.assertLogs("portal.services.appointments", level="ERROR"):
            response = client.post(
                "/api/appointments",
                self.booking(hospital="Hilltop Care", hospitalAddress="Plot 9, " + "C" * 150),
                format="json",
            )
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["message"], "Unable to resolve hospital for this appointment")
        self.assertEqual(Hospital.objects.count(), before)
        self.assertEqual(Appointment.objects.count(), 1)

    def test_only_patients_can_book(self):
        client = self.authenticate(self.admin1)
        response = client.post("/api/appointments", self.booking(), format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_patient_lists_only_own_appointments(self):
        later = Appointment.objects.create(
            patient=self.patient1, hospital=self.hospital2, hospital_name=self.hospital2.name,
            doctor="Dr. Gupta", specialty="Cardiology", date=self.tomorrow + datetime.timedelta(days=5),
            time="09:00 AM", type=Appointment.TYPE_TELEMEDICINE, reason="Follow-up",
        )
        Appointment.objects.create(
            patient=self.patient2, hospital=self.hospital1, hospital_name=self.hospital1.name,
            doctor="Dr. Patel", specialty="Orthopedics", date=self.tomorrow,
            time="03:00 PM", type=Appointment.TYPE_IN_PERSON, reason="Knee pain",
        )
        response = self.authenticate(self.patient1).get("/api/appointments")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        body = response.json()
        self.assertEqual(body["count"], 2)
        # newest date first
        self.assertEqual([a["id"] for a in body["data"]], [later.id, self.appt.id])

    # ------------------------------------------------------------------
    # Admin updates
    # ------------------------------------------------------------------
    def test_admin_confirm_stamps_confirmation_once(self):
        client = self.authenticate(self.admin1)
        response = client.put(f"/api/appointments/{self.appt.id}", {"status": "confirmed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        data = response.json()["data"]
        self.assertIsNotNone(data["confirmedAt"])
        self.assertEqual(data["confirmedBy"], self.admin1.id)
        self.assertEqual(data["patient"]["abhaId"], "12-3456-7890-1234")
        first = Appointment.objects.get(pk=self.appt.id).confirmed_at

        # already confirmed: the stamp is left alone
        client.put(f"/api/appointments/{self.appt.id}", {"status": "confirmed", "notes": "bring reports"}, format="json")
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.confirmed_at, first)
        self.assertEqual(self.appt.notes, "bring reports")

    def test_reconfirming_after_pending_stamps_again(self):
        colleague = User.objects.create_user(
            username="admin1b", password="admin123", role="admin", name="Admin One B", hospital=self.hospital1,
        )
        self.authenticate(self.admin1).put(f"/api/appointments/{self.appt.id}", {"status": "confirmed"}, format="json")
        earlier = timezone.now() - datetime.timedelta(days=1)
        Appointment.objects.filter(pk=self.appt.id).update(confirmed_at=earlier)

        client = self.authenticate(colleague)
        client.put(f"/api/appointments/{self.appt.id}", {"status": "pending"}, format="json")
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.confirmed_at, earlier)

        response = client.put(f"/api/appointments/{self.appt.id}", {"status": "confirmed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.appt.refresh_from_db()
        self.assertGreater(self.appt.confirmed_at, earlier)
        self.assertEqual(self.appt.confirmed_by, colleague)

    def test_blank_notes_keep_existing_notes(self):
        client = self.authenticate(self.admin1)
        client.put(f"/api/appointments/{self.appt.id}/transfer", {"action": "approve"}, format="json")
        self.appt.refresh_from_db()
        kept = self.appt.notes
        self.assertTrue(kept.endswith("[Transfer Approved]"))

        for notes in ("", "<script></script>"):
            response = client.put(f"/api/appointments/{self.appt.id}",
                                  {"status": "confirmed", "notes": notes}, format="json")
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.appt.refresh_from_db()
            self.assertEqual(self.appt.notes, kept)

    def test_admin_cancel_records_reason(self):
        client = self.authenticate(self.admin1)
        response = client.put(f"/api/appointments/{self.appt.id}", {"status": "cancelled"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.cancel_reason, "No reason provided")
        self.assertEqual(self.appt.cancelled_by, self.admin1)
        self.assertIsNotNone(self.appt.cancelled_at)

        # cancelling again re-stamps with the new reason
        client.put(f"/api/appointments/{self.appt.id}",
                   {"status": "cancelled", "cancelReason": "Doctor unavailable"}, format="json")
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.cancel_reason, "Doctor unavailable")

    def test_any_status_may_follow_any_other(self):
        client = self.authenticate(self.admin1)
        for value in ("completed", "pending", "rejected", "confirmed"):
            response = client.put(f"/api/appointments/{self.appt.id}", {"status": value}, format="json")
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual(response.json()["data"]["status"], value)

    def test_update_rejects_unknown_status(self):
        client = self.authenticate(self.admin1)
        response = client.put(f"/api/appointments/{self.appt.id}", {"status": "archived"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_of_other_hospital_cannot_update(self):
        client = self.authenticate(self.admin2)
        response = client.put(f"/api/appointments/{self.appt.id}", {"status": "confirmed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)
        self.assertEqual(response.json()["success"], False)
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.status, "pending")

    def test_patient_cannot_update(self):
        response = self.authenticate(self.patient1).put(
            f"/api/appointments/{self.appt.id}", {"status": "confirmed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_update_missing_appointment_is_404(self):
        response = self.authenticate(self.admin1).put("/api/appointments/999999", {"status": "confirmed"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["message"], "Appointment not found")

    # ------------------------------------------------------------------
    # Quick cancel
    # ------------------------------------------------------------------
    def test_owner_can_cancel_without_reason(self):
        response = self.authenticate(self.patient1).delete(f"/api/appointments/{self.appt.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.status, "cancelled")
        self.assertEqual(self.appt.cancel_reason, "")
        self.assertIsNone(self.appt.cancelled_by)

    def test_other_patient_cannot_cancel(self):
        response = self.authenticate(self.patient2).delete(f"/api/appointments/{self.appt.id}")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_any_admin_can_cancel(self):
        response = self.authenticate(self.admin2).delete(f"/api/appointments/{self.appt.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(AuditEvent.objects.filter(action="appointment_cancel", object_id=self.appt.id).exists())

    # ------------------------------------------------------------------
    # Hospital listing
    # ------------------------------------------------------------------
    def test_hospital_list_is_scoped_and_filterable(self):
        Appointment.objects.create(
            patient=self.patient2, hospital=self.hospital2, hospital_name=self.hospital2.name,
            doctor="Dr. Gupta", specialty="Cardiology", date=self.tomorrow,
            time="09:00 AM", type=Appointment.TYPE_IN_PERSON, reason="Chest pain",
        )
        client = self.authenticate(self.admin1)
        body = client.get("/api/appointments/hospital").json()
        self.assertEqual([a["id"] for a in body["data"]], [self.appt.id])
        self.assertEqual(body["data"][0]["patient"]["name"], "Rahul Kumar")
        self.assertEqual(client.get("/api/appointments/hospital?status=confirmed").json()["count"], 0)
        # unknown status values are ignored
        self.assertEqual(client.get("/api/appointments/hospital?status=bogus").json()["count"], 1)

    def test_unbound_admin_cannot_list_hospital_appointments(self):
        floating = User.objects.create_user(username="admin3", password="admin123", role="admin")
        response = self.authenticate(floating).get("/api/appointments/hospital")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    # ------------------------------------------------------------------
    # Documents and transfer
    # ------------------------------------------------------------------
    def test_document_upload_by_url_and_delete(self):
        client = self.authenticate(self.admin1)
        url = f"/api/appointments/{self.appt.id}/documents"
        response = client.post(url, {"url": "https://example.com/rx.pdf", "notes": "<b>twice</b> daily"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        docs = response.json()["data"]
        self.assertEqual(len(docs), 1)
        self.assertEqual(docs[0]["type"], "prescription")
        self.assertEqual(docs[0]["notes"], "twice daily")
        self.assertEqual(docs[0]["uploadedBy"], self.admin1.id)

        client.post(url, {"url": "https://example.com/xray.png", "type": "x-ray"}, format="json")
        response = client.delete(f"{url}/0")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        remaining = response.json()["data"]
        self.assertEqual([d["type"] for d in remaining], ["x-ray"])

    def test_document_upload_requires_file_or_url(self):
        response = self.authenticate(self.admin1).post(f"/api/appointments/{self.appt.id}/documents", {}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["message"], "No file or URL provided")

    def test_document_delete_out_of_range(self):
        response = self.authenticate(self.admin1).delete(f"/api/appointments/{self.appt.id}/documents/3")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.json()["message"], "Document not found at specified index")

    def test_document_upload_other_hospital_forbidden(self):
        response = self.authenticate(self.admin2).post(
            f"/api/appointments/{self.appt.id}/documents", {"url": "https://example.com/a.pdf"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_document_file_upload(self):
        with tempfile.TemporaryDirectory() as media, override_settings(MEDIA_ROOT=media):
            client = self.authenticate(self.admin1)
            pdf = SimpleUploadedFile("report.pdf", b"%PDF-1.4 test", content_type="application/pdf")
            response = client.post(f"/api/appointments/{self.appt.id}/documents",
                                   {"file": pdf, "type": "report"}, format="multipart")
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            doc = AppointmentDocument.objects.get(appointment=self.appt)
            self.assertTrue(doc.url.startswith(f"/uploads/reports/doc-{self.appt.id}-"))
            self.assertTrue(doc.url.endswith(".pdf"))

            exe = SimpleUploadedFile("tool.exe", b"MZ", content_type="application/octet-stream")
            response = client.post(f"/api/appointments/{self.appt.id}/documents", {"file": exe}, format="multipart")
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_transfer_approve_and_reject(self):
        client = self.authenticate(self.admin1)
        url = f"/api/appointments/{self.appt.id}/transfer"
        response = client.put(url, {"action": "approve"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.json()["message"], "Transfer approved successfully")
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.transfer_status, "approved")
        self.assertTrue(self.appt.notes.endswith("[Transfer Approved]"))

        client.put(url, {"action": "reject"}, format="json")
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.transfer_status, "rejected")

        response = client.put(url, {"action": "maybe"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.json()["message"], 'Invalid action. Use "approve" or "reject"')

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------
    def test_broadcast_waits_for_commit(self):
        layer = _RecordingLayer()
        client = self.authenticate(self.admin1)
        with mock.patch("portal.services.notifications.get_channel_layer", return_value=layer), \
                self.captureOnCommitCallbacks() as callbacks:
            response = client.put(f"/api/appointments/{self.appt.id}", {"status": "confirmed"}, format="json")
            self.assertEqual(response.status_code, status.HTTP_200_OK)
            self.assertEqual(layer.sent, [])
            for callback in callbacks:
                callback()
        groups = [group for group, _ in layer.sent]
        self.assertEqual(groups, [f"appointments.user.{self.patient1.id}", f"appointments.hospital.{self.hospital1.id}"])
        self.assertEqual(layer.sent[0][1]["status"], "confirmed")

    def test_channel_layer_failure_does_not_fail_requests(self):
        patient = self.authenticate(self.patient1)
        admin = self.authenticate(self.admin1)
        with mock.patch("portal.services.notifications.get_channel_layer", return_value=_UnavailableLayer()), \
                self.assertLogs("portal.services.notifications", level="WARNING"):
            with self.captureOnCommitCallbacks(execute=True):
                response = patient.post("/api/appointments", self.booking(), format="json")
            self.assertEqual(response.status_code, status.HTTP_201_CREATED)

            with self.captureOnCommitCallbacks(execute=True):
                response = admin.put(f"/api/appointments/{self.appt.id}", {"status": "confirmed"}, format="json")
            self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.assertEqual(Appointment.objects.filter(hospital_name="City General").count(), 1)
        self.appt.refresh_from_db()
        self.assertEqual(self.appt.status, "confirmed")
