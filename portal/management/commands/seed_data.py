"""
Management command to populate the database with demo data.
"""
import datetime
from datetime import timedelta

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone

from portal.models import Appointment, HealthAlert, Hospital, MedicalRecord, User
from portal.services.demo import ensure_demo_admin, ensure_demo_patient, ensure_government_officer

HOSPITALS = [
    {
        'name': 'AIIMS New Delhi', 'city': 'Delhi', 'type': Hospital.TYPE_GOVERNMENT,
        'address': 'Ansari Nagar, New Delhi, Delhi 110029', 'latitude': 28.5672, 'longitude': 77.2100,
        'phone': '011-26588500', 'email': 'info@aiims.edu',
        'beds_total': 2500, 'beds_available': 450, 'icu_total': 200, 'icu_available': 35, 'rating': 4.8,
        'departments': [
            {'name': 'Cardiology', 'doctors': [{'name': 'Dr. Rajesh Sharma', 'specialty': 'Cardiology', 'available': True}]},
            {'name': 'Neurology', 'doctors': [{'name': 'Dr. Priya Verma', 'specialty': 'Neurology', 'available': True}]},
            {'name': 'Orthopedics', 'doctors': [{'name': 'Dr. Amit Patel', 'specialty': 'Orthopedics', 'available': True}]},
        ],
    },
    {
        'name': 'Apollo Hospital Delhi', 'city': 'Delhi', 'type': Hospital.TYPE_PRIVATE,
        'address': 'Sarita Vihar, New Delhi, Delhi 110076', 'latitude': 28.5413, 'longitude': 77.2843,
        'phone': '011-26825000', 'email': 'info@apollohospitals.com',
        'beds_total': 700, 'beds_available': 120, 'icu_total': 80, 'icu_available': 15, 'rating': 4.6,
        'departments': [
            {'name': 'Cardiology', 'doctors': [{'name': 'Dr. Sunita Gupta', 'specialty': 'Cardiology', 'available': True}]},
            {'name': 'Oncology', 'doctors': [{'name': 'Dr. Vikram Singh', 'specialty': 'Oncology', 'available': False}]},
        ],
    },
    {
        'name': 'Tata Memorial Hospital', 'city': 'Mumbai', 'type': Hospital.TYPE_GOVERNMENT,
        'address': 'Dr Ernest Borges Marg, Parel, Mumbai 400012', 'latitude': 19.0142, 'longitude': 72.8447,
        'phone': '022-24177000', 'email': 'info@tmc.gov.in',
        'beds_total': 629, 'beds_available': 85, 'icu_total': 50, 'icu_available': 8, 'rating': 4.7,
        'departments': [
            {'name': 'Oncology', 'doctors': [{'name': 'Dr. Ramesh Nair', 'specialty': 'Oncology', 'available': True}]},
        ],
    },
    {
        'name': 'Fortis Hospital Bangalore', 'city': 'Bangalore', 'type': Hospital.TYPE_PRIVATE,
        'address': 'Bannerghatta Road, Bangalore 560076', 'latitude': 12.8953, 'longitude': 77.5986,
        'phone': '080-66214444', 'email': 'info@fortishealthcare.com',
        'beds_total': 400, 'beds_available': 75, 'icu_total': 60, 'icu_available': 12, 'rating': 4.5,
        'departments': [
            {'name': 'Cardiology', 'doctors': [{'name': 'Dr. Kavita Rao', 'specialty': 'Cardiology', 'available': True}]},
        ],
    },
    {
        'name': 'CMC Vellore', 'city': 'Vellore', 'type': Hospital.TYPE_TRUST,
        'address': 'Ida Scudder Road, Vellore 632004', 'latitude': 12.9246, 'longitude': 79.1352,
        'phone': '0416-2281000', 'email': 'info@cmcvellore.ac.in',
        'beds_total': 2938, 'beds_available': 520, 'icu_total': 150, 'icu_available': 28, 'rating': 4.9,
        'departments': [
            {'name': 'Cardiology', 'doctors': [{'name': 'Dr. Thomas Jacob', 'specialty': 'Cardiology', 'available': True}]},
        ],
    },
]

PATIENTS = [
    ('98-7654-3210-9876', 'Priya Sharma', '9123456789', datetime.date(1995, 8, 22), 'Female', 'Koramangala, Bangalore'),
    ('45-6789-0123-4567', 'Amit Patel', '9988776655', datetime.date(1988, 3, 10), 'Male', 'Andheri West, Mumbai'),
    ('11-2233-4455-6677', 'Sneha Reddy', '9876512345', datetime.date(1992, 11, 30), 'Female', 'Banjara Hills, Hyderabad'),
]

ALERTS = [
    {
        'title': 'Dengue Prevention Protocol', 'severity': HealthAlert.SEVERITY_HIGH, 'type': 'disease',
        'description': 'Dengue cases are rising in Delhi NCR region. Take preventive measures.',
        'symptoms': ['High Fever', 'Severe Headache', 'Pain Behind Eyes', 'Joint and Muscle Pain', 'Nausea'],
        'prevention': ['Remove stagnant water from surroundings', 'Use mosquito repellents',
                       'Wear full-sleeve clothes', 'Use mosquito nets while sleeping'],
        'affected_areas': ['Delhi', 'Noida', 'Gurgaon', 'Faridabad'], 'risk_level': 85,
        'source': 'National Vector Borne Disease Control Programme',
    },
    {
        'title': 'Seasonal Flu Alert', 'severity': HealthAlert.SEVERITY_MODERATE, 'type': 'disease',
        'description': 'H3N2 influenza cases increasing across major cities.',
        'symptoms': ['Fever', 'Cough', 'Sore Throat', 'Body Ache'],
        'prevention': ['Get flu vaccination', 'Wash hands frequently', 'Avoid crowded places', 'Wear masks in public'],
        'affected_areas': ['Mumbai', 'Delhi', 'Bangalore', 'Chennai'], 'risk_level': 65,
        'source': 'Indian Council of Medical Research',
    },
    {
        'title': 'Air Quality Alert - Delhi NCR', 'severity': HealthAlert.SEVERITY_HIGH, 'type': 'pollution',
        'description': 'Air Quality Index (AQI) has reached hazardous levels.',
        'symptoms': ['Breathing Difficulty', 'Eye Irritation', 'Cough'],
        'prevention': ['Stay indoors as much as possible', 'Use N95 masks when going out',
                       'Use air purifiers at home', 'Avoid outdoor exercise'],
        'affected_areas': ['Delhi', 'Noida', 'Ghaziabad', 'Gurgaon'], 'risk_level': 90,
        'source': 'Central Pollution Control Board',
    },
    {
        'title': 'Heatwave Advisory', 'severity': HealthAlert.SEVERITY_LOW, 'type': 'weather',
        'description': 'Temperatures above 42°C expected over the coming week.',
        'symptoms': ['Dizziness', 'Dehydration', 'Headache'],
        'prevention': ['Drink plenty of water', 'Avoid going out between 12 and 4 PM'],
        'affected_areas': ['Rajasthan', 'Uttar Pradesh'], 'risk_level': 40,
        'source': 'India Meteorological Department',
    },
]


class Command(BaseCommand):
    help = 'Clear and populate the database with demo hospitals, users, appointments and alerts'

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write('Clearing existing data...')
        Appointment.objects.all().delete()
        MedicalRecord.objects.all().delete()
        HealthAlert.objects.all().delete()
        User.objects.filter(is_superuser=False).delete()
        Hospital.objects.all().delete()

        hospitals = [Hospital.objects.create(emergency_phone='108', has_oxygen=True, has_ventilators=True,
                                             has_blood_bank=True, **h) for h in HOSPITALS]
        self.stdout.write(f'Created {len(hospitals)} hospitals')

        patient = ensure_demo_patient()
        admin = ensure_demo_admin(hospitals[0])
        officer = ensure_government_officer()
        others = [self.create_patient(*row) for row in PATIENTS]
        self.stdout.write(f'Created {2 + len(others)} users and government officer {officer.username}')

        appts = self.create_appointments(patient, others, hospitals, admin)
        self.stdout.write(f'Created {len(appts)} appointments')

        records = self.create_records(patient)
        self.stdout.write(f'Created {len(records)} medical records')

        alerts = HealthAlert.objects.bulk_create([HealthAlert(**a) for a in ALERTS])
        self.stdout.write(f'Created {len(alerts)} health alerts')

        self.stdout.write(self.style.SUCCESS('Database seeding completed.'))

    def create_patient(self, abha_id, name, mobile, dob, gender, address):
        user = User(username=abha_id, abha_id=abha_id, name=name, mobile=mobile, date_of_birth=dob,
                    gender=gender, address=address, role=User.ROLE_PATIENT)
        user.set_password('patient123')
        user.save()
        return user

    def create_appointments(self, patient, others, hospitals, admin):
        today = timezone.localdate()
        rows = [
            (patient, hospitals[0], 'Dr. Rajesh Sharma', 'Cardiology', today + timedelta(days=1), '10:00 AM',
             Appointment.TYPE_IN_PERSON, 'Regular checkup for heart condition', Appointment.STATUS_CONFIRMED),
            (others[0], hospitals[3], 'Dr. Kavita Rao', 'Cardiology', today + timedelta(days=7), '02:00 PM',
             Appointment.TYPE_TELEMEDICINE, 'Follow-up consultation', Appointment.STATUS_CONFIRMED),
            (others[1], hospitals[0], 'Dr. Amit Patel', 'Orthopedics', today + timedelta(days=7), '11:00 AM',
             Appointment.TYPE_IN_PERSON, 'Knee pain consultation', Appointment.STATUS_PENDING),
            (patient, hospitals[0], 'Dr. Priya Verma', 'Neurology', today - timedelta(days=7), '09:00 AM',
             Appointment.TYPE_IN_PERSON, 'Headache consultation', Appointment.STATUS_COMPLETED),
        ]
        out = []
        for user, hospital, doctor, specialty, date, time, atype, reason, status in rows:
            confirmed = status != Appointment.STATUS_PENDING and hospital == admin.hospital
            out.append(Appointment.objects.create(
                patient=user, hospital=hospital, hospital_name=hospital.name, hospital_address=hospital.address,
                doctor=doctor, specialty=specialty, date=date, time=time, type=atype, reason=reason, status=status,
                confirmed_by=admin if confirmed else None,
                confirmed_at=timezone.now() if confirmed else None,
            ))
        return out

    def create_records(self, patient):
        today = timezone.localdate()
        return [
            MedicalRecord.objects.create(
                patient=patient, date=today - timedelta(days=7), hospital='AIIMS New Delhi',
                doctor='Dr. Priya Verma', diagnosis='Tension headache',
                prescriptions=['Paracetamol 500mg - twice daily for 3 days'], notes='Reduce screen time',
            ),
            MedicalRecord.objects.create(
                patient=patient, date=today - timedelta(days=90), hospital='AIIMS New Delhi',
                doctor='Dr. Rajesh Sharma', diagnosis='Mild hypertension',
                prescriptions=['Amlodipine 5mg - once daily'], notes='Review in 3 months',
            ),
        ]
