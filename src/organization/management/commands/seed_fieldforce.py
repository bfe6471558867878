"""Seed database with a demo field force for development."""
from datetime import date

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone


class Command(BaseCommand):
    help = "Seed a sales director, supervisors, delegates, doctors, products and assignments"

    DEMO_PASSWORD = "fieldforce123!"

    TEAM = {
        ("Karim", "Benali"): {
            ("Nadia", "Haddad"): [("Yacine", "Mansouri"), ("Sara", "Bouzid")],
            ("Omar", "Cherif"): [("Lina", "Khelifi"), ("Amine", "Saidi")],
        },
    }

    DOCTORS = [
        ("Ahmed", "Toumi", "generaliste", "Alger Centre"),
        ("Samia", "Rahmani", "cardiologue", "Alger Centre"),
        ("Hakim", "Ferhat", "pneumologue", "Bab El Oued"),
        ("Leila", "Amrani", "interniste", "Bab El Oued"),
        ("Rachid", "Meziane", "generaliste", "Hussein Dey"),
        ("Yasmine", "Belkacem", "cardiologue", "Hussein Dey"),
    ]

    PRODUCTS = ["Cardiostat 10mg", "Pneumax 200", "Gastrolib 20mg"]

    def add_arguments(self, parser):
        parser.add_argument("--flush", action="store_true", help="Delete existing data first")
        parser.add_argument("--year", type=int, default=None, help="Year of the sales targets")

    @transaction.atomic
    def handle(self, *args, **options):
        if options["flush"]:
            self.stdout.write("Flushing existing data...")
            self._flush()

        self.stdout.write("Seeding data...")
        year = options["year"] or timezone.localdate().year
        delegates = self._create_team()
        doctors = self._create_doctors()
        products = self._create_products()
        assignments = self._create_visit_assignments(delegates, doctors)
        sales_rows = self._create_sales_assignments(delegates, products, year)

        self.stdout.write(self.style.SUCCESS(
            f"Seed complete: {len(delegates)} delegates, {len(doctors)} doctors, "
            f"{len(products)} products, {len(assignments)} visit assignments, "
            f"{len(sales_rows)} sales assignments"
        ))

    def _flush(self):
        from catalog.models import Brick, Doctor, Product
        from organization.models import Delegate
        from sales.models import SalesAssignment
        from visits.models import VisitAssignment, VisitEvent

        for model in [VisitEvent, VisitAssignment, SalesAssignment, Doctor, Brick, Product]:
            model.objects.all().delete()
        # Children before parents: the supervisor edge is protected.
        for role in [Delegate.Role.DELEGATE, Delegate.Role.SUPERVISOR, Delegate.Role.SALES_DIRECTOR]:
            Delegate.objects.filter(role=role).delete()

    def _member(self, first_name, last_name, role, supervisor=None):
        from organization.models import Delegate

        User = get_user_model()
        username = f"{first_name}.{last_name}".lower()
        user, created = User.objects.get_or_create(
            username=username,
            defaults={"first_name": first_name, "last_name": last_name},
        )
        if created:
            user.set_password(self.DEMO_PASSWORD)
            user.save(update_fields=["password"])
        member, _ = Delegate.objects.update_or_create(
            user=user,
            defaults={
                "first_name": first_name,
                "last_name": last_name,
                "role": role,
                "supervisor": supervisor,
            },
        )
        return member

    def _create_team(self):
        from organization.models import Delegate

        delegates = []
        for director_name, supervisors in self.TEAM.items():
            director = self._member(*director_name, Delegate.Role.SALES_DIRECTOR)
            for supervisor_name, members in supervisors.items():
                supervisor = self._member(*supervisor_name, Delegate.Role.SUPERVISOR, director)
                for member_name in members:
                    delegates.append(
                        self._member(*member_name, Delegate.Role.DELEGATE, supervisor)
                    )
        return delegates

    def _create_doctors(self):
        from catalog.models import Brick, Doctor

        doctors = []
        for first_name, last_name, specialty, brick_name in self.DOCTORS:
            brick, _ = Brick.objects.get_or_create(name=brick_name, region="Alger")
            doctor, _ = Doctor.objects.get_or_create(
                first_name=first_name,
                last_name=last_name,
                defaults={"specialty": specialty, "brick": brick},
            )
            doctors.append(doctor)
        return doctors

    def _create_products(self):
        from catalog.models import Product

        return [Product.objects.get_or_create(name=name)[0] for name in self.PRODUCTS]

    def _create_visit_assignments(self, delegates, doctors):
        from visits.models import VisitAssignment, VisitEvent

        today = timezone.localdate()
        assignments = []
        for index, delegate in enumerate(delegates):
            for offset in range(3):
                doctor = doctors[(index + offset) % len(doctors)]
                assignment, _ = VisitAssignment.objects.get_or_create(
                    delegate=delegate,
                    doctor=doctor,
                    defaults={"monthly_frequency": 2 if doctor.specialty == "cardiologue" else 1},
                )
                assignments.append(assignment)
                # Seeded history bypasses the recording service: one visit per past month.
                for month in range(1, today.month):
                    VisitEvent.objects.get_or_create(
                        assignment=assignment,
                        visit_date=date(today.year, month, 10),
                    )
        return assignments

    def _create_sales_assignments(self, delegates, products, year):
        from sales.models import SalesAssignment

        current_month = timezone.localdate().month if year == timezone.localdate().year else 12
        rows = []
        for index, delegate in enumerate(delegates):
            for product in products:
                target = 100 + 25 * index
                achieved = [
                    (target * (70 + 10 * (month % 4)) // 100) if month <= current_month else 0
                    for month in range(1, 13)
                ]
                row, _ = SalesAssignment.objects.update_or_create(
                    delegate=delegate,
                    product=product,
                    year=year,
                    defaults={"monthly_target": [target] * 12, "monthly_achieved": achieved},
                )
                rows.append(row)
        return rows
