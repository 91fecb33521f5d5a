"""Seed a demo team and a realistic pipeline for local testing.

Every record goes through the service layer, so the generated sets, deals,
payments and commissions respect the same rules as the API.
"""

from __future__ import annotations

import random
from datetime import timedelta
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from django.utils import timezone


class Command(BaseCommand):
    help = "Seed demo team members, sets, deals, payments and costs."

    DEMO_USERS = [
        {"email": "admin@agencia.test", "first_name": "Ana", "last_name": "Mora", "role": "admin", "salary": "2500"},
        {"email": "setter@agencia.test", "first_name": "Luis", "last_name": "Vargas", "role": "setter", "salary": "900"},
        {"email": "closer1@agencia.test", "first_name": "Sofía", "last_name": "Rojas", "role": "closer", "salary": "0"},
        {"email": "closer2@agencia.test", "first_name": "Diego", "last_name": "Solís", "role": "closer", "salary": "0"},
        {"email": "delivery@agencia.test", "first_name": "Carla", "last_name": "Jiménez", "role": "delivery", "salary": "1200"},
    ]
    DEMO_PASSWORD = "demo12345!"

    PROSPECTS = [
        "Panadería La Espiga", "Barbería Norte", "Clínica Dental Sonrisa", "Gimnasio Fuerza",
        "Café Aroma", "Veterinaria Patitas", "Taller Rápido", "Floristería Jazmín",
        "Estudio Pilates Core", "Restaurante El Fogón", "Óptica Visión", "Spa Serenidad",
    ]

    def add_arguments(self, parser):
        parser.add_argument("--sets", type=int, default=30, help="How many sets to book (default: 30).")
        parser.add_argument("--days", type=int, default=60, help="Spread payments over this many past days.")
        parser.add_argument("--seed", type=int, default=42, help="Random seed for reproducible data.")

    def handle(self, *args, **options):
        rng = random.Random(options["seed"])
        with transaction.atomic():
            users = self._create_users()
            counts = self._seed_pipeline(rng, users, int(options["sets"]), int(options["days"]))
            self._seed_costs(users["admin"])

        self.stdout.write(self.style.SUCCESS(
            f"Seed complete: {len(users)} users, {counts['sets']} sets, "
            f"{counts['closed']} closed deals, {counts['payments']} payments"
        ))

    def _create_users(self):
        from accounts.models import User

        users = {}
        for entry in self.DEMO_USERS:
            user, created = User.objects.get_or_create(
                email=entry["email"],
                defaults={
                    "first_name": entry["first_name"],
                    "last_name": entry["last_name"],
                    "role": entry["role"],
                    "salary": Decimal(entry["salary"]),
                    "is_staff": entry["role"] == "admin",
                },
            )
            if created:
                user.set_password(self.DEMO_PASSWORD)
                user.save(update_fields=["password"])
            key = entry["role"] if entry["role"] != "closer" else entry["email"].split("@")[0]
            users[key] = user
        return users

    def _seed_pipeline(self, rng, users, total_sets: int, days: int) -> dict:
        from payments.services import register_payment
        from pipeline.models import SalesSet
        from pipeline.services import (
            close_deal,
            create_set,
            register_disqualification,
            register_follow_up,
        )
        from pipeline.transitions import transition_set_status

        setter = users["setter"]
        closers = [users["closer1"], users["closer2"]]
        today = timezone.localdate()
        counts = {"sets": 0, "closed": 0, "payments": 0}

        self.stdout.write(f"Booking {total_sets} sets...")
        for index in range(total_sets):
            name = f"{rng.choice(self.PROSPECTS)} #{index + 1}"
            closer = rng.choice(closers)
            sales_set = create_set(
                prospect_name=name,
                prospect_whatsapp=f"+5068{rng.randint(1000000, 9999999)}",
                prospect_ig=name.split(" #")[0].lower().replace(" ", ""),
                closer=closer,
                scheduled_at=timezone.now() + timedelta(days=rng.randint(-days, 7)),
                service_offered=rng.choice(SalesSet.Service.values),
                actor=setter,
            )
            counts["sets"] += 1

            outcome = rng.random()
            if outcome < 0.35:
                revenue = Decimal(rng.choice([500, 800, 1200, 3000]))
                collected = revenue if rng.random() < 0.6 else revenue / 2
                method = rng.choice(["transferencia", "sinpe", "tilopay"])
                close_deal(
                    sales_set.pk,
                    service_sold=rng.choice(SalesSet.Service.values),
                    revenue_total=revenue,
                    amount_collected=collected,
                    payment_method=method,
                    installment_months=rng.choice([3, 6, 12]) if method == "tilopay" else None,
                    actor=closer,
                )
                counts["closed"] += 1
                counts["payments"] += 1
                if collected < revenue and rng.random() < 0.5:
                    register_payment(
                        sales_set.pk,
                        amount_gross=revenue - collected,
                        payment_method="transferencia",
                        payment_date=today - timedelta(days=rng.randint(0, days)),
                        actor=users["admin"],
                    )
                    counts["payments"] += 1
            elif outcome < 0.55:
                register_follow_up(
                    sales_set.pk,
                    follow_up_date=today + timedelta(days=rng.randint(0, 10)),
                    actor=closer,
                )
            elif outcome < 0.7:
                register_disqualification(sales_set.pk, reason="Sin presupuesto", actor=closer)
            elif outcome < 0.85:
                transition_set_status(sales_set.pk, SalesSet.Status.NO_SHOW, actor=closer)
        return counts

    def _seed_costs(self, admin):
        from expenses.models import Expense
        from expenses.services import create_ad_spend, create_expense
        from payroll.services import generate_salary_payments

        today = timezone.localdate()
        if not Expense.objects.filter(recurring=True).exists():
            create_expense(
                category="software",
                description="Suite de diseño",
                amount_usd="54.99",
                expense_date=today.replace(day=1),
                recurring=True,
                actor=admin,
            )
        create_ad_spend(
            period_start=today - timedelta(days=30),
            period_end=today,
            amount_usd="750",
            platform="meta",
            actor=admin,
        )
        generate_salary_payments(today.strftime("%m/%Y"), actor=admin)
