import django.db.models.deletion
import django.utils.timezone
from decimal import Decimal
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("properties", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="DocumentSequence",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=100, unique=True)),
                ("next_value", models.BigIntegerField(default=1)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
        ),
        migrations.CreateModel(
            name="PMAdvance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("remaining_amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("description", models.CharField(blank=True, default="", max_length=255)),
                ("issued_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("created_by", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to=settings.AUTH_USER_MODEL)),
                ("project", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="pm_advances", to="properties.project")),
                ("user", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="pm_advances", to=settings.AUTH_USER_MODEL)),
            ],
            options={
                "ordering": ["-issued_at"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="pm_advance_amount_positive"),
                    models.CheckConstraint(
                        condition=models.Q(("remaining_amount__gte", 0), ("remaining_amount__lte", models.F("amount"))),
                        name="pm_advance_remaining_in_range",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Invoice",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("invoice_number", models.CharField(max_length=32, unique=True)),
                ("type", models.CharField(choices=[("MONTHLY_SERVICE", "Monthly service"), ("CLAIM", "Claim")], default="CLAIM", max_length=20)),
                ("amount", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("total_paid", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("remaining_balance", models.DecimalField(decimal_places=2, default=Decimal("0.00"), max_digits=14)),
                ("is_paid", models.BooleanField(default=False)),
                ("issued_at", models.DateTimeField(default=django.utils.timezone.now)),
                ("paid_at", models.DateTimeField(blank=True, null=True)),
                ("owner_association", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="invoices", to="properties.ownerassociation")),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="invoices", to="properties.operationalunit")),
            ],
            options={
                "ordering": ["-issued_at"],
                "indexes": [models.Index(fields=["unit", "type", "is_paid"], name="invoice_unit_type_paid_idx")],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("type", "CLAIM"), ("is_paid", False)),
                        fields=("unit",),
                        name="uniq_open_claim_invoice_per_unit",
                    ),
                    models.CheckConstraint(condition=models.Q(("total_paid__gte", 0)), name="invoice_total_paid_non_negative"),
                ],
            },
        ),
        migrations.CreateModel(
            name="UnitExpense",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.TextField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("source_type", models.CharField(choices=[("OFFICE_FUND", "Office fund"), ("PM_ADVANCE", "PM advance"), ("OTHER", "Other")], max_length=20)),
                ("date", models.DateField(default=django.utils.timezone.localdate)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("claim_invoice", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="expenses", to="finance.invoice")),
                ("pm_advance", models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name="expenses", to="finance.pmadvance")),
                ("recorded_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="recorded_expenses", to=settings.AUTH_USER_MODEL)),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="expenses", to="properties.operationalunit")),
            ],
            options={
                "ordering": ["-date", "-id"],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="unit_expense_amount_positive"),
                    models.CheckConstraint(
                        condition=models.Q(("pm_advance__isnull", True), ("claim_invoice__isnull", True), _connector="OR"),
                        name="unit_expense_single_funding_source",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="AccountingNote",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("description", models.TextField()),
                ("amount", models.DecimalField(decimal_places=2, max_digits=14)),
                ("status", models.CharField(choices=[("PENDING", "Pending"), ("CONVERTED", "Converted"), ("REJECTED", "Rejected")], default="PENDING", max_length=20)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("converted_at", models.DateTimeField(blank=True, null=True)),
                ("converted_to_expense", models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="+", to="finance.unitexpense")),
                ("created_by", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="accounting_notes", to=settings.AUTH_USER_MODEL)),
                ("project", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="accounting_notes", to="properties.project")),
                ("unit", models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name="accounting_notes", to="properties.operationalunit")),
            ],
            options={
                "ordering": ["-created_at"],
                "indexes": [models.Index(fields=["project", "status"], name="note_project_status_idx")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(("amount__gt", 0)), name="accounting_note_amount_positive"),
                ],
            },
        ),
        migrations.AddField(
            model_name="unitexpense",
            name="from_accounting_note",
            field=models.OneToOneField(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name="expense", to="finance.accountingnote"),
        ),
    ]
