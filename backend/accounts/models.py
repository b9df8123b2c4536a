from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.db import models
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    use_in_migrations = True

    def _create_user(self, email, password, **extra_fields):
        if not email:
            raise ValueError("The given email must be set")
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_user(self, email, password=None, **extra_fields):
        extra_fields.setdefault("is_staff", False)
        extra_fields.setdefault("is_superuser", False)
        return self._create_user(email, password, **extra_fields)

    def create_superuser(self, email, password, **extra_fields):
        extra_fields.setdefault("is_staff", True)
        extra_fields.setdefault("is_superuser", True)
        extra_fields.setdefault("role", User.Role.ADMIN)

        if extra_fields.get("is_staff") is not True:
            raise ValueError("Superuser must have is_staff=True.")
        if extra_fields.get("is_superuser") is not True:
            raise ValueError("Superuser must have is_superuser=True.")

        return self._create_user(email, password, **extra_fields)


class User(AbstractUser):
    class Role(models.TextChoices):
        ADMIN = "ADMIN", _("Administrator")
        ACCOUNTANT = "ACCOUNTANT", _("Accountant")
        PROJECT_MANAGER = "PROJECT_MANAGER", _("Project manager")
        RESIDENT = "RESIDENT", _("Resident")

    username = None
    email = models.EmailField("email address", unique=True)
    name = models.CharField(max_length=150)
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.RESIDENT)
    whatsapp_phone = models.CharField(max_length=32, blank=True, default="", db_index=True)
    # Project managers with this flag act on every project, assigned or not.
    can_view_all_projects = models.BooleanField(default=False)

    USERNAME_FIELD = "email"
    REQUIRED_FIELDS = ["name"]

    objects = UserManager()

    def __str__(self):
        return self.email


class ProjectAssignment(models.Model):
    """Links a project manager to a project they may act on."""

    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name="assigned_projects",
    )
    project = models.ForeignKey(
        "properties.Project",
        on_delete=models.CASCADE,
        related_name="assignments",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["user", "project"],
                name="uniq_project_assignment",
            ),
        ]

    def __str__(self):
        return f"{self.user_id}->{self.project_id}"
