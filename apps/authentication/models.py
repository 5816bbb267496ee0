from django.db import models
from django.contrib.auth.models import AbstractUser, BaseUserManager
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    def create_user(self, mobile, password=None, **extra_fields):
        if not mobile:
            raise ValueError('The Mobile number must be set')
        if extra_fields.get('email'):
            extra_fields['email'] = self.normalize_email(extra_fields['email'])
        user = self.model(mobile=mobile, **extra_fields)
        if password:
            user.set_password(password)
        else:
            user.set_unusable_password()
        user.save(using=self._db)
        return user

    def create_superuser(self, mobile, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_phone_verified', True)

        return self.create_user(mobile, password, **extra_fields)


class User(AbstractUser):
    """
    Vault account. Identity is the mobile number, proven with a one-time
    code; the vault itself only reads `id`, the display name and
    `is_phone_verified`.
    """
    username = None # Disable username field
    mobile = models.CharField(_('mobile number'), max_length=15, unique=True)
    email = models.EmailField(_('email address'), unique=True, null=True, blank=True)

    # OTP
    is_phone_verified = models.BooleanField(default=False)
    last_otp_sent_at = models.DateTimeField(null=True, blank=True)

    USERNAME_FIELD = 'mobile'
    REQUIRED_FIELDS = []

    objects = UserManager()

    def __str__(self):
        return f"{self.display_name} ({self.mobile})"

    @property
    def display_name(self):
        return f"{self.first_name} {self.last_name}".strip() or self.mobile
