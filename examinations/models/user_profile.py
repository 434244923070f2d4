from django.db import models
from django.contrib.auth.models import User
from django.db.models.signals import post_save
from django.dispatch import receiver

from .lifecycle import Lifecycle


class Role(models.Model):
    class Name(models.TextChoices):
        ADMIN = 'admin', 'Admin'
        LECTURER = 'lecturer', 'Lecturer'
        STUDENT = 'student', 'Student'

    # highest first
    HIERARCHY = [Name.ADMIN, Name.LECTURER, Name.STUDENT]

    name = models.CharField(max_length=20, choices=Name.choices, unique=True)

    class Meta:
        ordering = ['id']

    def __str__(self):
        return self.get_name_display()


class UserProfile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='profile')
    roles = models.ManyToManyField('Role', blank=True, related_name='profiles')
    intake = models.ForeignKey(
        'Intake',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='profiles'
    )
    image = models.CharField(max_length=500, blank=True)
    status = models.CharField(
        max_length=10,
        choices=Lifecycle.choices,
        default=Lifecycle.ACTIVE,
        db_index=True
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-created_at']

    def __str__(self):
        return f"{self.user.username} ({', '.join(self.role_names) or '-'})"

    @property
    def role_names(self):
        """Role names ordered from the highest role down."""
        held = {role.name for role in self.roles.all()}
        return [name for name in Role.HIERARCHY if name in held]

    def has_role(self, name):
        return name in self.role_names

    @property
    def is_lecturer(self):
        return self.has_role(Role.Name.LECTURER)

    @property
    def is_admin(self):
        return self.has_role(Role.Name.ADMIN)

    @property
    def is_deleted(self):
        return self.status == Lifecycle.DELETED


@receiver(post_save, sender=User)
def create_user_profile(sender, instance, created, **kwargs):
    if created:
        UserProfile.objects.create(user=instance)


@receiver(post_save, sender=User)
def save_user_profile(sender, instance, **kwargs):
    if hasattr(instance, 'profile'):
        instance.profile.save()
