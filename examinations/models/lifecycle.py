from django.db import models


class Lifecycle(models.TextChoices):
    ACTIVE = 'active', 'Active'
    DELETED = 'deleted', 'Deleted'
