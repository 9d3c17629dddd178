"""
Abstract model mixins.

Available Mixins:
    UUIDPrimaryKeyMixin: UUID primary key for records whose ids leave the
        system (gateway metadata, meeting room names, links in emails)

Note:
    Always list mixins before BaseModel in inheritance.
"""

from __future__ import annotations

import uuid

from django.db import models


class UUIDPrimaryKeyMixin(models.Model):
    """
    Use a UUID primary key instead of an auto-increment integer.

    Ids are non-guessable and can be embedded in URLs without revealing
    record counts.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for this record",
    )

    class Meta:
        abstract = True

