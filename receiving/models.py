# models.py

from django.db import models


class StoredCollection(models.Model):
    """
    One persisted collection (products, silos, operations...) stored whole.
    The reception core always reads the full list, transforms it and writes
    it back, so there is no per-record table.
    """
    key        = models.CharField(max_length=64, primary_key=True)
    payload    = models.JSONField(default=list, blank=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["key"]

    def __str__(self):
        size = len(self.payload) if isinstance(self.payload, list) else 1
        return f"{self.key} ({size} records)"
