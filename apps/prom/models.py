import uuid
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models


class PromEvent(models.Model):
    STATUS_CHOICES = (
        ("planning", "Planning"),
        ("voting", "Voting"),
        ("confirmed", "Confirmed"),
        ("completed", "Completed"),
        ("cancelled", "Cancelled"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True, default="")
    event_date = models.DateField(null=True, blank=True)
    venue_name = models.CharField(max_length=255, blank=True, default="")
    total_budget = models.DecimalField(max_digits=12, decimal_places=2, default=0, validators=[MinValueValidator(0)])
    student_count = models.PositiveIntegerField(default=0)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default="planning")

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "prom_events"
        ordering = ["-event_date", "-created_at"]

    def __str__(self):
        return self.title


class PromQuote(models.Model):
    """A vendor's priced offer for one service category of a prom event"""

    CATEGORY_CHOICES = (
        ("venue", "Venue"),
        ("catering", "Catering"),
        ("dj", "DJ"),
        ("photographer", "Photographer"),
        ("host", "Host"),
        ("decoration", "Decoration"),
        ("transportation", "Transportation"),
        ("other", "Other"),
    )

    AVAILABILITY_CHOICES = (
        ("available", "Available"),
        ("tentative", "Tentative"),
        ("unavailable", "Unavailable"),
        ("unknown", "Unknown"),
    )

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    prom = models.ForeignKey(PromEvent, related_name="quotes", on_delete=models.CASCADE)

    # vendor
    vendor_name = models.CharField(max_length=255)
    vendor_contact_name = models.CharField(max_length=255, blank=True, default="")
    vendor_phone = models.CharField(max_length=50, blank=True, default="")
    vendor_email = models.EmailField(blank=True, default="")

    category = models.CharField(max_length=20, choices=CATEGORY_CHOICES)
    price_total = models.DecimalField(max_digits=12, decimal_places=2, validators=[MinValueValidator(0)])
    price_per_participant = models.DecimalField(
        max_digits=10, decimal_places=2, null=True, blank=True, validators=[MinValueValidator(0)]
    )
    availability_status = models.CharField(max_length=20, choices=AVAILABILITY_CHOICES, default="unknown")
    rating = models.PositiveSmallIntegerField(
        null=True, blank=True, validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    pros = models.TextField(blank=True, default="")
    cons = models.TextField(blank=True, default="")
    admin_notes = models.TextField(blank=True, default="")  # never shown to non-editors

    is_finalist = models.BooleanField(default=False)
    display_order = models.IntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "prom_vendor_quotes"
        ordering = ["display_order", "created_at"]
        indexes = [
            models.Index(fields=["prom", "category"], name="prom_quote_category_idx"),
        ]

    def __str__(self):
        return f"{self.vendor_name} ({self.category}) {self.price_total}"
