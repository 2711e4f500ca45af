from django.db import models


class Country(models.Model):
    code = models.CharField(max_length=10, unique=True)  # ISO 3166-1 alpha-2
    name = models.CharField(max_length=100)

    def __str__(self):
        return f"{self.name} ({self.code})"

    class Meta:
        ordering = ['name']
        verbose_name_plural = "Countries"


class Region(models.Model):
    """State, province or district of a country"""
    country = models.ForeignKey(Country, on_delete=models.CASCADE, related_name='regions')
    code = models.CharField(max_length=10)
    name = models.CharField(max_length=100)

    def __str__(self):
        return f"{self.name} ({self.country.code}-{self.code})"

    class Meta:
        ordering = ['name']
        constraints = [
            models.UniqueConstraint(fields=['country', 'code'], name='unique_region_code_per_country'),
        ]


class City(models.Model):
    region = models.ForeignKey(Region, on_delete=models.CASCADE, related_name='cities')
    name = models.CharField(max_length=100)

    def __str__(self):
        return self.name

    class Meta:
        ordering = ['name']
        verbose_name_plural = "Cities"
        constraints = [
            models.UniqueConstraint(fields=['region', 'name'], name='unique_city_name_per_region'),
        ]
