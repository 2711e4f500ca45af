from django.contrib import admin
from .models import City, Country, Region


@admin.register(Country)
class CountryAdmin(admin.ModelAdmin):
    list_display  = ['code', 'name']
    search_fields = ['code', 'name']


@admin.register(Region)
class RegionAdmin(admin.ModelAdmin):
    list_display  = ['code', 'name', 'country']
    list_filter   = ['country']
    search_fields = ['code', 'name']


@admin.register(City)
class CityAdmin(admin.ModelAdmin):
    list_display  = ['name', 'region']
    list_filter   = ['region__country']
    search_fields = ['name']
