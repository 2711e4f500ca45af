from django.contrib import admin
from .models import Donor, ScheduledDonation


@admin.register(Donor)
class DonorAdmin(admin.ModelAdmin):
    list_display   = ['name', 'blood_type', 'country', 'state', 'city', 'is_available']
    list_filter    = ['blood_type', 'is_available', 'country']
    search_fields  = ['name', 'user__username', 'phone', 'email']
    ordering       = ['-created_at']
    readonly_fields = ['created_at', 'updated_at']

    fieldsets = (
        ('Personal Info', {
            'fields': ('user', 'name', 'email', 'phone', 'blood_type', 'date_of_birth', 'gender')
        }),
        ('Location', {
            'fields': ('country', 'state', 'city')
        }),
        ('Availability', {
            'fields': ('is_available',)
        }),
        ('Health', {
            'fields': ('weight', 'height'),
            'classes': ('collapse',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
            'classes': ('collapse',),
        }),
    )

    actions = ['mark_available', 'mark_unavailable']

    @admin.action(description='Mark selected donors as available')
    def mark_available(self, request, queryset):
        updated = queryset.update(is_available=True)
        self.message_user(request, f'{updated} donor(s) marked as available.')

    @admin.action(description='Mark selected donors as unavailable')
    def mark_unavailable(self, request, queryset):
        updated = queryset.update(is_available=False)
        self.message_user(request, f'{updated} donor(s) marked as unavailable.')


@admin.register(ScheduledDonation)
class ScheduledDonationAdmin(admin.ModelAdmin):
    list_display  = ['donor', 'scheduled_date', 'created_at']
    list_filter   = ['scheduled_date']
    search_fields = ['donor__name']
    ordering      = ['scheduled_date']
    readonly_fields = ['created_at', 'updated_at']
