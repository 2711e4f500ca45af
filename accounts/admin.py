from django.contrib import admin
from .models import CustomUser

@admin.register(CustomUser)
class CustomUserAdmin(admin.ModelAdmin):
    list_display = ('email', 'role', 'signup_reason', 'blood_type', 'eligibility_display', 'is_staff')
    search_fields = ('email', 'username')
    list_filter = ('role', 'signup_reason', 'blood_type', 'is_staff')

    @admin.display(description='Eligibility')
    def eligibility_display(self, obj):
        return obj.eligibility().status.value
