from django.contrib import admin
from .models import Payment, UserProfile


@admin.register(UserProfile)
class UserProfileAdmin(admin.ModelAdmin):
	list_display = ('id', 'email', 'name', 'role', 'status', 'created_at')
	list_filter = ('role', 'status')
	search_fields = ('email', 'name')
	exclude = ('password_hash',)


@admin.register(Payment)
class PaymentAdmin(admin.ModelAdmin):
	list_display = ('id', 'user', 'course', 'amount', 'currency', 'status', 'created_at')
	list_filter = ('status', 'currency')
	search_fields = ('user__email', 'course__title', 'transaction_id')
