from django.db import models
from django.utils import timezone
import uuid


class Role(models.TextChoices):
	ADMIN = 'admin', 'Admin'
	TEACHER = 'teacher', 'Teacher'
	STUDENT = 'student', 'Student'


# User Profile model - maps to the users table and acts as the request principal
class UserProfile(models.Model):
	STATUS_CHOICES = [
		('active', 'Active'),
		('inactive', 'Inactive'),
	]

	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, db_column='id')
	name = models.CharField(max_length=255, db_column='name')
	email = models.EmailField(unique=True, db_column='email')
	password_hash = models.CharField(max_length=255, blank=True, default='', db_column='password_hash')
	role = models.CharField(max_length=20, choices=Role.choices, default=Role.STUDENT, db_column='role')
	status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='active', db_column='status')
	avatar_url = models.TextField(blank=True, null=True, db_column='avatar_url')
	bio = models.TextField(blank=True, null=True, db_column='bio')
	phone = models.CharField(max_length=30, blank=True, null=True, db_column='phone')
	last_login = models.DateTimeField(blank=True, null=True, db_column='last_login')
	created_at = models.DateTimeField(default=timezone.now, db_column='created_at')
	updated_at = models.DateTimeField(auto_now=True, db_column='updated_at')

	class Meta:
		db_table = 'users'
		managed = True
		ordering = ['-created_at']

	def __str__(self):
		return self.name or self.email

	# DRF treats any authenticated principal through these two attributes
	@property
	def is_authenticated(self):
		return True

	@property
	def is_anonymous(self):
		return False

	@property
	def is_admin(self):
		return self.role == Role.ADMIN

	@property
	def is_teacher(self):
		return self.role == Role.TEACHER

	@property
	def is_student(self):
		return self.role == Role.STUDENT


class Payment(models.Model):
	"""A transaction recorded against a (user, course) pair"""
	STATUS_PENDING = 'pending'
	STATUS_COMPLETED = 'completed'
	STATUS_FAILED = 'failed'
	STATUS_REFUNDED = 'refunded'
	STATUS_CHOICES = [
		(STATUS_PENDING, 'Pending'),
		(STATUS_COMPLETED, 'Completed'),
		(STATUS_FAILED, 'Failed'),
		(STATUS_REFUNDED, 'Refunded'),
	]

	id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False, db_column='id')
	user = models.ForeignKey(UserProfile, on_delete=models.CASCADE, related_name='payments', db_column='user_id')
	course = models.ForeignKey('teacher.Course', on_delete=models.CASCADE, related_name='payments', db_column='course_id')
	amount = models.DecimalField(max_digits=10, decimal_places=2, db_column='amount')
	currency = models.CharField(max_length=10, default='USD', db_column='currency')
	payment_method = models.CharField(max_length=50, blank=True, null=True, db_column='payment_method')
	transaction_id = models.CharField(max_length=255, blank=True, null=True, db_column='transaction_id')
	status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_PENDING, db_column='status')
	created_at = models.DateTimeField(default=timezone.now, db_column='created_at')
	updated_at = models.DateTimeField(auto_now=True, db_column='updated_at')

	class Meta:
		db_table = 'payments'
		managed = True
		ordering = ['-created_at']

	def __str__(self):
		return f"{self.user.email} - {self.amount} {self.currency} ({self.status})"
