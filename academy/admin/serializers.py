from django.contrib.auth.hashers import make_password
from rest_framework import serializers

from .models import Payment, Role, UserProfile


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = UserProfile
        fields = ['id', 'name', 'email', 'role', 'status', 'avatar_url', 'bio', 'phone', 'last_login', 'created_at']
        read_only_fields = ['id', 'last_login', 'created_at']


class UserCreateSerializer(serializers.ModelSerializer):
    """Admin-side user creation; password is hashed before saving"""
    password = serializers.CharField(write_only=True, min_length=6)

    class Meta:
        model = UserProfile
        fields = ['id', 'name', 'email', 'password', 'role', 'status', 'phone', 'bio']
        read_only_fields = ['id']

    def validate_email(self, value):
        value = value.strip().lower()
        if UserProfile.objects.filter(email__iexact=value).exists():
            raise serializers.ValidationError('البريد الإلكتروني مستخدم بالفعل')
        return value

    def create(self, validated_data):
        password = validated_data.pop('password')
        validated_data['password_hash'] = make_password(password)
        return UserProfile.objects.create(**validated_data)


class RegisterSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=255)
    email = serializers.EmailField(error_messages={'invalid': 'البريد الإلكتروني غير صحيح'})
    password = serializers.CharField(
        write_only=True,
        min_length=6,
        error_messages={'min_length': 'كلمة المرور يجب أن تكون 6 أحرف على الأقل'},
    )
    role = serializers.ChoiceField(choices=Role.choices, default=Role.STUDENT)
    phone = serializers.CharField(max_length=30, required=False, allow_blank=True)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)


class ProfileUpdateSerializer(serializers.ModelSerializer):
    """Fields a user may edit on their own profile"""
    class Meta:
        model = UserProfile
        fields = ['name', 'bio', 'phone', 'avatar_url']


class AvatarUploadSerializer(serializers.Serializer):
    avatar = serializers.ImageField()


class PaymentSerializer(serializers.ModelSerializer):
    user_name = serializers.CharField(source='user.name', read_only=True)
    user_email = serializers.EmailField(source='user.email', read_only=True)
    course_title = serializers.CharField(source='course.title', read_only=True)

    class Meta:
        model = Payment
        fields = [
            'id', 'user', 'user_name', 'user_email', 'course', 'course_title',
            'amount', 'currency', 'payment_method', 'transaction_id', 'status',
            'created_at', 'updated_at',
        ]
        read_only_fields = ['id', 'user', 'status', 'created_at', 'updated_at']


class PaymentCreateSerializer(serializers.Serializer):
    course = serializers.UUIDField()
    amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False, min_value=0)
    currency = serializers.CharField(max_length=10, required=False, default='USD')
    payment_method = serializers.CharField(max_length=50, required=False, allow_blank=True)
    transaction_id = serializers.CharField(max_length=255, required=False, allow_blank=True)


class PaymentStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Payment.STATUS_CHOICES)
