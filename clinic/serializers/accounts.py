from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password as django_validate_password
from django.core.exceptions import ValidationError as DjangoValidationError
from rest_framework import serializers

from .common import CleanCharField

User = get_user_model()


def _check_password(v):
    try:
        django_validate_password(v)
    except DjangoValidationError as e:
        raise serializers.ValidationError(e.messages)
    return v


class LoginSerializer(serializers.Serializer):
    username = serializers.CharField()
    password = serializers.CharField(trim_whitespace=False)

    def validate_username(self, v):
        v = (v or '').strip()
        if not v:
            raise serializers.ValidationError('Username is required.')
        return v


class SignupSerializer(serializers.Serializer):
    username = CleanCharField(min_length=3, max_length=150)
    password = serializers.CharField(min_length=6, trim_whitespace=False, write_only=True)
    email = serializers.EmailField()
    phoneNumber = CleanCharField(max_length=32, required=False, allow_blank=True, default='')

    def validate_password(self, v):
        return _check_password(v)


class UserSerializer(serializers.ModelSerializer):
    phoneNumber = serializers.CharField(source='phone_number', read_only=True)
    isFirstLogin = serializers.BooleanField(source='is_first_login', read_only=True)
    createdAt = serializers.DateTimeField(source='date_joined', read_only=True)

    class Meta:
        model = User
        fields = ['id', 'username', 'email', 'phoneNumber', 'role', 'status', 'isFirstLogin', 'createdAt']
        read_only_fields = fields


class ProfileUpdateSerializer(serializers.Serializer):
    email = serializers.EmailField(required=False)
    phoneNumber = CleanCharField(max_length=32, required=False, allow_blank=True)
    isFirstLogin = serializers.BooleanField(required=False)


class ChangePasswordSerializer(serializers.Serializer):
    oldPassword = serializers.CharField(trim_whitespace=False)
    newPassword = serializers.CharField(min_length=6, trim_whitespace=False)

    def validate_newPassword(self, v):
        return _check_password(v)


class AdminUserCreateSerializer(SignupSerializer):
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES], default=User.ROLE_USER)


class AdminUserUpdateSerializer(serializers.Serializer):
    username = CleanCharField(min_length=3, max_length=150, required=False)
    email = serializers.EmailField(required=False)
    phoneNumber = CleanCharField(max_length=32, required=False, allow_blank=True)
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES], required=False)
    status = serializers.ChoiceField(choices=[c[0] for c in User.STATUS_CHOICES], required=False)
    password = serializers.CharField(min_length=6, trim_whitespace=False, required=False, write_only=True)

    def validate_password(self, v):
        return _check_password(v)


class RoleSerializer(serializers.Serializer):
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES])


class UserListQuerySerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=[c[0] for c in User.STATUS_CHOICES], required=False)
    role = serializers.ChoiceField(choices=[c[0] for c in User.ROLE_CHOICES], required=False)
    q = serializers.CharField(required=False, allow_blank=True)
