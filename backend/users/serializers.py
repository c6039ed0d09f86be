from rest_framework import serializers
from core_backend.base import BaseModelSerializer
from .models import User


class UserSerializer(BaseModelSerializer):
    full_name = serializers.CharField(read_only=True)

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'full_name', 'role', 'is_active', 'date_joined']
        read_only_fields = ['id', 'date_joined']


class StaffLoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class StaffUserWriteSerializer(BaseModelSerializer):
    """Owner-managed staff accounts. Email is unique within the tenant."""

    password = serializers.CharField(write_only=True, required=False, min_length=8, trim_whitespace=False)

    class Meta:
        model = User
        fields = ['id', 'email', 'first_name', 'last_name', 'role', 'is_active', 'password']
        read_only_fields = ['id']

    def validate_email(self, value):
        email = value.strip().lower()
        duplicates = User.objects.filter(email__iexact=email)
        if self.instance is not None:
            duplicates = duplicates.exclude(pk=self.instance.pk)
        if duplicates.exists():
            raise serializers.ValidationError("A staff member with this email already exists.")
        return email

    def validate(self, attrs):
        if self.instance is None and not attrs.get('password'):
            raise serializers.ValidationError({"password": "A password is required for new staff."})

        request = self.context.get('request')
        if self.instance is not None and request is not None and self.instance.pk == request.user.pk:
            if attrs.get('role', self.instance.role) != User.Role.OWNER or attrs.get('is_active') is False:
                raise serializers.ValidationError("You cannot demote or deactivate your own account.")
        return attrs

    def create(self, validated_data):
        password = validated_data.pop('password')
        return User.objects.create_user(password=password, **validated_data)

    def update(self, instance, validated_data):
        password = validated_data.pop('password', None)
        instance = super().update(instance, validated_data)
        if password:
            instance.set_password(password)
            instance.save(update_fields=['password'])
        return instance
