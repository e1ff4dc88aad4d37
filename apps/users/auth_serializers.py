"""Serializers for authentication flows (register, login)."""

from __future__ import annotations

from typing import Any

from django.contrib.auth import get_user_model  # type: ignore
from django.db import transaction  # type: ignore
from rest_framework import serializers  # type: ignore

from .models import CustomUser


User = get_user_model()

# Administrators are created through the admin site, never self-registered.
SELF_SERVICE_ROLES = (CustomUser.RoleChoices.USER, CustomUser.RoleChoices.HOTEL_OWNER)


class RegisterSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(min_length=8, write_only=True)
    password_confirm = serializers.CharField(min_length=8, write_only=True)
    first_name = serializers.CharField(required=False, allow_blank=True)
    last_name = serializers.CharField(required=False, allow_blank=True)
    phone = serializers.CharField(required=False, allow_blank=True)
    role = serializers.ChoiceField(
        choices=[(role.value, role.label) for role in SELF_SERVICE_ROLES],
        required=False,
        default=CustomUser.RoleChoices.USER,
    )

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        if attrs.get("password") != attrs.get("password_confirm"):
            raise serializers.ValidationError({"password_confirm": "Passwords do not match."})
        if User.objects.filter(email__iexact=attrs.get("email")).exists():
            raise serializers.ValidationError({"email": "A user with this email already exists."})
        return attrs

    @transaction.atomic
    def create(self, validated_data: dict[str, Any]):  # type: ignore
        password = validated_data.pop("password")
        validated_data.pop("password_confirm", None)
        return User.objects.create_user(password=password, **validated_data)


class LoginSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True)

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:  # type: ignore
        try:
            user = User.objects.get(email__iexact=attrs.get("email", ""))
        except User.DoesNotExist:
            raise serializers.ValidationError({"email": "Invalid email or password."})

        if not user.is_active or not user.check_password(attrs.get("password", "")):
            raise serializers.ValidationError({"email": "Invalid email or password."})

        attrs["user"] = user
        return attrs
