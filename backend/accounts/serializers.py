from django.contrib.auth import authenticate
from rest_framework import serializers
from rest_framework.exceptions import AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer
from rest_framework_simplejwt.tokens import RefreshToken

from .models import Company, CompanyMembership, User


class CompanySerializer(serializers.ModelSerializer):
    class Meta:
        model = Company
        fields = ("public_id", "name", "slug", "default_currency", "date_format")


class UserSerializer(serializers.ModelSerializer):
    class Meta:
        model = User
        fields = ("id", "email", "name")


class EmailTokenObtainPairSerializer(TokenObtainPairSerializer):
    username_field = User.EMAIL_FIELD

    def validate(self, attrs):
        authenticate_kwargs = {
            self.username_field: attrs.get("email"),
            "password": attrs.get("password"),
        }
        user = authenticate(request=self.context.get("request"), **authenticate_kwargs)
        if not user:
            raise AuthenticationFailed("Invalid credentials")
        refresh = RefreshToken.for_user(user)
        return {"access": str(refresh.access_token), "refresh": str(refresh)}


class MembershipSerializer(serializers.ModelSerializer):
    company = CompanySerializer(read_only=True)
    permissions = serializers.SerializerMethodField()

    class Meta:
        model = CompanyMembership
        fields = ("public_id", "company", "role", "is_active", "permissions")

    def get_permissions(self, obj):
        return sorted(obj.permissions.values_list("code", flat=True))


class SwitchCompanySerializer(serializers.Serializer):
    company_id = serializers.UUIDField()
