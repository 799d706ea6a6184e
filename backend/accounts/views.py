from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import RefreshToken

from .models import CompanyMembership
from .serializers import (
    EmailTokenObtainPairSerializer,
    MembershipSerializer,
    SwitchCompanySerializer,
    UserSerializer,
)


class LoginView(generics.GenericAPIView):
    serializer_class = EmailTokenObtainPairSerializer
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        return Response(serializer.validated_data, status=status.HTTP_200_OK)


class LogoutView(APIView):
    permission_classes = [permissions.AllowAny]

    def post(self, request, *args, **kwargs):
        refresh_token = request.data.get("refresh")
        if not refresh_token:
            return Response({"detail": "Refresh token required"}, status=status.HTTP_400_BAD_REQUEST)
        try:
            token = RefreshToken(refresh_token)
            token.blacklist()
        except TokenError:
            return Response({"detail": "Invalid token"}, status=status.HTTP_400_BAD_REQUEST)
        return Response(status=status.HTTP_204_NO_CONTENT)


class MeView(APIView):
    def get(self, request):
        user = request.user
        memberships = CompanyMembership.objects.filter(
            user=user, is_active=True
        ).select_related("company")
        return Response({
            "user": UserSerializer(user).data,
            "active_company_id": str(user.active_company.public_id) if user.active_company else None,
            "memberships": MembershipSerializer(memberships, many=True).data,
        })


class SwitchCompanyView(APIView):
    def post(self, request):
        serializer = SwitchCompanySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        membership = CompanyMembership.objects.filter(
            user=request.user,
            company__public_id=serializer.validated_data["company_id"],
            company__is_active=True,
            is_active=True,
        ).select_related("company").first()
        if not membership:
            return Response({"detail": "Company not found."}, status=status.HTTP_404_NOT_FOUND)

        request.user.active_company = membership.company
        request.user.save(update_fields=["active_company"])
        return Response(MembershipSerializer(membership).data)
