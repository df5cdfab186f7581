import logging

from django.db import transaction
from django.forms.models import model_to_dict
from rest_framework import status, viewsets
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from management.policies import policy_for
from .models import User
from .serializers import ProfileSerializer, LoginSerializer, SignupSerializer

logger = logging.getLogger(__name__)


class LoginView(APIView):
    serializer_class = LoginSerializer
    authentication_classes = []
    permission_classes = [AllowAny]

    def post(self, request, *args, **kwargs):
        serializer = self.serializer_class(data=request.data)
        if serializer.is_valid():
            logger.info("Login for %s", serializer.validated_data['profile']['email'])
            return Response(
                {"message": "Logged in successfully", **serializer.validated_data},
                status=status.HTTP_200_OK,
            )
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class SignupView(APIView):
    authentication_classes = []
    permission_classes = [AllowAny]
    serializer_class = SignupSerializer

    def post(self, request, *args, **kwargs):
        serializer = self.serializer_class(data=request.data)
        if serializer.is_valid():
            user = serializer.save()
            logger.info("Registered profile %s", user.pk)
            return Response(
                {"message": "User registered successfully", "data": serializer.data},
                status=status.HTTP_201_CREATED,
            )
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


class CurrentUserView(APIView):
    """Endpoint for the current authenticated profile at /api/user/."""
    permission_classes = [IsAuthenticated]

    def get(self, request, *args, **kwargs):
        serializer = ProfileSerializer(request.user, context={"request": request})
        return Response(serializer.data, status=status.HTTP_200_OK)

    def patch(self, request, *args, **kwargs):
        user = User.objects.get(pk=request.user.pk)
        serializer = ProfileSerializer(user, data=request.data, partial=True, context={"request": request})
        if not serializer.is_valid():
            return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

        policy = policy_for(User)
        previous = model_to_dict(user)
        with transaction.atomic():
            instance = serializer.save()
            if not policy.check_update(request.user, instance, previous):
                logger.warning("Profile %s tried to change its own role or status", user.pk)
                raise PermissionDenied("You cannot change your own role or status.")
        return Response(serializer.data, status=status.HTTP_200_OK)


class ProfileViewSet(viewsets.ReadOnlyModelViewSet):
    """Profiles visible to the caller."""
    serializer_class = ProfileSerializer
    permission_classes = [IsAuthenticated]

    def get_queryset(self):
        return policy_for(User).scope(self.request.user)
